"""Command group: local configuration and the stored credential."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from assistctl.commands._base import AssistGroup
from assistctl.domain.result import ApiResult
from assistctl.infrastructure.credentials import CredentialStore, mask_key

if TYPE_CHECKING:
    from assistctl.commands._context import AppContext

_CONFIG_EXAMPLES = """\
  assistctl config set-key
  assistctl config show
  assistctl --json config show"""


@click.group(cls=AssistGroup, examples=_CONFIG_EXAMPLES)
@click.pass_obj
def config(app: AppContext) -> None:
    """Store the API key and inspect effective settings."""


@config.command(
    "set-key",
    examples="""\
  assistctl config set-key
  echo "$KEY" | assistctl config set-key --stdin""",
)
@click.option("--stdin", "from_stdin", is_flag=True, help="Read the key from standard input.")
@click.pass_obj
def set_key(app: AppContext, from_stdin: bool) -> None:
    """Save an API key to the user credentials file."""
    if from_stdin:
        key = click.get_text_stream("stdin").readline().strip()
    else:
        key = click.prompt("API key", hide_input=True, err=True).strip()
    if not key:
        raise click.UsageError("API key must not be empty.")
    path = CredentialStore().save(key)
    app.emit(ApiResult.success("set_key", {"path": str(path), "key": mask_key(key)}))


@config.command("clear-key", examples="  assistctl config clear-key")
@click.pass_obj
def clear_key(app: AppContext) -> None:
    """Remove the stored API key."""
    store = CredentialStore()
    removed = store.clear()
    app.emit(ApiResult.success("clear_key", {"path": str(store.path), "removed": removed}))


@config.command(examples="  assistctl config show")
@click.pass_obj
def show(app: AppContext) -> None:
    """Show effective settings (the key is masked)."""
    settings = app.settings
    api = app.api_config
    data = {
        "config_path": str(settings.config_path) if settings.config_path else None,
        "api": {
            "base_url": api.base_url,
            "key": mask_key(api.key) if api.key else None,
            "beta": api.beta,
            "timeout": api.timeout,
        },
        "upload": settings.upload.model_dump(mode="json"),
        "runs": settings.runs.model_dump(mode="json"),
        "plugins": settings.plugins.model_dump(mode="json"),
    }
    app.emit(ApiResult.success("config_show", data))

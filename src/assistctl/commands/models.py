"""Standalone command: list available models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from assistctl.commands._base import AssistCommand

if TYPE_CHECKING:
    from assistctl.commands._context import AppContext


@click.command(
    cls=AssistCommand,
    examples="""\
  assistctl models
  assistctl -q models | grep gpt""",
)
@click.pass_obj
def models(app: AppContext) -> None:
    """List models available to the configured key."""
    app.run("list_models", lambda api: api.models.list())

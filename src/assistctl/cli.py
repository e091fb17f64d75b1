"""Root CLI group for assistctl with global flags and command registration."""

from __future__ import annotations

import click

from assistctl import __version__
from assistctl.commands import register_commands
from assistctl.commands._base import AssistGroup
from assistctl.commands._context import AppContext
from assistctl.config.settings import AssistSettings

_CLI_EXAMPLES = """\
  assistctl config set-key
  assistctl assistant list
  assistctl assistant create --model gpt-4o --name Helper
  assistctl vector-store upload vs_abc123 docs/*.pdf
  assistctl thread ask --assistant asst_abc123 "Summarise the uploaded docs"
  assistctl --json models"""


@click.group(cls=AssistGroup, invoke_without_command=True, examples=_CLI_EXAMPLES)
@click.version_option(version=__version__, prog_name="assistctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output (ids only).")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--api-key",
    default=None,
    envvar="OPENAI_API_KEY",
    show_envvar=True,
    help="API key for this invocation.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    api_key: str | None,
) -> None:
    """assistctl — manage assistants, threads, vector stores, and files."""
    settings = AssistSettings.from_cli(
        config_path=config_path,
        api_key=api_key,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)

"""Command group: uploaded files."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from assistctl.commands._base import AssistGroup

if TYPE_CHECKING:
    from assistctl.commands._context import AppContext

_FILE_EXAMPLES = """\
  assistctl file list
  assistctl file upload report.pdf
  assistctl file show file-abc123
  assistctl file delete file-abc123 --yes"""


@click.group(cls=AssistGroup, examples=_FILE_EXAMPLES)
@click.pass_obj
def file(app: AppContext) -> None:
    """List, upload, inspect, and delete files."""


@file.command(
    "list",
    examples="""\
  assistctl file list
  assistctl file list --purpose assistants""",
)
@click.option("--purpose", default=None, help="Only files with this purpose.")
@click.pass_obj
def list_cmd(app: AppContext, purpose: str | None) -> None:
    """List uploaded files."""
    app.run("list_files", lambda api: api.files.list(purpose))


@file.command(examples="  assistctl file show file-abc123")
@click.argument("file_id")
@click.pass_obj
def show(app: AppContext, file_id: str) -> None:
    """Show one file."""
    app.run("fetch_file", lambda api: api.files.fetch(file_id))


@file.command(examples="  assistctl file delete file-abc123 --yes")
@click.argument("file_id")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def delete(app: AppContext, file_id: str, yes: bool) -> None:
    """Delete a file."""
    if not yes:
        click.confirm(f"Delete file {file_id}?", abort=True, err=True)
    app.run("delete_file", lambda api: api.files.delete(file_id))


@file.command(
    examples="""\
  assistctl file upload report.pdf
  assistctl file upload data.csv --name q3.csv"""
)
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--name", "file_name", default=None, help="Upload under this file name.")
@click.option("--purpose", default=None, help="Upload purpose (default from config).")
@click.pass_obj
def upload(app: AppContext, path: Path, file_name: str | None, purpose: str | None) -> None:
    """Upload a single file."""
    resolved = purpose or app.settings.upload.purpose
    app.run("upload_file", lambda api: api.files.upload(path, file_name, resolved))

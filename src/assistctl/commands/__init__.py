"""Subcommand modules for assistctl.

Provides register_commands() which uses deferred imports to keep
``assistctl --help`` fast as the codebase grows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from assistctl.commands.assistant import assistant
    from assistctl.commands.config_cmd import config
    from assistctl.commands.file import file
    from assistctl.commands.thread import thread
    from assistctl.commands.vector_store import vector_store

    cli.add_command(assistant)
    cli.add_command(thread)
    cli.add_command(vector_store)
    cli.add_command(file)
    cli.add_command(config)

    # --- Standalone commands ---
    from assistctl.commands.models import models

    cli.add_command(models)

"""Rich Console factory and theme for assistctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

ASSIST_THEME = Theme(
    {
        "ac.ok": "bold green",
        "ac.error": "bold red",
        "ac.warning": "bold yellow",
        "ac.op": "bold cyan",
        "ac.key": "dim",
        "ac.id": "bold blue",
        "ac.name": "bold",
        "ac.role.user": "cyan",
        "ac.role.assistant": "green",
        "ac.status.done": "green",
        "ac.status.active": "yellow",
        "ac.status.failed": "red",
    }
)

_STATUS_STYLES: dict[str, str] = {
    "completed": "ac.status.done",
    "uploaded": "ac.status.done",
    "processed": "ac.status.done",
    "queued": "ac.status.active",
    "in_progress": "ac.status.active",
    "uploading": "ac.status.active",
    "pending": "ac.status.active",
    "failed": "ac.status.failed",
    "cancelled": "ac.status.failed",
    "expired": "ac.status.failed",
    "incomplete": "ac.status.failed",
    "error": "ac.status.failed",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=ASSIST_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str) -> str:
    """Return the Rich style name for a run, file, or upload status."""
    return _STATUS_STYLES.get(status, "")


def style_for_role(role: str) -> str:
    return f"ac.role.{role}" if role in ("user", "assistant") else ""

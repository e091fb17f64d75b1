"""Rich/JSON output helpers.

The CLI renders ApiResult for humans (Rich tables and key-value blocks)
or machines (--json). The formatter layer adapts ApiResult to the
requested output mode.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from assistctl.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from assistctl.domain.result import ApiResult


class OutputSettings(BaseModel):
    """Output-mode flags resolved from the global CLI options."""

    model_config = {"frozen": True}

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ApiResult[Any], *, settings: OutputSettings | None = None) -> str:
    """Format an ApiResult for display.

    ``--json`` wins over ``--quiet``; both win over the Rich renderers.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)

"""Command group: assistant management."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from assistctl.commands._base import AssistGroup, parse_pairs
from assistctl.domain.assistants import (
    FileSearchResources,
    ResponseFormat,
    Tool,
    ToolResources,
)
from assistctl.domain.params import AssistantCreate, AssistantUpdate
from assistctl.domain.types import ListOrder, ReasoningEffort, ToolType

if TYPE_CHECKING:
    from assistctl.commands._context import AppContext

_ASSISTANT_EXAMPLES = """\
  assistctl assistant list
  assistctl assistant show asst_abc123
  assistctl assistant create --model gpt-4o --name Helper --tool file_search
  assistctl assistant update asst_abc123 --instructions "Answer briefly."
  assistctl assistant delete asst_abc123"""

_TOOL_CHOICE = click.Choice([t.value for t in ToolType if t != ToolType.FUNCTION])
_EFFORT_CHOICE = click.Choice([e.value for e in ReasoningEffort])
_FORMAT_CHOICE = click.Choice(["auto", "text", "json_object"])


@click.group(cls=AssistGroup, examples=_ASSISTANT_EXAMPLES)
@click.pass_obj
def assistant(app: AppContext) -> None:
    """List, inspect, create, update, and delete assistants."""


def _assistant_options(fn: Any) -> Any:
    """Options shared by ``create`` and ``update``."""
    options = [
        click.option("--name", default=None, help="Display name (max 256 chars)."),
        click.option("--description", default=None, help="Description (max 512 chars)."),
        click.option("--instructions", default=None, help="System instructions."),
        click.option(
            "--tool", "tools", multiple=True, type=_TOOL_CHOICE, help="Enable a tool (repeatable)."
        ),
        click.option(
            "--vector-store",
            "vector_store_ids",
            multiple=True,
            help="Vector store for file_search (repeatable).",
        ),
        click.option("--temperature", type=float, default=None, help="Sampling temperature 0-2."),
        click.option("--top-p", type=float, default=None, help="Nucleus sampling 0-1."),
        click.option(
            "--reasoning-effort",
            type=_EFFORT_CHOICE,
            default=None,
            help="Effort for reasoning models (o1/o3/o4).",
        ),
        click.option("--response-format", type=_FORMAT_CHOICE, default=None, help="Reply format."),
        click.option("--metadata", multiple=True, help="KEY=VALUE metadata (repeatable)."),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _collect(
    tools: tuple[str, ...],
    vector_store_ids: tuple[str, ...],
    response_format: str | None,
    metadata: tuple[str, ...],
    **fields: Any,
) -> dict[str, Any]:
    values: dict[str, Any] = dict(fields)
    tool_list = [Tool(type=ToolType(t)) for t in tools]
    if vector_store_ids:
        if not any(t.type == ToolType.FILE_SEARCH for t in tool_list):
            tool_list.append(Tool.file_search())
        values["tool_resources"] = ToolResources(
            file_search=FileSearchResources(vector_store_ids=list(vector_store_ids))
        )
    if tool_list:
        values["tools"] = tool_list
    if response_format:
        values["response_format"] = ResponseFormat(type=response_format)
    values["metadata"] = parse_pairs(metadata)
    return values


def _build(params_cls: type[Any], values: dict[str, Any]) -> Any:
    from pydantic import ValidationError

    try:
        return params_cls(**values)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise click.BadParameter(f"{field}: {first['msg']}") from exc


@assistant.command(
    "list",
    examples="""\
  assistctl assistant list
  assistctl assistant list --limit 5 --order asc
  assistctl -q assistant list""",
)
@click.option("--limit", default=20, type=click.IntRange(1, 100), help="Page size.")
@click.option(
    "--order", type=click.Choice([o.value for o in ListOrder]), default="desc", help="Sort order."
)
@click.option("--after", default=None, help="Cursor: list after this assistant id.")
@click.pass_obj
def list_cmd(app: AppContext, limit: int, order: str, after: str | None) -> None:
    """List assistants."""
    app.run(
        "list_assistants",
        lambda api: api.assistants.list(limit=limit, order=ListOrder(order), after=after),
    )


@assistant.command(
    examples="""\
  assistctl assistant show asst_abc123
  assistctl --json assistant show asst_abc123"""
)
@click.argument("assistant_id")
@click.pass_obj
def show(app: AppContext, assistant_id: str) -> None:
    """Show one assistant."""
    app.run("fetch_assistant", lambda api: api.assistants.fetch(assistant_id))


@assistant.command(
    examples="""\
  assistctl assistant create --model gpt-4o --name Helper
  assistctl assistant create --model o3-mini --reasoning-effort high
  assistctl assistant create --model gpt-4o --vector-store vs_abc123"""
)
@click.option("--model", required=True, help="Model id, e.g. gpt-4o.")
@_assistant_options
@click.pass_obj
def create(
    app: AppContext,
    model: str,
    tools: tuple[str, ...],
    vector_store_ids: tuple[str, ...],
    response_format: str | None,
    metadata: tuple[str, ...],
    **fields: Any,
) -> None:
    """Create an assistant."""
    values = _collect(tools, vector_store_ids, response_format, metadata, model=model, **fields)
    params = _build(AssistantCreate, values)
    app.run("create_assistant", lambda api: api.assistants.create(params))


@assistant.command(
    examples="""\
  assistctl assistant update asst_abc123 --name "Support bot"
  assistctl assistant update asst_abc123 --model gpt-4o-mini --temperature 0.2"""
)
@click.argument("assistant_id")
@click.option("--model", default=None, help="Switch to another model.")
@_assistant_options
@click.pass_obj
def update(
    app: AppContext,
    assistant_id: str,
    model: str | None,
    tools: tuple[str, ...],
    vector_store_ids: tuple[str, ...],
    response_format: str | None,
    metadata: tuple[str, ...],
    **fields: Any,
) -> None:
    """Update an assistant; only the given options change."""
    values = _collect(tools, vector_store_ids, response_format, metadata, model=model, **fields)
    params = _build(AssistantUpdate, values)
    if not params.to_body():
        raise click.UsageError("Nothing to update: pass at least one option.")
    app.run("update_assistant", lambda api: api.assistants.update(assistant_id, params))


@assistant.command(
    examples="""\
  assistctl assistant delete asst_abc123
  assistctl assistant delete asst_abc123 --yes"""
)
@click.argument("assistant_id")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def delete(app: AppContext, assistant_id: str, yes: bool) -> None:
    """Delete an assistant."""
    if not yes:
        click.confirm(f"Delete assistant {assistant_id}?", abort=True, err=True)
    app.run("delete_assistant", lambda api: api.assistants.delete(assistant_id))

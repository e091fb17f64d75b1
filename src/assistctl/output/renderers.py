"""Operation-specific Rich renderers for ApiResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from assistctl.output.console import create_console, get_output, style_for_role, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from assistctl.domain.result import ApiResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ApiResult[Any], *, verbose: bool = False) -> str:
    """Render an ApiResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ApiResult[Any]) -> str:
    """Render minimal output for ``--quiet`` mode: ids, one per line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    data = _plain(result.value)
    if result.op == "ask" and isinstance(data, dict):
        return _message_text(data)
    if isinstance(data, dict):
        if isinstance(data.get("data"), list):
            return "\n".join(_extract_id(item) for item in data["data"] if _extract_id(item))
        if isinstance(data.get("successes"), list):
            return "\n".join(str(o["file_id"]) for o in data["successes"] if o.get("file_id"))
        if data.get("id"):
            return str(data["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


def _extract_id(item: Any) -> str:
    if isinstance(item, dict) and item.get("id") is not None:
        return str(item["id"])
    return ""


def _timestamp(value: Any) -> str:
    if not isinstance(value, int):
        return ""
    return datetime.fromtimestamp(value, tz=UTC).strftime("%Y-%m-%d %H:%M")


def _size(num_bytes: Any) -> str:
    if not isinstance(num_bytes, int):
        return ""
    size = float(num_bytes)
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def _message_text(message: dict[str, Any]) -> str:
    parts = [
        part["text"]["value"]
        for part in message.get("content", [])
        if isinstance(part.get("text"), dict)
    ]
    return "\n".join(parts)


def _status_line(console: Console, result: ApiResult[Any]) -> None:
    """Print the OK status line."""
    label = Text("OK", style="ac.ok")
    op = Text(f"  {result.op}", style="ac.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="ac.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="ac.id")
    elif key == "name":
        v = Text(str(value), style="ac.name")
    elif key == "status":
        v = Text(str(value), style=style_for_status(str(value)))
    elif isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _fields(console: Console, data: dict[str, Any], keys: tuple[str, ...]) -> None:
    for key in keys:
        value = data.get(key)
        if value in (None, "", [], {}):
            continue
        if key.endswith("_at"):
            value = _timestamp(value)
        _field(console, key, value)


def _render_meta(console: Console, result: ApiResult[Any]) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _table(*columns: str) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    for i, column in enumerate(columns):
        if i == 0:
            table.add_column(column, style="ac.id", no_wrap=True)
        else:
            table.add_column(column)
    return table


def _footer(console: Console, data: dict[str, Any], noun: str) -> None:
    items = data.get("data", [])
    more = " (more available)" if data.get("has_more") else ""
    console.print(f"\n{len(items)} {noun}{more}")


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ApiResult[Any], console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="ac.error")
    op = Text(f"  {result.op}", style="ac.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if verbose and err:
        if err.status_code is not None:
            console.print(f"  status: {err.status_code}")
        console.print(f"  kind: {err.kind}")
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Assistants ────────────────────────────────────────────────────────


def _render_assistant_list(
    result: ApiResult[Any], console: Console, *, verbose: bool = False
) -> None:
    data = _plain(result.value)
    table = _table("ID", "Name", "Model", "Tools")
    if verbose:
        table.add_column("Created", style="dim")
    for item in data.get("data", []):
        row = [
            str(item.get("id", "")),
            str(item.get("name") or ""),
            str(item.get("model", "")),
            ", ".join(tool["type"] for tool in item.get("tools", [])),
        ]
        if verbose:
            row.append(_timestamp(item.get("created_at")))
        table.add_row(*row)
    console.print(table)
    _footer(console, data, "assistants")


def _render_assistant(result: ApiResult[Any], console: Console, *, verbose: bool = False) -> None:
    data = _plain(result.value)
    lines = [f"model: {data.get('model', '')}"]
    for key in ("description", "temperature", "top_p", "reasoning_effort"):
        if data.get(key) is not None:
            lines.append(f"{key}: {data[key]}")
    tools = [tool["type"] for tool in data.get("tools", [])]
    if tools:
        lines.append(f"tools: {', '.join(tools)}")
    stores = ((data.get("tool_resources") or {}).get("file_search") or {}).get(
        "vector_store_ids", []
    )
    if stores:
        lines.append(f"vector stores: {', '.join(stores)}")
    if verbose and data.get("metadata"):
        lines.append(f"metadata: {_json.dumps(data['metadata'])}")
    content = "\n".join(lines)
    if data.get("instructions"):
        content += f"\n\n{data['instructions'].strip()}"
    title = f"{data.get('id', '?')} — {data.get('name') or 'Unnamed'}"
    _status_line(console, result)
    console.print(Panel(content, title=title, border_style="dim", expand=False))


# ── Threads, messages, runs ───────────────────────────────────────────


def _render_thread(result: ApiResult[Any], console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _fields(console, _plain(result.value), ("id", "created_at", "metadata"))


def _render_messages(result: ApiResult[Any], console: Console, *, verbose: bool = False) -> None:
    data = _plain(result.value)
    # Pages arrive newest first; print as a conversation.
    for message in reversed(data.get("data", [])):
        role = str(message.get("role", ""))
        header = Text(role, style=style_for_role(role))
        if verbose:
            header.append(f"  {message.get('id', '')}  {_timestamp(message.get('created_at'))}")
        console.print(header)
        console.print(_message_text(message))
        console.print()
    _footer(console, data, "messages")


def _render_message(result: ApiResult[Any], console: Console, *, verbose: bool = False) -> None:
    data = _plain(result.value)
    if result.op == "ask":
        console.print(_message_text(data))
        if verbose:
            _render_meta(console, result)
        return
    _status_line(console, result)
    _fields(console, data, ("id", "thread_id", "role", "created_at"))


def _render_run(result: ApiResult[Any], console: Console, *, verbose: bool = False) -> None:
    data = _plain(result.value)
    _status_line(console, result)
    _fields(
        console,
        data,
        ("id", "thread_id", "assistant_id", "status", "model", "started_at", "completed_at"),
    )
    if data.get("last_error"):
        _field(console, "last_error", data["last_error"].get("message", ""))
    if verbose and data.get("usage"):
        _field(console, "usage", data["usage"])


# ── Vector stores ─────────────────────────────────────────────────────


def _render_vector_store_list(
    result: ApiResult[Any], console: Console, *, verbose: bool = False
) -> None:
    data = _plain(result.value)
    table = _table("ID", "Name", "Status", "Files", "Size")
    if verbose:
        table.add_column("Last active", style="dim")
    for item in data.get("data", []):
        status = str(item.get("status") or "")
        row: list[Any] = [
            str(item.get("id", "")),
            str(item.get("name") or ""),
            Text(status, style=style_for_status(status)),
            str((item.get("file_counts") or {}).get("total", 0)),
            _size(item.get("usage_bytes")),
        ]
        if verbose:
            row.append(_timestamp(item.get("last_active_at")))
        table.add_row(*row)
    console.print(table)
    _footer(console, data, "vector stores")


def _render_vector_store(
    result: ApiResult[Any], console: Console, *, verbose: bool = False
) -> None:
    data = _plain(result.value)
    _status_line(console, result)
    _fields(console, data, ("id", "name", "status", "created_at", "last_active_at"))
    _field(console, "size", _size(data.get("usage_bytes")))
    counts = data.get("file_counts") or {}
    _field(
        console,
        "files",
        f"{counts.get('total', 0)} total, {counts.get('completed', 0)} completed, "
        f"{counts.get('in_progress', 0)} in progress, {counts.get('failed', 0)} failed",
    )
    expires = data.get("expires_after")
    if expires:
        _field(console, "expires_after", f"{expires['days']} days after {expires['anchor']}")
    if verbose and data.get("metadata"):
        _field(console, "metadata", data["metadata"])


def _render_store_file_list(
    result: ApiResult[Any], console: Console, *, verbose: bool = False
) -> None:
    data = _plain(result.value)
    table = _table("ID", "Status", "Size", "Created")
    for item in data.get("data", []):
        status = str(item.get("status", ""))
        table.add_row(
            str(item.get("id", "")),
            Text(status, style=style_for_status(status)),
            _size(item.get("usage_bytes")),
            _timestamp(item.get("created_at")),
        )
    console.print(table)
    _footer(console, data, "files")


def _render_store_file(result: ApiResult[Any], console: Console, *, verbose: bool = False) -> None:
    data = _plain(result.value)
    _status_line(console, result)
    _fields(console, data, ("id", "vector_store_id", "status", "created_at"))
    if data.get("last_error"):
        _field(console, "last_error", data["last_error"].get("message", ""))


def _render_file_batch(result: ApiResult[Any], console: Console, *, verbose: bool = False) -> None:
    data = _plain(result.value)
    _status_line(console, result)
    _fields(console, data, ("id", "vector_store_id", "status", "created_at"))
    counts = data.get("file_counts") or {}
    _field(console, "files", f"{counts.get('completed', 0)}/{counts.get('total', 0)} completed")


def _render_upload(result: ApiResult[Any], console: Console, *, verbose: bool = False) -> None:
    data = _plain(result.value)
    _status_line(console, result)
    outcomes = [*data.get("successes", []), *data.get("failures", [])]
    table = _table("File", "State", "File ID", "Attempts")
    for outcome in outcomes:
        state = str(outcome.get("state", ""))
        table.add_row(
            str(outcome.get("file_name", "")),
            Text(state, style=style_for_status(state)),
            str(outcome.get("file_id") or ""),
            str(outcome.get("attempts", 0)),
        )
    console.print(table)
    batch = data.get("batch")
    if batch:
        _field(console, "batch_id", batch.get("id", ""))
    console.print(
        f"\n{len(data.get('successes', []))} uploaded, {len(data.get('failures', []))} failed"
    )


# ── Files and models ──────────────────────────────────────────────────


def _render_file_list(result: ApiResult[Any], console: Console, *, verbose: bool = False) -> None:
    data = _plain(result.value)
    table = _table("ID", "Filename", "Purpose", "Size", "Created")
    for item in data.get("data", []):
        table.add_row(
            str(item.get("id", "")),
            str(item.get("filename", "")),
            str(item.get("purpose", "")),
            _size(item.get("bytes")),
            _timestamp(item.get("created_at")),
        )
    console.print(table)
    _footer(console, data, "files")


def _render_file(result: ApiResult[Any], console: Console, *, verbose: bool = False) -> None:
    data = _plain(result.value)
    _status_line(console, result)
    _fields(console, data, ("id", "filename", "purpose", "status", "created_at"))
    if data.get("bytes") is not None:
        _field(console, "size", _size(data["bytes"]))


def _render_model_list(result: ApiResult[Any], console: Console, *, verbose: bool = False) -> None:
    data = _plain(result.value)
    table = _table("ID", "Owned by", "Created")
    for item in sorted(data.get("data", []), key=lambda m: str(m.get("id", ""))):
        table.add_row(
            str(item.get("id", "")),
            str(item.get("owned_by") or ""),
            _timestamp(item.get("created")),
        )
    console.print(table)
    console.print(f"\n{len(data.get('data', []))} models")


# ── Generic ───────────────────────────────────────────────────────────


def _render_generic(result: ApiResult[Any], console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + value as key-value pairs."""
    _status_line(console, result)
    data = _plain(result.value)
    if isinstance(data, dict):
        for key, value in data.items():
            _field(console, key, value)
    elif data is not None:
        _field(console, "value", data)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Assistants
    "list_assistants": _render_assistant_list,
    "fetch_assistant": _render_assistant,
    "create_assistant": _render_assistant,
    "update_assistant": _render_assistant,
    # Threads
    "create_thread": _render_thread,
    "fetch_thread": _render_thread,
    "list_messages": _render_messages,
    "add_message": _render_message,
    "ask": _render_message,
    "create_run": _render_run,
    "fetch_run": _render_run,
    "wait_for_run": _render_run,
    # Vector stores
    "list_vector_stores": _render_vector_store_list,
    "fetch_vector_store": _render_vector_store,
    "create_vector_store": _render_vector_store,
    "update_vector_store": _render_vector_store,
    "list_vector_store_files": _render_store_file_list,
    "list_batch_files": _render_store_file_list,
    "fetch_vector_store_file": _render_store_file,
    "add_vector_store_file": _render_store_file,
    "create_file_batch": _render_file_batch,
    "fetch_file_batch": _render_file_batch,
    "upload_files": _render_upload,
    # Files and models
    "list_files": _render_file_list,
    "fetch_file": _render_file,
    "upload_file": _render_file,
    "list_models": _render_model_list,
}

"""Command group: threads, messages, and runs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from assistctl.commands._base import AssistGroup, parse_pairs
from assistctl.domain.params import ThreadMessage
from assistctl.domain.types import ListOrder

if TYPE_CHECKING:
    from assistctl.commands._context import AppContext
    from assistctl.domain.result import ApiResult
    from assistctl.services.client import ApiClient

_THREAD_EXAMPLES = """\
  assistctl thread create --message "Hello"
  assistctl thread send thread_abc123 "What changed in v2?"
  assistctl thread run thread_abc123 --assistant asst_abc123 --wait
  assistctl thread messages thread_abc123
  assistctl thread ask --assistant asst_abc123 "Summarise the docs\""""


@click.group(cls=AssistGroup, examples=_THREAD_EXAMPLES)
@click.pass_obj
def thread(app: AppContext) -> None:
    """Create threads, exchange messages, and run assistants."""


@thread.command(
    examples="""\
  assistctl thread create
  assistctl thread create --message "Hi" --metadata topic=billing"""
)
@click.option("--message", "messages", multiple=True, help="Initial user message (repeatable).")
@click.option("--metadata", multiple=True, help="KEY=VALUE metadata (repeatable).")
@click.pass_obj
def create(app: AppContext, messages: tuple[str, ...], metadata: tuple[str, ...]) -> None:
    """Create a thread."""
    initial = [ThreadMessage(content=m) for m in messages] or None
    meta = parse_pairs(metadata)
    app.run("create_thread", lambda api: api.threads.create(messages=initial, metadata=meta))


@thread.command(examples="  assistctl thread show thread_abc123")
@click.argument("thread_id")
@click.pass_obj
def show(app: AppContext, thread_id: str) -> None:
    """Show one thread."""
    app.run("fetch_thread", lambda api: api.threads.fetch(thread_id))


@thread.command(examples="  assistctl thread delete thread_abc123 --yes")
@click.argument("thread_id")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def delete(app: AppContext, thread_id: str, yes: bool) -> None:
    """Delete a thread."""
    if not yes:
        click.confirm(f"Delete thread {thread_id}?", abort=True, err=True)
    app.run("delete_thread", lambda api: api.threads.delete(thread_id))


@thread.command(
    examples="""\
  assistctl thread messages thread_abc123
  assistctl thread messages thread_abc123 --limit 50 --order asc"""
)
@click.argument("thread_id")
@click.option("--limit", default=20, type=click.IntRange(1, 100), help="Page size.")
@click.option(
    "--order", type=click.Choice([o.value for o in ListOrder]), default="desc", help="Sort order."
)
@click.option("--after", default=None, help="Cursor: list after this message id.")
@click.pass_obj
def messages(app: AppContext, thread_id: str, limit: int, order: str, after: str | None) -> None:
    """List messages on a thread."""
    app.run(
        "list_messages",
        lambda api: api.threads.list_messages(
            thread_id, limit=limit, order=ListOrder(order), after=after
        ),
    )


@thread.command(examples='  assistctl thread send thread_abc123 "Hello"')
@click.argument("thread_id")
@click.argument("content")
@click.pass_obj
def send(app: AppContext, thread_id: str, content: str) -> None:
    """Add a user message to a thread."""
    app.run("add_message", lambda api: api.threads.add_message(thread_id, content))


@thread.command(
    examples="""\
  assistctl thread run thread_abc123 --assistant asst_abc123
  assistctl thread run thread_abc123 --assistant asst_abc123 --wait"""
)
@click.argument("thread_id")
@click.option("--assistant", "assistant_id", required=True, help="Assistant to run.")
@click.option("--instructions", default=None, help="Override the assistant's instructions.")
@click.option("--wait", is_flag=True, help="Poll until the run finishes.")
@click.pass_obj
def run(
    app: AppContext,
    thread_id: str,
    assistant_id: str,
    instructions: str | None,
    wait: bool,
) -> None:
    """Start a run of an assistant on a thread."""
    runs = app.settings.runs

    async def _run(api: ApiClient) -> ApiResult[Any]:
        started = await api.threads.run(thread_id, assistant_id, instructions=instructions)
        if not wait or started.value is None:
            return started
        return await api.threads.wait_for_run(
            thread_id, started.value.id, runs.poll_interval, runs.poll_timeout
        )

    app.run("create_run", _run)


@thread.command(
    examples="""\
  assistctl thread status thread_abc123 run_abc123
  assistctl thread status thread_abc123 run_abc123 --wait"""
)
@click.argument("thread_id")
@click.argument("run_id")
@click.option("--wait", is_flag=True, help="Poll until the run finishes.")
@click.pass_obj
def status(app: AppContext, thread_id: str, run_id: str, wait: bool) -> None:
    """Show the status of a run."""
    runs = app.settings.runs
    if wait:
        app.run(
            "wait_for_run",
            lambda api: api.threads.wait_for_run(
                thread_id, run_id, runs.poll_interval, runs.poll_timeout
            ),
        )
    else:
        app.run("fetch_run", lambda api: api.threads.fetch_run(thread_id, run_id))


@thread.command(
    examples="""\
  assistctl thread ask --assistant asst_abc123 "What is in the report?"
  assistctl thread ask --assistant asst_abc123 --thread thread_abc123 "And the appendix?\""""
)
@click.argument("content")
@click.option("--assistant", "assistant_id", required=True, help="Assistant to ask.")
@click.option("--thread", "thread_id", default=None, help="Continue this thread (default: new).")
@click.pass_obj
def ask(app: AppContext, content: str, assistant_id: str, thread_id: str | None) -> None:
    """Send a message, run the assistant, and print its reply."""
    runs = app.settings.runs

    async def _ask(api: ApiClient) -> ApiResult[Any]:
        target = thread_id
        if target is None:
            created = await api.threads.create()
            if created.value is None:
                return created.with_op("ask")
            target = created.value.id
        result = await api.threads.ask(
            target,
            assistant_id,
            content,
            interval=runs.poll_interval,
            timeout=runs.poll_timeout,
        )
        meta = {**(result.meta or {}), "thread_id": target}
        return result.model_copy(update={"meta": meta})

    app.run("ask", _ask)

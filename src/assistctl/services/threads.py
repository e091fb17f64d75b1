"""ThreadsClient — threads, their messages, and runs.

Runs are asynchronous on the server side: :meth:`ThreadsClient.wait_for_run`
polls a run at a fixed interval until it reaches a terminal status, and
:meth:`ThreadsClient.ask` chains send → run → wait → read reply.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from assistctl.domain.common import ListPage
from assistctl.domain.params import ListParams, RunCreate, ThreadCreate, ThreadMessage
from assistctl.domain.result import ApiError, ApiResult, ErrorKind
from assistctl.domain.threads import Message, Run, Thread
from assistctl.domain.types import ListOrder, MessageRole, RunStatus
from assistctl.infrastructure.http import resource_path
from assistctl.services.base import BaseClient

if TYPE_CHECKING:
    from assistctl.domain.assistants import ToolResources

logger = logging.getLogger(__name__)

RESOURCE = "thread"
DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_POLL_TIMEOUT = 300.0


class ThreadsClient(BaseClient):
    """Façade over the ``threads`` endpoints."""

    # --- Threads ----------------------------------------------------------

    async def create(
        self,
        messages: list[ThreadMessage] | None = None,
        metadata: dict[str, str] | None = None,
        tool_resources: ToolResources | None = None,
    ) -> ApiResult[Thread]:
        params = ThreadCreate(messages=messages, metadata=metadata, tool_resources=tool_resources)
        result = await self._transport.request(
            "create_thread", "threads", Thread, method="POST", body=params.to_body()
        )
        if result.value is None:
            return result
        return self._dispatch_event(
            result,
            "post_create",
            {"resource": RESOURCE, "resource_id": result.value.id, "name": None},
        )

    async def fetch(self, thread_id: str) -> ApiResult[Thread]:
        return await self._transport.request(
            "fetch_thread", resource_path("threads", thread_id), Thread
        )

    async def delete(self, thread_id: str) -> ApiResult[None]:
        result = await self._transport.request_no_body(
            "delete_thread", resource_path("threads", thread_id)
        )
        return self._dispatch_event(
            result, "post_delete", {"resource": RESOURCE, "resource_id": thread_id}
        )

    # --- Messages ---------------------------------------------------------

    async def list_messages(
        self,
        thread_id: str,
        limit: int = 20,
        order: ListOrder = ListOrder.DESC,
        after: str | None = None,
    ) -> ApiResult[ListPage[Message]]:
        query = ListParams(limit=limit, order=order, after=after).to_query()
        return await self._transport.request(
            "list_messages",
            resource_path("threads", thread_id, "messages"),
            ListPage[Message],
            params=query,
        )

    async def add_message(
        self,
        thread_id: str,
        content: str,
        role: MessageRole = MessageRole.USER,
    ) -> ApiResult[Message]:
        body = ThreadMessage(role=role, content=content).to_body()
        return await self._transport.request(
            "add_message",
            resource_path("threads", thread_id, "messages"),
            Message,
            method="POST",
            body=body,
        )

    # --- Runs -------------------------------------------------------------

    async def run(
        self,
        thread_id: str,
        assistant_id: str,
        *,
        model: str | None = None,
        instructions: str | None = None,
        additional_instructions: str | None = None,
    ) -> ApiResult[Run]:
        params = RunCreate(
            assistant_id=assistant_id,
            model=model,
            instructions=instructions,
            additional_instructions=additional_instructions,
        )
        return await self._transport.request(
            "create_run",
            resource_path("threads", thread_id, "runs"),
            Run,
            method="POST",
            body=params.to_body(),
        )

    async def fetch_run(self, thread_id: str, run_id: str) -> ApiResult[Run]:
        return await self._transport.request(
            "fetch_run", resource_path("threads", thread_id, "runs", run_id), Run
        )

    async def wait_for_run(
        self,
        thread_id: str,
        run_id: str,
        interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_POLL_TIMEOUT,
    ) -> ApiResult[Run]:
        """Poll a run every *interval* seconds until it reaches a terminal status.

        A failed poll is returned as-is. If *timeout* elapses first, the last
        observed (non-terminal) run is returned with a warning.
        """
        deadline = time.monotonic() + timeout
        while True:
            result = await self.fetch_run(thread_id, run_id)
            if result.value is None:
                return result.with_op("wait_for_run")
            run = result.value
            logger.debug("run %s status %s", run_id, run.status)
            if run.finished:
                return result.with_op("wait_for_run")
            if time.monotonic() + interval > deadline:
                return result.with_op("wait_for_run").with_warnings(
                    [f"Run {run_id} still {run.status} after {timeout:g}s"]
                )
            await asyncio.sleep(interval)

    async def ask(
        self,
        thread_id: str,
        assistant_id: str,
        content: str,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_POLL_TIMEOUT,
    ) -> ApiResult[Message]:
        """Send *content*, run the assistant, and return its newest reply."""
        op = "ask"
        sent = await self.add_message(thread_id, content)
        if not sent.ok:
            return sent.with_op(op)

        started = await self.run(thread_id, assistant_id)
        if started.value is None:
            return ApiResult.failure(op, _error_of(started))

        waited = await self.wait_for_run(thread_id, started.value.id, interval, timeout)
        if waited.value is None:
            return ApiResult.failure(op, _error_of(waited))
        run = waited.value
        if run.status != RunStatus.COMPLETED:
            reason = run.last_error.message if run.last_error else f"run ended as {run.status}"
            return ApiResult.failure(
                op,
                ApiError(
                    kind=ErrorKind.CUSTOM,
                    message=f"Run {run.id} did not complete: {reason}",
                    detail={"run_id": run.id, "status": str(run.status)},
                ),
                warnings=waited.warnings,
            )

        messages = await self.list_messages(thread_id, limit=20, order=ListOrder.DESC)
        if messages.value is None:
            return ApiResult.failure(op, _error_of(messages))
        for message in messages.value.data:
            if message.role == MessageRole.ASSISTANT and message.run_id in (run.id, None):
                return ApiResult.success(op, message, meta={"run_id": run.id})
        return ApiResult.failure(op, ApiError.no_data())


def _error_of(result: ApiResult[object]) -> ApiError:
    return result.error or ApiError.no_data()

"""AssistantsClient — list, fetch, create, update, delete assistants."""

from __future__ import annotations

from typing import TYPE_CHECKING

from assistctl.domain.assistants import Assistant
from assistctl.domain.common import ListPage
from assistctl.domain.params import AssistantCreate, AssistantUpdate, ListParams
from assistctl.domain.types import ListOrder
from assistctl.infrastructure.http import resource_path
from assistctl.services.base import BaseClient

if TYPE_CHECKING:
    from assistctl.domain.result import ApiResult

RESOURCE = "assistant"


class AssistantsClient(BaseClient):
    """Façade over the ``assistants`` endpoints."""

    async def list(
        self,
        limit: int = 20,
        order: ListOrder = ListOrder.DESC,
        after: str | None = None,
    ) -> ApiResult[ListPage[Assistant]]:
        query = ListParams(limit=limit, order=order, after=after).to_query()
        return await self._transport.request(
            "list_assistants", "assistants", ListPage[Assistant], params=query
        )

    async def fetch(self, assistant_id: str) -> ApiResult[Assistant]:
        return await self._transport.request(
            "fetch_assistant", resource_path("assistants", assistant_id), Assistant
        )

    async def create(self, params: AssistantCreate) -> ApiResult[Assistant]:
        result = await self._transport.request(
            "create_assistant", "assistants", Assistant, method="POST", body=params.to_body()
        )
        if result.value is None:
            return result
        return self._dispatch_event(
            result,
            "post_create",
            {"resource": RESOURCE, "resource_id": result.value.id, "name": result.value.name},
        )

    async def update(self, assistant_id: str, params: AssistantUpdate) -> ApiResult[Assistant]:
        """Modify only the fields set on *params*; unset fields are left untouched."""
        body = params.to_body()
        result = await self._transport.request(
            "update_assistant",
            resource_path("assistants", assistant_id),
            Assistant,
            method="POST",
            body=body,
        )
        return self._dispatch_event(
            result,
            "post_update",
            {"resource": RESOURCE, "resource_id": assistant_id, "fields_changed": sorted(body)},
        )

    async def delete(self, assistant_id: str) -> ApiResult[None]:
        result = await self._transport.request_no_body(
            "delete_assistant", resource_path("assistants", assistant_id)
        )
        return self._dispatch_event(
            result, "post_delete", {"resource": RESOURCE, "resource_id": assistant_id}
        )

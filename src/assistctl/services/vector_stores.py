"""VectorStoresClient — vector stores, their files, and file batches."""

from __future__ import annotations

from typing import TYPE_CHECKING

from assistctl.domain.common import ListPage
from assistctl.domain.params import (
    FileBatchCreate,
    ListParams,
    VectorStoreCreate,
    VectorStoreUpdate,
)
from assistctl.domain.result import ApiError, ApiResult
from assistctl.domain.types import ListOrder
from assistctl.domain.vector_stores import (
    ChunkingStrategy,
    VectorStore,
    VectorStoreFile,
    VectorStoreFileBatch,
)
from assistctl.infrastructure.http import resource_path
from assistctl.services.base import BaseClient

if TYPE_CHECKING:
    from collections.abc import Sequence

RESOURCE = "vector_store"


class VectorStoresClient(BaseClient):
    """Façade over the ``vector_stores`` endpoints."""

    # --- Stores -----------------------------------------------------------

    async def list(
        self,
        limit: int = 20,
        order: ListOrder = ListOrder.DESC,
        after: str | None = None,
    ) -> ApiResult[ListPage[VectorStore]]:
        query = ListParams(limit=limit, order=order, after=after).to_query()
        return await self._transport.request(
            "list_vector_stores", "vector_stores", ListPage[VectorStore], params=query
        )

    async def fetch(self, vector_store_id: str) -> ApiResult[VectorStore]:
        return await self._transport.request(
            "fetch_vector_store", resource_path("vector_stores", vector_store_id), VectorStore
        )

    async def create(self, params: VectorStoreCreate) -> ApiResult[VectorStore]:
        result = await self._transport.request(
            "create_vector_store",
            "vector_stores",
            VectorStore,
            method="POST",
            body=params.to_body(),
        )
        if result.value is None:
            return result
        return self._dispatch_event(
            result,
            "post_create",
            {"resource": RESOURCE, "resource_id": result.value.id, "name": result.value.name},
        )

    async def update(
        self, vector_store_id: str, params: VectorStoreUpdate
    ) -> ApiResult[VectorStore]:
        body = params.to_body()
        result = await self._transport.request(
            "update_vector_store",
            resource_path("vector_stores", vector_store_id),
            VectorStore,
            method="POST",
            body=body,
        )
        return self._dispatch_event(
            result,
            "post_update",
            {"resource": RESOURCE, "resource_id": vector_store_id, "fields_changed": sorted(body)},
        )

    async def delete(self, vector_store_id: str) -> ApiResult[None]:
        result = await self._transport.request_no_body(
            "delete_vector_store", resource_path("vector_stores", vector_store_id)
        )
        return self._dispatch_event(
            result, "post_delete", {"resource": RESOURCE, "resource_id": vector_store_id}
        )

    # --- Files ------------------------------------------------------------

    async def list_files(
        self,
        vector_store_id: str,
        limit: int = 20,
        order: ListOrder = ListOrder.DESC,
        after: str | None = None,
    ) -> ApiResult[ListPage[VectorStoreFile]]:
        query = ListParams(limit=limit, order=order, after=after).to_query()
        return await self._transport.request(
            "list_vector_store_files",
            resource_path("vector_stores", vector_store_id, "files"),
            ListPage[VectorStoreFile],
            params=query,
        )

    async def fetch_file(self, vector_store_id: str, file_id: str) -> ApiResult[VectorStoreFile]:
        return await self._transport.request(
            "fetch_vector_store_file",
            resource_path("vector_stores", vector_store_id, "files", file_id),
            VectorStoreFile,
        )

    async def add_file(
        self,
        vector_store_id: str,
        file_id: str,
        chunking_strategy: ChunkingStrategy | None = None,
    ) -> ApiResult[VectorStoreFile]:
        """Attach an already-uploaded file to a vector store."""
        body: dict[str, object] = {"file_id": file_id}
        if chunking_strategy is not None:
            body["chunking_strategy"] = chunking_strategy.model_dump(mode="json", exclude_none=True)
        return await self._transport.request(
            "add_vector_store_file",
            resource_path("vector_stores", vector_store_id, "files"),
            VectorStoreFile,
            method="POST",
            body=body,
        )

    async def delete_file(self, vector_store_id: str, file_id: str) -> ApiResult[None]:
        """Detach a file from a vector store; the file itself is not deleted."""
        return await self._transport.request_no_body(
            "delete_vector_store_file",
            resource_path("vector_stores", vector_store_id, "files", file_id),
        )

    # --- File batches -----------------------------------------------------

    async def create_file_batch(
        self,
        vector_store_id: str,
        file_ids: Sequence[str],
        chunking_strategy: ChunkingStrategy | None = None,
    ) -> ApiResult[VectorStoreFileBatch]:
        op = "create_file_batch"
        if not file_ids:
            return ApiResult.failure(op, ApiError.malformed_request("file batch needs file ids"))
        params = FileBatchCreate(file_ids=list(file_ids), chunking_strategy=chunking_strategy)
        return await self._transport.request(
            op,
            resource_path("vector_stores", vector_store_id, "file_batches"),
            VectorStoreFileBatch,
            method="POST",
            body=params.to_body(),
        )

    async def fetch_file_batch(
        self, vector_store_id: str, batch_id: str
    ) -> ApiResult[VectorStoreFileBatch]:
        return await self._transport.request(
            "fetch_file_batch",
            resource_path("vector_stores", vector_store_id, "file_batches", batch_id),
            VectorStoreFileBatch,
        )

    async def list_batch_files(
        self,
        vector_store_id: str,
        batch_id: str,
        limit: int = 20,
        order: ListOrder = ListOrder.DESC,
        after: str | None = None,
    ) -> ApiResult[ListPage[VectorStoreFile]]:
        query = ListParams(limit=limit, order=order, after=after).to_query()
        return await self._transport.request(
            "list_batch_files",
            resource_path("vector_stores", vector_store_id, "file_batches", batch_id, "files"),
            ListPage[VectorStoreFile],
            params=query,
        )

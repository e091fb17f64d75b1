"""FilesClient — list, fetch, delete, and multipart-upload files."""

from __future__ import annotations

import asyncio
from pathlib import Path

from assistctl.domain.common import ListPage
from assistctl.domain.files import FileObject, mime_type_for
from assistctl.domain.result import ApiError, ApiResult, ErrorKind
from assistctl.infrastructure.http import resource_path
from assistctl.services.base import BaseClient

DEFAULT_PURPOSE = "assistants"


class FilesClient(BaseClient):
    """Façade over the ``files`` endpoints."""

    async def list(self, purpose: str | None = None) -> ApiResult[ListPage[FileObject]]:
        query = {"purpose": purpose} if purpose else None
        return await self._transport.request(
            "list_files", "files", ListPage[FileObject], params=query
        )

    async def fetch(self, file_id: str) -> ApiResult[FileObject]:
        return await self._transport.request(
            "fetch_file", resource_path("files", file_id), FileObject
        )

    async def delete(self, file_id: str) -> ApiResult[None]:
        result = await self._transport.request_no_body(
            "delete_file", resource_path("files", file_id)
        )
        return self._dispatch_event(
            result, "post_delete", {"resource": "file", "resource_id": file_id}
        )

    async def upload(
        self,
        source: Path | bytes,
        file_name: str | None = None,
        purpose: str = DEFAULT_PURPOSE,
    ) -> ApiResult[FileObject]:
        """Upload *source* as ``multipart/form-data``.

        *source* is either a path (its name is used unless *file_name* is
        given) or raw bytes, in which case *file_name* is required. The
        content type is inferred from the file name's extension.
        """
        op = "upload_file"
        if isinstance(source, Path):
            name = file_name or source.name
            try:
                content = await asyncio.to_thread(source.read_bytes)
            except OSError as exc:
                return ApiResult.failure(
                    op,
                    ApiError(
                        kind=ErrorKind.FILE_INACCESSIBLE,
                        message=f"Cannot read {source}: {exc.strerror or exc}",
                        detail={"path": str(source)},
                    ),
                )
        else:
            if not file_name:
                return ApiResult.failure(
                    op, ApiError.malformed_request("file_name is required for raw bytes")
                )
            name, content = file_name, source

        return await self._transport.request(
            op,
            "files",
            FileObject,
            method="POST",
            files={"file": (name, content, mime_type_for(name))},
            data={"purpose": purpose},
        )

"""Concurrent upload orchestrator — many files into one vector store.

Each file moves through ``pending → uploading → uploaded | failed``.
Validated files upload concurrently (bounded worker pool inside an
``asyncio.TaskGroup``), each with its own retry budget. Succeeded file
ids are then associated with the vector store in a single batch call.

INVARIANT: Exactly one batch call, carrying exactly the succeeded ids,
and only when at least one file succeeded.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from assistctl.config.models import UploadConfig
from assistctl.domain.result import ApiError, ApiResult, ErrorKind
from assistctl.domain.types import UploadState
from assistctl.domain.vector_stores import VectorStoreFileBatch

if TYPE_CHECKING:
    from collections.abc import Sequence

    from assistctl.domain.vector_stores import ChunkingStrategy
    from assistctl.plugins.event_bus import EventBus
    from assistctl.services.client import ApiClient
    from assistctl.services.files import FilesClient
    from assistctl.services.vector_stores import VectorStoresClient

logger = logging.getLogger(__name__)

_MIB = 1024 * 1024


class UploadOutcome(BaseModel):
    """Final state of one file in a concurrent upload."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    path: str
    state: UploadState = UploadState.PENDING
    file_id: str | None = None
    error: ApiError | None = None
    attempts: int = 0


class UploadSummary(BaseModel):
    """Per-file outcomes (in input order) plus the batch association."""

    model_config = ConfigDict(frozen=True)

    vector_store_id: str
    successes: list[UploadOutcome] = Field(default_factory=list)
    failures: list[UploadOutcome] = Field(default_factory=list)
    batch: VectorStoreFileBatch | None = None

    @property
    def file_ids(self) -> list[str]:
        return [o.file_id for o in self.successes if o.file_id is not None]


class UploadOrchestrator:
    """Validate, upload, retry, and batch-associate a set of local files.

    Args:
        files: Client used for the per-file multipart uploads.
        vector_stores: Client used for the single batch association call.
        config: Size cap, concurrency bound, and retry policy.
        event_bus: Receives ``post_upload`` after a successful batch.
    """

    def __init__(
        self,
        files: FilesClient,
        vector_stores: VectorStoresClient,
        config: UploadConfig | None = None,
        *,
        event_bus: EventBus | None = None,
    ) -> None:
        self._files = files
        self._vector_stores = vector_stores
        self.config = config or UploadConfig()
        self._event_bus = event_bus

    @classmethod
    def from_client(cls, api: ApiClient, config: UploadConfig | None = None) -> UploadOrchestrator:
        return cls(api.files, api.vector_stores, config, event_bus=api.event_bus)

    # --- Public API -------------------------------------------------------

    async def run(
        self,
        paths: Sequence[Path | str],
        vector_store_id: str,
        chunking_strategy: ChunkingStrategy | None = None,
    ) -> ApiResult[UploadSummary]:
        """Upload *paths* concurrently and add the successes to *vector_store_id*.

        Zero successes is a ``NO_FILES_UPLOADED`` failure and no batch call
        is made. Partial failures succeed with one warning per failed file.
        Cancelling the caller cancels in-flight uploads and never starts the
        ones still waiting for a worker slot; ``CancelledError`` propagates.
        """
        op = "upload_files"
        if not paths:
            return ApiResult.failure(
                op, ApiError(kind=ErrorKind.NO_FILES_SELECTED, message="No files selected.")
            )

        slots = asyncio.Semaphore(self.config.max_concurrency)
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(self._process(Path(p), slots)) for p in paths]
        outcomes = [task.result() for task in tasks]

        successes = [o for o in outcomes if o.state == UploadState.UPLOADED]
        failures = [o for o in outcomes if o.state == UploadState.FAILED]
        summary = UploadSummary(
            vector_store_id=vector_store_id, successes=successes, failures=failures
        )
        warnings = [_failure_line(o) for o in failures]

        if not successes:
            return ApiResult.failure(
                op,
                ApiError(
                    kind=ErrorKind.NO_FILES_UPLOADED,
                    message="No files were uploaded successfully.",
                    detail={"failures": [o.model_dump(mode="json") for o in failures]},
                ),
                warnings=warnings,
            )

        batch = await self._vector_stores.create_file_batch(
            vector_store_id, summary.file_ids, chunking_strategy
        )
        if batch.value is None:
            cause = batch.error or ApiError.no_data()
            return ApiResult.failure(
                op,
                ApiError(
                    kind=ErrorKind.BATCH_ASSOCIATION_FAILED,
                    message=(
                        f"Uploaded {len(successes)} file(s) but could not add them to "
                        f"vector store {vector_store_id}: {cause.message}"
                    ),
                    status_code=cause.status_code,
                    detail={
                        "cause": str(cause.kind),
                        "summary": summary.model_dump(mode="json"),
                    },
                ),
                warnings=warnings,
            )

        summary = summary.model_copy(update={"batch": batch.value})
        if self._event_bus is not None:
            warnings.extend(
                self._event_bus.dispatch(
                    "post_upload",
                    {
                        "vector_store_id": vector_store_id,
                        "file_ids": summary.file_ids,
                        "failed": [o.file_name for o in failures],
                    },
                )
            )
        return ApiResult.success(
            op,
            summary,
            warnings=warnings,
            meta={"uploaded": len(successes), "failed": len(failures)},
        )

    def validate(self, path: Path) -> ApiError | None:
        """Return why *path* cannot be uploaded, or None if it can."""
        try:
            size = path.stat().st_size
        except OSError as exc:
            return _file_error(ErrorKind.FILE_INACCESSIBLE, path, exc.strerror or str(exc))
        if not path.is_file() or not os.access(path, os.R_OK):
            return _file_error(ErrorKind.FILE_INACCESSIBLE, path, "not a readable file")
        if size > self.config.max_file_size:
            limit = self.config.max_file_size / _MIB
            return _file_error(
                ErrorKind.FILE_TOO_LARGE,
                path,
                f"{size / _MIB:.1f} MB exceeds the {limit:g} MB limit",
                size=size,
            )
        if size == 0:
            return _file_error(ErrorKind.FILE_EMPTY, path, "file is empty")
        return None

    def retry_delay(self, attempt: int, error: ApiError) -> float:
        """Seconds to wait after failed *attempt* (1-based)."""
        base = self.config.retry_delay
        match self.config.backoff:
            case "linear":
                delay = base * attempt
            case "exponential":
                delay = base * 2 ** (attempt - 1)
            case _:
                delay = base
        if error.retry_after is not None:
            delay = max(delay, float(error.retry_after))
        return delay

    # --- Workers ----------------------------------------------------------

    async def _process(self, path: Path, slots: asyncio.Semaphore) -> UploadOutcome:
        pending = UploadOutcome(file_name=path.name, path=str(path))
        invalid = self.validate(path)
        if invalid is not None:
            logger.debug("%s: %s -> %s", path.name, UploadState.PENDING, UploadState.FAILED)
            return pending.model_copy(update={"state": UploadState.FAILED, "error": invalid})
        async with slots:
            logger.debug("%s: %s -> %s", path.name, UploadState.PENDING, UploadState.UPLOADING)
            outcome = await self._upload_with_retry(path, pending)
        logger.debug("%s: %s -> %s", path.name, UploadState.UPLOADING, outcome.state)
        return outcome

    async def _upload_with_retry(self, path: Path, pending: UploadOutcome) -> UploadOutcome:
        attempts = 0
        while True:
            attempts += 1
            result = await self._files.upload(path, purpose=self.config.purpose)
            if result.value is not None:
                return pending.model_copy(
                    update={
                        "state": UploadState.UPLOADED,
                        "file_id": result.value.id,
                        "attempts": attempts,
                    }
                )
            error = result.error or ApiError.no_data()
            if not error.retryable or attempts > self.config.max_retries:
                return pending.model_copy(
                    update={
                        "state": UploadState.FAILED,
                        "error": _upload_failed(path, error),
                        "attempts": attempts,
                    }
                )
            delay = self.retry_delay(attempts, error)
            logger.debug(
                "%s: attempt %d failed (%s), retrying in %.1fs",
                path.name,
                attempts,
                error.kind,
                delay,
            )
            await asyncio.sleep(delay)


def _file_error(kind: ErrorKind, path: Path, reason: str, **detail: object) -> ApiError:
    return ApiError(
        kind=kind,
        message=f"{path.name}: {reason}",
        detail={"path": str(path), **detail},
    )


def _upload_failed(path: Path, cause: ApiError) -> ApiError:
    if cause.kind == ErrorKind.FILE_INACCESSIBLE:
        return cause
    return ApiError(
        kind=ErrorKind.UPLOAD_FAILED,
        message=f"{path.name}: {cause.message}",
        status_code=cause.status_code,
        retry_after=cause.retry_after,
        detail={"path": str(path), "cause": str(cause.kind)},
    )


def _failure_line(outcome: UploadOutcome) -> str:
    if outcome.error is None:
        return f"{outcome.file_name}: upload failed"
    return outcome.error.message

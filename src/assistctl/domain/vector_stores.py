"""Vector store DTOs: stores, their files, file batches, and chunking strategies."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator

from assistctl.domain.common import WireModel


class FileCounts(WireModel):
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    failed: int = 0
    cancelled: int = 0


class ExpiresAfter(WireModel):
    """Expiration policy: ``days`` after the ``anchor`` timestamp."""

    anchor: Literal["last_active_at"] = "last_active_at"
    days: int = Field(ge=1, le=365)


class StaticStrategy(WireModel):
    max_chunk_size_tokens: int = Field(default=800, ge=100, le=4096)
    chunk_overlap_tokens: int = Field(default=400, ge=0)


class ChunkingStrategy(WireModel):
    """``auto`` lets the server pick; ``static`` fixes chunk size and overlap."""

    type: str = "auto"
    static: StaticStrategy | None = None

    @classmethod
    def auto(cls) -> ChunkingStrategy:
        return cls(type="auto")

    @classmethod
    def fixed(cls, max_chunk_size_tokens: int, chunk_overlap_tokens: int) -> ChunkingStrategy:
        return cls(
            type="static",
            static=StaticStrategy(
                max_chunk_size_tokens=max_chunk_size_tokens,
                chunk_overlap_tokens=chunk_overlap_tokens,
            ),
        )


class VectorStore(WireModel):
    id: str
    object: str = "vector_store"
    created_at: int
    name: str | None = None
    status: str | None = None
    usage_bytes: int = 0
    last_active_at: int | None = None
    expires_after: ExpiresAfter | None = None
    expires_at: int | None = None
    file_counts: FileCounts = Field(default_factory=FileCounts)
    metadata: dict[str, str] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value: Any) -> Any:
        return value or {}


class FileError(WireModel):
    code: str | None = None
    message: str


class VectorStoreFile(WireModel):
    id: str
    object: str = "vector_store.file"
    created_at: int
    vector_store_id: str
    status: str
    usage_bytes: int = 0
    last_error: FileError | None = None
    chunking_strategy: ChunkingStrategy | None = None

    @field_validator("last_error", mode="before")
    @classmethod
    def _string_error(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"message": value}
        return value


class VectorStoreFileBatch(WireModel):
    id: str
    object: str = "vector_store.files_batch"
    created_at: int
    vector_store_id: str
    status: str
    file_counts: FileCounts = Field(default_factory=FileCounts)

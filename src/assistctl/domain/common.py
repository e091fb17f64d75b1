"""Envelope DTOs shared by every resource: paged lists and delete acknowledgements."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class WireModel(BaseModel):
    """Base for DTOs mirroring remote JSON.

    Frozen: "mutation" is replacement via ``model_copy(update=...)``.
    Unknown remote keys are ignored so new server fields never break decoding.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")


class ListPage(WireModel, Generic[T]):
    """Cursor-paged list envelope (``{"object": "list", "data": [...]}``)."""

    object: str = "list"
    data: list[T]
    first_id: str | None = None
    last_id: str | None = None
    has_more: bool = False


class DeleteResponse(WireModel):
    id: str
    object: str
    deleted: bool

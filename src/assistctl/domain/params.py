"""Typed request parameter models.

Each model serialises to exactly the JSON body the API expects: unset
optional fields are omitted rather than sent as ``null``, for creates and
updates alike, so an update only touches the fields it names.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from assistctl.domain.assistants import ResponseFormat, Tool, ToolResources
from assistctl.domain.models import is_reasoning_model
from assistctl.domain.types import ListOrder, MessageRole, ReasoningEffort
from assistctl.domain.vector_stores import ChunkingStrategy, ExpiresAfter

_SAMPLING_FIELDS = ("temperature", "top_p")


class RequestParams(BaseModel):
    """Base for request bodies: frozen, strict about unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_body(self) -> dict[str, Any]:
        """JSON-ready body with every unset field omitted."""
        return self.model_dump(mode="json", exclude_none=True)


class _AssistantFields(RequestParams):
    name: str | None = Field(default=None, max_length=256)
    description: str | None = Field(default=None, max_length=512)
    instructions: str | None = None
    tools: list[Tool] | None = None
    tool_resources: ToolResources | None = None
    metadata: dict[str, str] | None = None
    temperature: float | None = Field(default=None, ge=0, le=2)
    top_p: float | None = Field(default=None, ge=0, le=1)
    reasoning_effort: ReasoningEffort | None = None
    response_format: ResponseFormat | None = None

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        model = body.get("model")
        if model is not None:
            if is_reasoning_model(model):
                for key in _SAMPLING_FIELDS:
                    body.pop(key, None)
            else:
                body.pop("reasoning_effort", None)
        fmt = body.get("response_format")
        if fmt is not None and fmt.get("type") == "auto":
            body["response_format"] = "auto"
        return body


class AssistantCreate(_AssistantFields):
    """Body for ``POST assistants``.

    For reasoning-family models (``o1``/``o3``/``o4``) the sampling knobs
    are dropped and ``reasoning_effort`` is sent; for every other model
    ``reasoning_effort`` is dropped.
    """

    model: str = Field(min_length=1)


class AssistantUpdate(_AssistantFields):
    """Body for ``POST assistants/{id}``; only the named fields change."""

    model: str | None = None


class ThreadMessage(RequestParams):
    role: MessageRole = MessageRole.USER
    content: str = Field(min_length=1)
    attachments: list[dict[str, Any]] | None = None
    metadata: dict[str, str] | None = None


class ThreadCreate(RequestParams):
    messages: list[ThreadMessage] | None = None
    tool_resources: ToolResources | None = None
    metadata: dict[str, str] | None = None


class RunCreate(RequestParams):
    assistant_id: str = Field(min_length=1)
    model: str | None = None
    instructions: str | None = None
    additional_instructions: str | None = None
    temperature: float | None = Field(default=None, ge=0, le=2)
    top_p: float | None = Field(default=None, ge=0, le=1)
    metadata: dict[str, str] | None = None


class VectorStoreCreate(RequestParams):
    name: str | None = None
    file_ids: list[str] | None = None
    expires_after: ExpiresAfter | None = None
    chunking_strategy: ChunkingStrategy | None = None
    metadata: dict[str, str] | None = None


class VectorStoreUpdate(RequestParams):
    name: str | None = None
    expires_after: ExpiresAfter | None = None
    metadata: dict[str, str] | None = None


class FileBatchCreate(RequestParams):
    file_ids: list[str] = Field(min_length=1)
    chunking_strategy: ChunkingStrategy | None = None


class ListParams(RequestParams):
    """Query parameters shared by cursor-paged list endpoints."""

    limit: int | None = Field(default=None, ge=1, le=100)
    order: ListOrder | None = None
    after: str | None = None
    before: str | None = None

    def to_query(self) -> dict[str, str | int]:
        return self.model_dump(mode="json", exclude_none=True)

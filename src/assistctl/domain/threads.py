"""Thread, message, and run DTOs."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from assistctl.domain.assistants import ResponseFormat, Tool, ToolResources
from assistctl.domain.common import WireModel
from assistctl.domain.types import MessageRole, RunStatus


class Thread(WireModel):
    id: str
    object: str = "thread"
    created_at: int
    metadata: dict[str, str] = Field(default_factory=dict)
    tool_resources: ToolResources | None = None

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value: Any) -> Any:
        return value or {}


class FileCitation(WireModel):
    file_id: str
    quote: str | None = None


class Annotation(WireModel):
    type: str
    text: str
    start_index: int
    end_index: int
    file_citation: FileCitation | None = None


class MessageText(WireModel):
    value: str
    annotations: list[Annotation] = Field(default_factory=list)


class MessageContent(WireModel):
    """One content part; only ``text`` parts carry a value we render."""

    type: str
    text: MessageText | None = None


class Message(WireModel):
    id: str
    object: str = "thread.message"
    created_at: int
    thread_id: str
    role: MessageRole
    content: list[MessageContent] = Field(default_factory=list)
    assistant_id: str | None = None
    run_id: str | None = None
    attachments: list[dict[str, Any]] = Field(default_factory=list)
    metadata: dict[str, str] = Field(default_factory=dict)

    @field_validator("attachments", mode="before")
    @classmethod
    def _null_attachments(cls, value: Any) -> Any:
        return value or []

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value: Any) -> Any:
        return value or {}

    @property
    def text(self) -> str:
        """Concatenated text of all ``text`` content parts."""
        return "\n".join(part.text.value for part in self.content if part.text is not None)


class Usage(WireModel):
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


class RunError(WireModel):
    code: str | None = None
    message: str

    @classmethod
    def _coerce(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"message": value}
        return value


class Run(WireModel):
    id: str
    object: str = "thread.run"
    created_at: int
    thread_id: str
    assistant_id: str
    status: RunStatus
    model: str | None = None
    instructions: str | None = None
    tools: list[Tool] = Field(default_factory=list)
    started_at: int | None = None
    expires_at: int | None = None
    cancelled_at: int | None = None
    failed_at: int | None = None
    completed_at: int | None = None
    last_error: RunError | None = None
    temperature: float | None = None
    top_p: float | None = None
    usage: Usage | None = None
    response_format: ResponseFormat | None = None
    metadata: dict[str, str] = Field(default_factory=dict)

    @field_validator("last_error", mode="before")
    @classmethod
    def _string_error(cls, value: Any) -> Any:
        return RunError._coerce(value)

    @field_validator("response_format", mode="before")
    @classmethod
    def _string_format(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"type": value}
        return value

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value: Any) -> Any:
        return value or {}

    @property
    def finished(self) -> bool:
        return self.status.terminal

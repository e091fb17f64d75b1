"""Assistant DTOs and the tool/response-format shapes they embed."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from assistctl.domain.common import WireModel
from assistctl.domain.types import ToolType


class FunctionTool(WireModel):
    name: str
    description: str | None = None
    parameters: dict[str, Any] | None = None


class Tool(WireModel):
    """An assistant tool: ``code_interpreter``, ``file_search`` or ``function``."""

    type: ToolType
    function: FunctionTool | None = None

    @classmethod
    def code_interpreter(cls) -> Tool:
        return cls(type=ToolType.CODE_INTERPRETER)

    @classmethod
    def file_search(cls) -> Tool:
        return cls(type=ToolType.FILE_SEARCH)


class FileSearchResources(WireModel):
    vector_store_ids: list[str] = Field(default_factory=list)


class CodeInterpreterResources(WireModel):
    file_ids: list[str] = Field(default_factory=list)


class ToolResources(WireModel):
    file_search: FileSearchResources | None = None
    code_interpreter: CodeInterpreterResources | None = None


class ResponseFormat(WireModel):
    """Structured response format.

    The API also accepts the bare string ``"auto"``; such values are
    normalised to ``ResponseFormat(type="auto")`` when decoding and are
    serialised back to the string form by request parameter models.
    """

    type: str = "auto"
    json_schema: dict[str, Any] | None = None

    @property
    def is_auto(self) -> bool:
        return self.type == "auto"


class Assistant(WireModel):
    id: str
    object: str = "assistant"
    created_at: int
    name: str | None = None
    description: str | None = None
    model: str
    instructions: str | None = None
    tools: list[Tool] = Field(default_factory=list)
    tool_resources: ToolResources | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
    temperature: float | None = None
    top_p: float | None = None
    reasoning_effort: str | None = None
    response_format: ResponseFormat | None = None

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
    def vector_store_ids(self) -> list[str]:
        """Vector stores attached through the file_search tool resources."""
        if self.tool_resources is None or self.tool_resources.file_search is None:
            return []
        return list(self.tool_resources.file_search.vector_store_ids)

"""Tests for wire DTO decoding."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import BaseModel

from assistctl.domain.assistants import Assistant, ResponseFormat, Tool, ToolResources
from assistctl.domain.common import ListPage
from assistctl.domain.files import FileObject, mime_type_for
from assistctl.domain.models import Model, is_reasoning_model
from assistctl.domain.params import AssistantCreate, RequestParams, VectorStoreCreate
from assistctl.domain.threads import Message, Run
from assistctl.domain.types import MessageRole, ReasoningEffort, RunStatus
from assistctl.domain.vector_stores import (
    ChunkingStrategy,
    ExpiresAfter,
    VectorStore,
    VectorStoreFile,
)
from tests.fakes import (
    assistant_json,
    file_json,
    message_json,
    page,
    run_json,
    store_file_json,
    vector_store_json,
)


class TestAssistant:
    def test_decode(self) -> None:
        assistant = Assistant.model_validate(assistant_json())
        assert assistant.vector_store_ids == ["vs_1"]
        assert assistant.tools[0].type == "file_search"

    def test_null_metadata(self) -> None:
        assistant = Assistant.model_validate(assistant_json(metadata=None))
        assert assistant.metadata == {}

    def test_unknown_fields_ignored(self) -> None:
        assistant = Assistant.model_validate(assistant_json(brand_new_field=True))
        assert assistant.id == "asst_1"

    def test_structured_response_format(self) -> None:
        assistant = Assistant.model_validate(
            assistant_json(response_format={"type": "json_object"})
        )
        assert assistant.response_format is not None
        assert not assistant.response_format.is_auto


class TestThreads:
    def test_message_text(self) -> None:
        message = Message.model_validate(message_json(role="assistant", text="Hi there"))
        assert message.role == MessageRole.ASSISTANT
        assert message.text == "Hi there"

    def test_message_null_collections(self) -> None:
        data = message_json() | {"attachments": None, "metadata": None}
        message = Message.model_validate(data)
        assert message.attachments == []
        assert message.metadata == {}

    @pytest.mark.parametrize(
        ("status", "finished"),
        [
            ("queued", False),
            ("in_progress", False),
            ("requires_action", False),
            ("completed", True),
            ("failed", True),
            ("expired", True),
        ],
    )
    def test_run_finished(self, status: str, finished: bool) -> None:
        assert Run.model_validate(run_json(status=status)).finished is finished

    def test_run_string_error(self) -> None:
        run = Run.model_validate(run_json(status="failed", last_error="quota exceeded"))
        assert run.status == RunStatus.FAILED
        assert run.last_error is not None
        assert run.last_error.message == "quota exceeded"


class TestVectorStores:
    def test_store(self) -> None:
        store = VectorStore.model_validate(vector_store_json(metadata=None))
        assert store.file_counts.completed == 2
        assert store.metadata == {}

    def test_store_file_page(self) -> None:
        listing = ListPage[VectorStoreFile].model_validate(page(store_file_json()))
        assert listing.data[0].vector_store_id == "vs_1"
        assert listing.has_more is False


class TestFilesAndModels:
    def test_file(self) -> None:
        assert FileObject.model_validate(file_json()).filename == "a.txt"

    @pytest.mark.parametrize(
        ("name", "mime"),
        [
            ("report.pdf", "application/pdf"),
            ("NOTES.MD", "text/markdown"),
            ("data.csv", "text/csv"),
            ("archive.tar.gz", "application/octet-stream"),
            ("README", "application/octet-stream"),
        ],
    )
    def test_mime_type_for(self, name: str, mime: str) -> None:
        assert mime_type_for(name) == mime

    def test_reasoning_models(self) -> None:
        assert is_reasoning_model("o3-mini")
        assert not is_reasoning_model("gpt-4o")
        assert Model(id="o1").reasoning


class TestRequestResponseRoundTrip:
    """A body sent to the API and the object it returns agree on shared fields."""

    @pytest.mark.parametrize(
        ("params", "dto", "payload"),
        [
            (
                AssistantCreate(
                    model="gpt-4o",
                    name="Helper",
                    instructions="Be helpful.",
                    tools=[Tool.file_search()],
                    tool_resources=ToolResources.model_validate(
                        {"file_search": {"vector_store_ids": ["vs_1"]}}
                    ),
                    metadata={"team": "docs"},
                    temperature=0.2,
                    response_format=ResponseFormat(),
                ),
                Assistant,
                assistant_json,
            ),
            (
                AssistantCreate(
                    model="o3-mini", name="Thinker", reasoning_effort=ReasoningEffort.HIGH
                ),
                Assistant,
                assistant_json,
            ),
            (
                VectorStoreCreate(
                    name="Docs",
                    file_ids=["file-1"],
                    expires_after=ExpiresAfter(days=7),
                    chunking_strategy=ChunkingStrategy.auto(),
                    metadata={"source": "wiki"},
                ),
                VectorStore,
                vector_store_json,
            ),
        ],
        ids=["assistant", "reasoning-assistant", "vector-store"],
    )
    def test_shared_fields_survive(
        self, params: RequestParams, dto: type[BaseModel], payload: Any
    ) -> None:
        body = params.to_body()
        decoded = dto.model_validate(payload(**body))
        shared = set(body) & set(dto.model_fields)
        assert shared
        echoed = type(params).model_validate(decoded.model_dump(include=shared))
        assert echoed.to_body() == {key: body[key] for key in shared}

    def test_uploaded_file_fields(self) -> None:
        fields = {"filename": "report.pdf", "purpose": "assistants"}
        decoded = FileObject.model_validate(file_json("file-9", fields["filename"]))
        assert decoded.model_dump(include=set(fields)) == fields

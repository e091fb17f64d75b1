"""Tests for the vector-store command group."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
from click.testing import CliRunner

from assistctl.cli import cli
from tests.fakes import (
    FakeApi,
    Reply,
    batch_json,
    body_of,
    file_json,
    page,
    store_file_json,
    vector_store_json,
)

BATCH_PATH = "vector_stores/vs_1/file_batches"


def _uploaded(request: httpx.Request) -> httpx.Response:
    name = "a.txt" if b'filename="a.txt"' in request.content else "c.txt"
    return httpx.Response(200, json=file_json(f"file-{name[0]}", name), request=request)


class TestVectorStoreCommands:
    def test_list(self, cli_runner: CliRunner, cli_api: FakeApi) -> None:
        cli_api.route("GET", "vector_stores", Reply(json=page(vector_store_json())))
        result = cli_runner.invoke(cli, ["vector-store", "list"])
        assert result.exit_code == 0, result.output
        assert "vs_1" in result.output
        assert "Docs" in result.output

    def test_create(self, cli_runner: CliRunner, cli_api: FakeApi) -> None:
        cli_api.route("POST", "vector_stores", Reply(json=vector_store_json()))
        result = cli_runner.invoke(
            cli,
            [
                "vector-store",
                "create",
                "--name",
                "Docs",
                "--expires-days",
                "7",
                "--chunk-size",
                "400",
            ],
        )
        assert result.exit_code == 0, result.output
        assert body_of(cli_api.requests[0]) == {
            "name": "Docs",
            "expires_after": {"anchor": "last_active_at", "days": 7},
            "chunking_strategy": {
                "type": "static",
                "static": {"max_chunk_size_tokens": 400, "chunk_overlap_tokens": 200},
            },
        }

    def test_overlap_too_large(self, cli_runner: CliRunner, cli_api: FakeApi) -> None:
        result = cli_runner.invoke(
            cli,
            ["vector-store", "create", "--chunk-size", "400", "--chunk-overlap", "300"],
        )
        assert result.exit_code == 2
        assert cli_api.requests == []

    def test_update_needs_an_option(self, cli_runner: CliRunner, cli_api: FakeApi) -> None:
        result = cli_runner.invoke(cli, ["vector-store", "update", "vs_1"])
        assert result.exit_code == 2

    def test_add_and_remove_file(self, cli_runner: CliRunner, cli_api: FakeApi) -> None:
        cli_api.route("POST", "vector_stores/vs_1/files", Reply(json=store_file_json()))
        cli_api.route("DELETE", "vector_stores/vs_1/files/file-1", Reply(status=204))
        added = cli_runner.invoke(cli, ["vector-store", "add-file", "vs_1", "file-1"])
        removed = cli_runner.invoke(cli, ["vector-store", "remove-file", "vs_1", "file-1"])
        assert added.exit_code == 0, added.output
        assert removed.exit_code == 0, removed.output
        assert body_of(cli_api.requests[0]) == {"file_id": "file-1"}

    def test_batch(self, cli_runner: CliRunner, cli_api: FakeApi) -> None:
        cli_api.route("GET", f"{BATCH_PATH}/vsfb_1", Reply(json=batch_json()))
        result = cli_runner.invoke(cli, ["vector-store", "batch", "vs_1", "vsfb_1"])
        assert result.exit_code == 0, result.output
        assert "0/2 completed" in result.output


class TestUploadCommand:
    def test_partial_failure(
        self, cli_runner: CliRunner, cli_api: FakeApi, tmp_path: Path
    ) -> None:
        (tmp_path / "a.txt").write_text("alpha", encoding="utf-8")
        (tmp_path / "b.txt").write_bytes(b"")
        (tmp_path / "c.txt").write_text("gamma", encoding="utf-8")
        cli_api.route("POST", "files", _uploaded)
        cli_api.route("POST", BATCH_PATH, Reply(json=batch_json()))

        result = cli_runner.invoke(
            cli,
            ["--json", "vector-store", "upload", "vs_1", "a.txt", "b.txt", "c.txt"],
        )

        assert result.exit_code == 0, result.output
        parsed = json.loads(result.output)
        assert parsed["meta"] == {"uploaded": 2, "failed": 1}
        assert parsed["warnings"] == ["b.txt: file is empty"]
        (batch_call,) = cli_api.calls("POST", BATCH_PATH)
        assert body_of(batch_call) == {"file_ids": ["file-a", "file-c"]}

    def test_nothing_uploaded(self, cli_runner: CliRunner, cli_api: FakeApi) -> None:
        result = cli_runner.invoke(cli, ["vector-store", "upload", "vs_1", "missing.txt"])
        assert result.exit_code == 1
        assert "No files were uploaded successfully." in result.output
        assert "WARNING: missing.txt:" in result.output
        assert cli_api.requests == []

    def test_no_paths(self, cli_runner: CliRunner, cli_api: FakeApi) -> None:
        result = cli_runner.invoke(cli, ["vector-store", "upload", "vs_1"])
        assert result.exit_code == 1
        assert "No files selected." in result.output

    def test_overrides_from_flags(
        self, cli_runner: CliRunner, cli_api: FakeApi, tmp_path: Path
    ) -> None:
        (tmp_path / "a.txt").write_text("alpha", encoding="utf-8")
        cli_api.route("POST", "files", Reply(status=500))
        result = cli_runner.invoke(
            cli,
            [
                "vector-store",
                "upload",
                "vs_1",
                "a.txt",
                "--retries",
                "3",
                "--retry-delay",
                "0",
            ],
        )
        assert result.exit_code == 1
        assert len(cli_api.calls("POST", "files")) == 4

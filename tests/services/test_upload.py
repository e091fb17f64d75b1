"""Tests for the concurrent upload orchestrator."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

import httpx
import pytest

from assistctl.config.models import ApiConfig, UploadConfig
from assistctl.domain.result import ApiError, ErrorKind
from assistctl.domain.types import UploadState
from assistctl.plugins import EventBus, PluginManager, hookimpl
from assistctl.services.client import ApiClient
from assistctl.services.upload import UploadOrchestrator
from tests.fakes import FakeApi, Reply, batch_json, body_of

BATCH_PATH = "vector_stores/vs_1/file_batches"
FAST = UploadConfig(retry_delay=0)


def _write(directory: Path, name: str, size: int) -> Path:
    path = directory / name
    path.write_bytes(b"x" * size)
    return path


def _upload_name(request: httpx.Request) -> str:
    match = re.search(rb'filename="([^"]+)"', request.content)
    assert match is not None
    return match.group(1).decode()


def _echo_upload(request: httpx.Request) -> httpx.Response:
    """Answer a multipart upload with a file id derived from its name."""
    name = _upload_name(request)
    return httpx.Response(
        200,
        json={
            "id": f"file-{name}",
            "object": "file",
            "bytes": 1,
            "created_at": 1700000000,
            "filename": name,
            "purpose": "assistants",
        },
        request=request,
    )


def _bare(config: UploadConfig | None = None) -> UploadOrchestrator:
    return UploadOrchestrator(None, None, config)  # type: ignore[arg-type]


def _orchestrator(api: ApiClient, config: UploadConfig = FAST) -> UploadOrchestrator:
    return UploadOrchestrator.from_client(api, config)


class TestValidate:
    def test_missing_file(self, tmp_path: Path) -> None:
        error = _bare().validate(tmp_path / "nope.txt")
        assert error is not None
        assert error.kind == ErrorKind.FILE_INACCESSIBLE
        assert error.message.startswith("nope.txt: ")

    def test_directory(self, tmp_path: Path) -> None:
        error = _bare().validate(tmp_path)
        assert error is not None
        assert error.kind == ErrorKind.FILE_INACCESSIBLE

    def test_too_large(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "big.bin", 10 * 1024 * 1024 + 1)
        error = _bare().validate(path)
        assert error is not None
        assert error.kind == ErrorKind.FILE_TOO_LARGE
        assert error.message == "big.bin: 10.0 MB exceeds the 10 MB limit"
        assert error.detail["size"] == 10 * 1024 * 1024 + 1

    def test_exactly_at_limit(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "edge.bin", 10 * 1024 * 1024)
        assert _bare().validate(path) is None

    def test_empty(self, tmp_path: Path) -> None:
        error = _bare().validate(_write(tmp_path, "empty.txt", 0))
        assert error is not None
        assert error.kind == ErrorKind.FILE_EMPTY


class TestRetryDelay:
    @pytest.mark.parametrize(
        ("backoff", "delays"),
        [
            ("fixed", [2.0, 2.0, 2.0]),
            ("linear", [2.0, 4.0, 6.0]),
            ("exponential", [2.0, 4.0, 8.0]),
        ],
    )
    def test_policies(self, backoff: str, delays: list[float]) -> None:
        orchestrator = _bare(UploadConfig(backoff=backoff))  # type: ignore[arg-type]
        error = ApiError.internal_server_error()
        assert [orchestrator.retry_delay(n, error) for n in (1, 2, 3)] == delays

    def test_retry_after_is_a_floor(self) -> None:
        orchestrator = _bare()
        assert orchestrator.retry_delay(1, ApiError.rate_limited(9)) == 9.0


class TestRun:
    async def test_partial_failure_batches_successes_only(
        self, api: ApiClient, fake_api: FakeApi, tmp_path: Path
    ) -> None:
        a = _write(tmp_path, "a.txt", 10)
        b = _write(tmp_path, "b.txt", 11 * 1024 * 1024)
        c = _write(tmp_path, "c.txt", 10)
        fake_api.route("POST", "files", _echo_upload)
        fake_api.route("POST", BATCH_PATH, Reply(json=batch_json()))

        result = await _orchestrator(api).run([a, b, c], "vs_1")

        assert result.ok
        assert result.op == "upload_files"
        summary = result.value
        assert summary is not None
        assert [o.file_name for o in summary.successes] == ["a.txt", "c.txt"]
        assert [o.file_name for o in summary.failures] == ["b.txt"]
        failure = summary.failures[0]
        assert failure.state == UploadState.FAILED
        assert failure.error is not None
        assert failure.error.kind == ErrorKind.FILE_TOO_LARGE
        assert failure.attempts == 0

        batch_calls = fake_api.calls("POST", BATCH_PATH)
        assert len(batch_calls) == 1
        assert body_of(batch_calls[0]) == {"file_ids": ["file-a.txt", "file-c.txt"]}
        assert sorted(_upload_name(r) for r in fake_api.calls("POST", "files")) == [
            "a.txt",
            "c.txt",
        ]
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("b.txt: ")
        assert result.meta == {"uploaded": 2, "failed": 1}
        assert summary.batch is not None

    async def test_nothing_uploaded_skips_batch(
        self, api: ApiClient, fake_api: FakeApi, tmp_path: Path
    ) -> None:
        empty = _write(tmp_path, "empty.txt", 0)
        result = await _orchestrator(api).run([empty, tmp_path / "missing.txt"], "vs_1")
        assert not result.ok
        assert result.error is not None
        assert result.error.kind == ErrorKind.NO_FILES_UPLOADED
        assert len(result.error.detail["failures"]) == 2
        assert len(result.warnings) == 2
        assert fake_api.requests == []

    async def test_no_paths(self, api: ApiClient, fake_api: FakeApi) -> None:
        result = await _orchestrator(api).run([], "vs_1")
        assert result.error is not None
        assert result.error.kind == ErrorKind.NO_FILES_SELECTED
        assert fake_api.requests == []

    async def test_transient_failure_retried(
        self, api: ApiClient, fake_api: FakeApi, tmp_path: Path
    ) -> None:
        path = _write(tmp_path, "a.txt", 10)
        fake_api.route("POST", "files", Reply(status=500), Reply(status=503), _echo_upload)
        fake_api.route("POST", BATCH_PATH, Reply(json=batch_json(total=1)))

        result = await _orchestrator(api).run([path], "vs_1")

        assert result.ok
        assert result.value is not None
        assert result.value.successes[0].attempts == 3
        assert len(fake_api.calls("POST", "files")) == 3

    async def test_retry_budget_exhausted(
        self, api: ApiClient, fake_api: FakeApi, tmp_path: Path
    ) -> None:
        path = _write(tmp_path, "a.txt", 10)
        fake_api.route("POST", "files", Reply(status=500))

        result = await _orchestrator(api, UploadConfig(retry_delay=0, max_retries=1)).run(
            [path], "vs_1"
        )

        assert result.error is not None
        assert result.error.kind == ErrorKind.NO_FILES_UPLOADED
        assert len(fake_api.calls("POST", "files")) == 2
        failure = result.error.detail["failures"][0]
        assert failure["error"]["kind"] == "upload_failed"
        assert failure["error"]["message"] == "a.txt: Server error. Try again later."
        assert fake_api.calls("POST", BATCH_PATH) == []

    async def test_client_error_not_retried(
        self, api: ApiClient, fake_api: FakeApi, tmp_path: Path
    ) -> None:
        a = _write(tmp_path, "a.txt", 10)
        b = _write(tmp_path, "b.exe", 10)

        def reject_exe(request: httpx.Request) -> httpx.Response:
            if _upload_name(request).endswith(".exe"):
                return httpx.Response(
                    400, json={"error": {"message": "Invalid file format"}}, request=request
                )
            return _echo_upload(request)

        fake_api.route("POST", "files", reject_exe)
        fake_api.route("POST", BATCH_PATH, Reply(json=batch_json(total=1)))

        result = await _orchestrator(api).run([a, b], "vs_1")

        assert result.ok
        assert result.warnings == ["b.exe: Invalid file format"]
        assert len(fake_api.calls("POST", "files")) == 2
        assert body_of(fake_api.calls("POST", BATCH_PATH)[0]) == {"file_ids": ["file-a.txt"]}

    async def test_batch_failure(self, api: ApiClient, fake_api: FakeApi, tmp_path: Path) -> None:
        path = _write(tmp_path, "a.txt", 10)
        fake_api.route("POST", "files", _echo_upload)
        fake_api.route(
            "POST", BATCH_PATH, Reply(status=404, json={"error": {"message": "No such store"}})
        )

        result = await _orchestrator(api).run([path], "vs_1")

        assert result.error is not None
        assert result.error.kind == ErrorKind.BATCH_ASSOCIATION_FAILED
        assert "No such store" in result.error.message
        assert result.error.detail["summary"]["successes"][0]["file_id"] == "file-a.txt"

    async def test_concurrency_bound(
        self, api: ApiClient, fake_api: FakeApi, tmp_path: Path
    ) -> None:
        paths = [_write(tmp_path, f"f{i}.txt", 10) for i in range(6)]
        in_flight = 0
        peak = 0

        async def slow_upload(request: httpx.Request) -> httpx.Response:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return _echo_upload(request)

        fake_api.route("POST", "files", slow_upload)
        fake_api.route("POST", BATCH_PATH, Reply(json=batch_json(total=6)))

        result = await _orchestrator(api, UploadConfig(max_concurrency=2)).run(paths, "vs_1")

        assert result.ok
        assert peak == 2
        assert result.value is not None
        assert [o.file_name for o in result.value.successes] == [p.name for p in paths]

    async def test_cancellation_stops_pending_uploads(
        self, api: ApiClient, fake_api: FakeApi, tmp_path: Path
    ) -> None:
        paths = [_write(tmp_path, f"f{i}.txt", 10) for i in range(3)]
        started = asyncio.Event()

        async def hang(request: httpx.Request) -> httpx.Response:
            started.set()
            await asyncio.Event().wait()
            raise AssertionError("unreachable")

        fake_api.route("POST", "files", hang)
        task = asyncio.create_task(
            _orchestrator(api, UploadConfig(max_concurrency=1)).run(paths, "vs_1")
        )
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert len(fake_api.calls("POST", "files")) == 1
        assert fake_api.calls("POST", BATCH_PATH) == []

    async def test_post_upload_event(
        self, fake_api: FakeApi, api_config: ApiConfig, tmp_path: Path
    ) -> None:
        seen: list[tuple[str, list[str], list[str]]] = []

        class Recorder:
            @hookimpl
            def post_upload(
                self, vector_store_id: str, file_ids: list[str], failed: list[str]
            ) -> None:
                seen.append((vector_store_id, file_ids, failed))

        pm = PluginManager()
        pm.register_plugin(Recorder())
        fake_api.route("POST", "files", _echo_upload)
        fake_api.route("POST", BATCH_PATH, Reply(json=batch_json(total=1)))
        paths = [_write(tmp_path, "a.txt", 10), _write(tmp_path, "b.txt", 0)]

        async with fake_api.client() as http:
            api = ApiClient(api_config, http_client=http, event_bus=EventBus(pm))
            result = await _orchestrator(api).run(paths, "vs_1")

        assert result.ok
        assert seen == [("vs_1", ["file-a.txt"], ["b.txt"])]

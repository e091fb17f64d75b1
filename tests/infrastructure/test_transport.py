"""Tests for request building and execution."""

from __future__ import annotations

import httpx
import pytest

from assistctl.config.models import ApiConfig
from assistctl.domain.assistants import Assistant
from assistctl.domain.result import ErrorKind, RequestBuildError
from assistctl.infrastructure.http import Transport, resource_path
from tests.fakes import FakeApi, Reply, assistant_json, body_of


@pytest.fixture
async def transport(fake_api: FakeApi, api_config: ApiConfig):
    async with fake_api.client() as http:
        yield Transport(api_config, http)


class TestBuildRequest:
    async def test_fixed_headers(self, transport: Transport) -> None:
        request = transport.build_request("assistants", "POST", {"model": "gpt-4"})
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["OpenAI-Beta"] == "assistants=v2"
        assert str(request.url) == "https://api.openai.com/v1/assistants"
        assert body_of(request) == {"model": "gpt-4"}

    async def test_get_has_no_body(self, transport: Transport) -> None:
        request = transport.build_request("assistants", params={"limit": 5})
        assert request.content == b""
        assert request.url.params["limit"] == "5"

    async def test_base_url_without_trailing_slash(self) -> None:
        config = ApiConfig(key="k", base_url="http://localhost:8080/v1")
        async with httpx.AsyncClient() as http:
            request = Transport(config, http).build_request("models")
        assert str(request.url) == "http://localhost:8080/v1/models"

    async def test_multipart_upload(self, transport: Transport) -> None:
        request = transport.build_request(
            "files",
            "POST",
            files={"file": ("a.txt", b"hello", "text/plain")},
            data={"purpose": "assistants"},
        )
        content_type = request.headers["Content-Type"]
        assert content_type.startswith("multipart/form-data; boundary=")
        boundary = content_type.split("boundary=", 1)[1]
        body = request.read()
        assert boundary.encode() in body
        assert b'filename="a.txt"' in body
        assert b"Content-Type: text/plain" in body
        assert b'name="purpose"' in body
        assert request.headers["Authorization"] == "Bearer sk-test"

    async def test_fresh_boundary_per_request(self, transport: Transport) -> None:
        files = {"file": ("a.txt", b"x", "text/plain")}
        first = transport.build_request("files", "POST", files=files)
        second = transport.build_request("files", "POST", files=files)
        assert first.headers["Content-Type"] != second.headers["Content-Type"]

    async def test_missing_key(self) -> None:
        async with httpx.AsyncClient() as http:
            transport = Transport(ApiConfig(), http)
            with pytest.raises(RequestBuildError) as info:
                transport.build_request("assistants")
        assert info.value.error.kind == ErrorKind.MISSING_CREDENTIAL

    @pytest.mark.parametrize("key", ["sk-caf\u00e9", "sk-\u201ctest\u201d", "sk-test\n"])
    async def test_unsendable_key(self, key: str) -> None:
        async with httpx.AsyncClient() as http:
            transport = Transport(ApiConfig(key=key), http)
            with pytest.raises(RequestBuildError) as info:
                transport.build_request("assistants")
        assert info.value.error.kind == ErrorKind.MALFORMED_REQUEST

    @pytest.mark.parametrize(
        "path",
        [
            "",
            "/assistants",
            "https://evil.example/x",
            "files/",
            "files/../assistants",
            "assistants/.",
            "threads//runs",
        ],
    )
    async def test_bad_paths(self, transport: Transport, path: str) -> None:
        with pytest.raises(RequestBuildError) as info:
            transport.build_request(path)
        assert info.value.error.kind == ErrorKind.MALFORMED_REQUEST

    async def test_unserialisable_body(self, transport: Transport) -> None:
        with pytest.raises(RequestBuildError) as info:
            transport.build_request("assistants", "POST", {"when": object()})
        assert info.value.error.kind == ErrorKind.MALFORMED_REQUEST

    async def test_nan_body_rejected(self, transport: Transport) -> None:
        with pytest.raises(RequestBuildError):
            transport.build_request("assistants", "POST", {"temperature": float("nan")})


class TestRequest:
    async def test_round_trip(self, transport: Transport, fake_api: FakeApi) -> None:
        fake_api.route("GET", "assistants/asst_1", Reply(json=assistant_json()))
        result = await transport.request("fetch_assistant", "assistants/asst_1", Assistant)
        assert result.ok
        assert result.op == "fetch_assistant"
        assert result.value is not None
        assert result.value.name == "Helper"

    async def test_build_failure_becomes_result(self, fake_api: FakeApi) -> None:
        async with fake_api.client() as http:
            transport = Transport(ApiConfig(), http)
            result = await transport.request("fetch_assistant", "assistants/asst_1", Assistant)
        assert result.error is not None
        assert result.error.kind == ErrorKind.MISSING_CREDENTIAL
        assert fake_api.requests == []

    async def test_unsendable_key_becomes_result(self, fake_api: FakeApi) -> None:
        async with fake_api.client() as http:
            transport = Transport(ApiConfig(key="sk-caf\u00e9"), http)
            result = await transport.request("fetch_assistant", "assistants/asst_1", Assistant)
        assert result.error is not None
        assert result.error.kind == ErrorKind.MALFORMED_REQUEST
        assert fake_api.requests == []

    async def test_network_error(self, api_config: ApiConfig) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as http:
            result = await Transport(api_config, http).request(
                "fetch_assistant", "assistants/asst_1", Assistant
            )
        assert result.error is not None
        assert result.error.kind == ErrorKind.NETWORK_ERROR

    async def test_request_no_body(self, transport: Transport, fake_api: FakeApi) -> None:
        fake_api.route("DELETE", "assistants/asst_1", Reply(status=204))
        result = await transport.request_no_body("delete_assistant", "assistants/asst_1")
        assert result.ok
        assert fake_api.calls("DELETE", "assistants/asst_1")


class TestClientOwnership:
    async def test_injected_client_left_open(self, api_config: ApiConfig) -> None:
        async with httpx.AsyncClient() as http:
            async with Transport(api_config, http):
                pass
            assert not http.is_closed

    async def test_owned_client_closed(self, api_config: ApiConfig) -> None:
        transport = Transport(api_config)
        await transport.aclose()
        assert transport._client.is_closed


class TestResourcePath:
    def test_plain_ids_unchanged(self) -> None:
        path = resource_path("threads", "thread_1", "runs", "run_1")
        assert path == "threads/thread_1/runs/run_1"

    @pytest.mark.parametrize(
        ("file_id", "expected"),
        [
            ("x/../../assistants/asst_1", "files/x%2F..%2F..%2Fassistants%2Fasst_1"),
            ("a?b=c", "files/a%3Fb%3Dc"),
            ("a#b", "files/a%23b"),
            ("a b", "files/a%20b"),
        ],
    )
    def test_ids_are_percent_encoded(self, file_id: str, expected: str) -> None:
        assert resource_path("files", file_id) == expected

    async def test_encoded_id_stays_one_segment(self, transport: Transport) -> None:
        request = transport.build_request(resource_path("files", "x/../../assistants/asst_1"))
        assert request.url.raw_path == b"/v1/files/x%2F..%2F..%2Fassistants%2Fasst_1"

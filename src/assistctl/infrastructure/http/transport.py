"""Transport client — builds authenticated requests and dispatches them.

One ``Transport`` wraps one pooled ``httpx.AsyncClient``. Requests are
built fresh per call with the three fixed headers (bearer credential,
content type, beta flag); nothing is retried at this layer.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Self, TypeVar
from urllib.parse import quote

import httpx

from assistctl.config.models import ApiConfig
from assistctl.domain.result import ApiError, ApiResult, RequestBuildError
from assistctl.infrastructure.http.decoder import decode_response

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
BETA_HEADER = "OpenAI-Beta"

# Multipart field spec accepted by httpx: name -> (filename, content, content_type).
FileFields = dict[str, tuple[str, bytes, str]]

T = TypeVar("T")


def resource_path(*segments: str) -> str:
    """Join *segments* into a relative path, percent-encoding each one.

    ``resource_path("files", "a/b?c")`` gives ``"files/a%2Fb%3Fc"``, so an
    identifier can never add segments or a query string.
    """
    return "/".join(quote(segment, safe="") for segment in segments)


@dataclass(frozen=True)
class RawResponse:
    """Undecoded outcome of one round trip: ``(body, response, error)``."""

    body: bytes | None
    response: httpx.Response | None
    error: BaseException | None = None

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None


class Transport:
    """Authenticated request builder and executor.

    The credential is read from *config* when each request is built, so a
    transport never observes a key change made elsewhere; build a new
    transport (or ``ApiClient``) to switch keys. An injected *client* is
    owned by the caller and is not closed by :meth:`aclose`.
    """

    def __init__(self, config: ApiConfig, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.timeout)
        base = config.base_url if config.base_url.endswith("/") else f"{config.base_url}/"
        self._base = httpx.URL(base)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # --- Building ---------------------------------------------------------

    def url_for(self, path: str) -> httpx.URL:
        """Join a relative resource *path* onto the base URL.

        Every segment must be non-empty and must not be ``.`` or ``..``;
        identifiers are expected to arrive percent-encoded (see
        :func:`resource_path`).
        """
        try:
            relative = httpx.URL(path)
        except httpx.InvalidURL as exc:
            raise RequestBuildError(ApiError.malformed_request(f"bad path {path!r}")) from exc
        if not path or relative.is_absolute_url or path.startswith("/"):
            raise RequestBuildError(
                ApiError.malformed_request(f"path {path!r} is not relative to the base URL")
            )
        if any(segment in ("", ".", "..") for segment in path.split("/")):
            raise RequestBuildError(
                ApiError.malformed_request(f"path {path!r} has an empty or relative segment")
            )
        return self._base.join(path)

    def build_request(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        *,
        params: dict[str, Any] | None = None,
        files: FileFields | None = None,
        data: dict[str, str] | None = None,
    ) -> httpx.Request:
        """Build a request for *path* with the fixed header set.

        JSON bodies are serialised here, before dispatch; *files* switches
        the request to ``multipart/form-data`` with a fresh boundary, and
        *data* then carries the plain form fields.

        Raises:
            RequestBuildError: No credential is configured, the credential
                cannot be sent as a header, the path cannot be joined to the
                base URL, or *body* is not JSON-serialisable.
        """
        key = self.config.key
        if not key:
            raise RequestBuildError(ApiError.missing_credential())
        if not (key.isascii() and key.isprintable()):
            raise RequestBuildError(
                ApiError.malformed_request("API key contains non-ASCII or control characters")
            )
        url = self.url_for(path)
        headers = {
            "Authorization": f"Bearer {key}",
            BETA_HEADER: self.config.beta,
        }

        if files is not None:
            boundary = uuid.uuid4().hex
            headers["Content-Type"] = f"multipart/form-data; boundary={boundary}"
            return self._client.build_request(
                method, url, headers=headers, params=params, files=files, data=data
            )

        headers["Content-Type"] = JSON_CONTENT_TYPE
        content: bytes | None = None
        if body is not None:
            try:
                content = json.dumps(body, allow_nan=False).encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise RequestBuildError(
                    ApiError.malformed_request(f"body is not JSON-serialisable: {exc}")
                ) from exc
        return self._client.build_request(
            method, url, headers=headers, params=params, content=content
        )

    # --- Executing --------------------------------------------------------

    async def execute(self, request: httpx.Request) -> RawResponse:
        """Send *request* once and capture the outcome without raising.

        Transport failures (``httpx.HTTPError``, ``OSError``) are returned in
        ``RawResponse.error``; task cancellation propagates unchanged.
        """
        logger.debug("%s %s", request.method, request.url)
        try:
            response = await self._client.send(request)
        except (httpx.HTTPError, OSError) as exc:
            logger.debug("%s %s failed: %s", request.method, request.url, exc)
            return RawResponse(body=None, response=None, error=exc)
        logger.debug("%s %s -> HTTP %d", request.method, request.url, response.status_code)
        return RawResponse(body=response.content, response=response)

    async def request(
        self,
        op: str,
        path: str,
        expected: type[T],
        *,
        method: str = "GET",
        body: Any = None,
        params: dict[str, Any] | None = None,
        files: FileFields | None = None,
        data: dict[str, str] | None = None,
    ) -> ApiResult[T]:
        """Build, execute, and decode a call whose success payload is *expected*."""
        try:
            req = self.build_request(
                path, method, body, params=params, files=files, data=data
            )
        except RequestBuildError as exc:
            return ApiResult.failure(op, exc.error)
        raw = await self.execute(req)
        return decode_response(op, raw, expected)

    async def request_no_body(
        self,
        op: str,
        path: str,
        *,
        method: str = "DELETE",
        body: Any = None,
    ) -> ApiResult[None]:
        """Delete-shaped variant: a 2xx without a body is a success."""
        try:
            req = self.build_request(path, method, body)
        except RequestBuildError as exc:
            return ApiResult.failure(op, exc.error)
        raw = await self.execute(req)
        return decode_response(op, raw, None)

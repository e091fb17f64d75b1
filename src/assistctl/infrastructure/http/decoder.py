"""Response decoder — maps a raw round trip onto an ApiResult.

The classification order is fixed:

1. transport error          → NETWORK_ERROR (CANCELLED for cancellations)
2. no HTTP response         → UNKNOWN_RESPONSE
3. 2xx                      → NO_DATA | DECODING_ERROR | success
4. 429                      → RATE_LIMIT_EXCEEDED (Retry-After, default 1)
5. 500                      → INTERNAL_SERVER_ERROR (body ignored)
6. anything else            → structured ``{"error": {...}}`` body mapped to
                              AUTHENTICATION_ERROR (401), INVALID_REQUEST (400)
                              or CUSTOM; unparseable → INVALID_RESPONSE
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError, field_validator

from assistctl.domain.common import DeleteResponse
from assistctl.domain.result import ApiError, ApiResult, ErrorKind

if TYPE_CHECKING:
    from assistctl.infrastructure.http.transport import RawResponse

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = 1

_STATUS_KINDS = {
    400: ErrorKind.INVALID_REQUEST,
    401: ErrorKind.AUTHENTICATION_ERROR,
}


class _RemoteError(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str
    type: str | None = None
    param: str | None = None
    code: str | None = None

    @field_validator("code", mode="before")
    @classmethod
    def _code_as_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class _ErrorEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    error: _RemoteError


@functools.lru_cache(maxsize=128)
def _adapter(expected: Any) -> TypeAdapter[Any]:
    return TypeAdapter(expected)


def parse_retry_after(value: str | None) -> int:
    """Integer seconds from a ``Retry-After`` header, else the default."""
    if value is not None:
        value = value.strip()
        if value.isascii() and value.isdigit():
            return int(value)
    return DEFAULT_RETRY_AFTER


def decode_response(op: str, raw: RawResponse, expected: Any) -> ApiResult[Any]:
    """Classify *raw* and decode its body as *expected*.

    ``expected=None`` marks a delete-shaped call: a 2xx with an empty body
    succeeds with no value and no decode is attempted.
    """
    if raw.error is not None:
        if isinstance(raw.error, asyncio.CancelledError):
            return ApiResult.failure(op, ApiError.cancelled())
        return ApiResult.failure(op, ApiError.network(raw.error))

    response = raw.response
    if response is None:
        return ApiResult.failure(op, ApiError.unknown_response())

    status = response.status_code
    body = raw.body or b""

    if 200 <= status < 300:
        if expected is None:
            return _acknowledge(op, body, status)
        if not body:
            return ApiResult.failure(op, ApiError.no_data(status))
        try:
            value = _adapter(expected).validate_json(body)
        except ValidationError as exc:
            logger.debug("%s: cannot decode HTTP %d body: %s", op, status, exc)
            return ApiResult.failure(op, ApiError.decoding(body, exc, status))
        return ApiResult.success(op, value)

    if status == 429:
        retry_after = parse_retry_after(response.headers.get("Retry-After"))
        return ApiResult.failure(op, ApiError.rate_limited(retry_after))

    if status == 500:
        return ApiResult.failure(op, ApiError.internal_server_error())

    try:
        remote = _ErrorEnvelope.model_validate_json(body).error
    except ValidationError:
        return ApiResult.failure(op, ApiError.invalid_response(status))

    kind = _STATUS_KINDS.get(status, ErrorKind.CUSTOM)
    return ApiResult.failure(
        op,
        ApiError.remote(
            kind,
            remote.message,
            status_code=status,
            remote_type=remote.type,
            remote_param=remote.param,
            remote_code=remote.code,
        ),
    )


def _acknowledge(op: str, body: bytes, status: int) -> ApiResult[Any]:
    """Success for delete-shaped calls unless the server explicitly refuses."""
    if body:
        try:
            ack = DeleteResponse.model_validate_json(body)
        except ValidationError:
            return ApiResult.success(op)
        if not ack.deleted:
            return ApiResult.failure(
                op,
                ApiError.remote(
                    ErrorKind.CUSTOM,
                    f"Server did not delete {ack.id}",
                    status_code=status,
                ),
            )
    return ApiResult.success(op)

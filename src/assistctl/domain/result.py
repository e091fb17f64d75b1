"""ApiResult and ApiError — the universal client contract.

INVARIANT: Every client operation returns ApiResult; exactly one of
``value`` (success) or ``error`` (failure) is meaningful.
The CLI and any embedding application consume this type.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Generic, Self, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")

# Raw bodies kept on decode failures are truncated to this many characters.
RAW_BODY_LIMIT = 2000


class ErrorKind(StrEnum):
    """Closed set of failure categories surfaced by the client."""

    # Network level
    NETWORK_ERROR = "network_error"
    CANCELLED = "cancelled"
    # Contract level
    MISSING_CREDENTIAL = "missing_credential"
    MALFORMED_REQUEST = "malformed_request"
    UNKNOWN_RESPONSE = "unknown_response"
    INVALID_RESPONSE = "invalid_response"
    # Payload level
    NO_DATA = "no_data"
    DECODING_ERROR = "decoding_error"
    # Remote signalled
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    INTERNAL_SERVER_ERROR = "internal_server_error"
    AUTHENTICATION_ERROR = "authentication_error"
    INVALID_REQUEST = "invalid_request"
    CUSTOM = "custom"
    # Upload specific
    FILE_INACCESSIBLE = "file_inaccessible"
    FILE_TOO_LARGE = "file_too_large"
    FILE_EMPTY = "file_empty"
    UPLOAD_FAILED = "upload_failed"
    NO_FILES_SELECTED = "no_files_selected"
    SELECTION_CANCELLED = "selection_cancelled"
    BATCH_ASSOCIATION_FAILED = "batch_association_failed"
    NO_FILES_UPLOADED = "no_files_uploaded"


_RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.NETWORK_ERROR,
        ErrorKind.UNKNOWN_RESPONSE,
        ErrorKind.NO_DATA,
        ErrorKind.RATE_LIMIT_EXCEEDED,
        ErrorKind.INTERNAL_SERVER_ERROR,
    }
)


class ApiError(BaseModel):
    """Structured failure payload within an ApiResult.

    ``message`` is always renderable as-is; the remaining fields carry the
    structured detail (status code, remote error fields, retry hint) so
    callers never need to re-parse raw response bodies.
    """

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    status_code: int | None = None
    retry_after: int | None = None
    remote_type: str | None = None
    remote_param: str | None = None
    remote_code: str | None = None
    detail: dict[str, Any] = Field(default_factory=dict)

    @property
    def retryable(self) -> bool:
        """Whether repeating the same request may succeed."""
        if self.kind in _RETRYABLE_KINDS:
            return True
        return (
            self.kind == ErrorKind.INVALID_RESPONSE
            and self.status_code is not None
            and self.status_code >= 500
        )

    # --- Constructors -----------------------------------------------------

    @classmethod
    def network(cls, exc: BaseException) -> Self:
        return cls(
            kind=ErrorKind.NETWORK_ERROR,
            message=f"Network error: {exc or type(exc).__name__}",
            detail={"exception": type(exc).__name__},
        )

    @classmethod
    def cancelled(cls, reason: str = "Request was cancelled") -> Self:
        return cls(kind=ErrorKind.CANCELLED, message=reason)

    @classmethod
    def missing_credential(cls) -> Self:
        return cls(
            kind=ErrorKind.MISSING_CREDENTIAL,
            message="No API key configured. Set one with `assistctl config set-key`.",
        )

    @classmethod
    def malformed_request(cls, reason: str) -> Self:
        return cls(kind=ErrorKind.MALFORMED_REQUEST, message=f"Invalid request: {reason}")

    @classmethod
    def unknown_response(cls) -> Self:
        return cls(kind=ErrorKind.UNKNOWN_RESPONSE, message="An unknown error occurred")

    @classmethod
    def invalid_response(cls, status_code: int) -> Self:
        return cls(
            kind=ErrorKind.INVALID_RESPONSE,
            message=f"Invalid response: HTTP {status_code}",
            status_code=status_code,
        )

    @classmethod
    def no_data(cls, status_code: int | None = None) -> Self:
        return cls(
            kind=ErrorKind.NO_DATA,
            message="No data received from the server",
            status_code=status_code,
        )

    @classmethod
    def decoding(cls, raw: bytes, cause: BaseException, status_code: int | None = None) -> Self:
        text = raw.decode("utf-8", errors="replace")
        return cls(
            kind=ErrorKind.DECODING_ERROR,
            message=f"Error decoding response: {_first_line(str(cause))}",
            status_code=status_code,
            detail={"raw_body": text[:RAW_BODY_LIMIT], "cause": str(cause)},
        )

    @classmethod
    def rate_limited(cls, retry_after: int) -> Self:
        return cls(
            kind=ErrorKind.RATE_LIMIT_EXCEEDED,
            message=f"Rate limit exceeded. Try again in {retry_after} seconds.",
            status_code=429,
            retry_after=retry_after,
        )

    @classmethod
    def internal_server_error(cls) -> Self:
        return cls(
            kind=ErrorKind.INTERNAL_SERVER_ERROR,
            message="Server error. Try again later.",
            status_code=500,
        )

    @classmethod
    def remote(
        cls,
        kind: ErrorKind,
        message: str,
        *,
        status_code: int,
        remote_type: str | None = None,
        remote_param: str | None = None,
        remote_code: str | None = None,
    ) -> Self:
        """Build an error from a structured ``{"error": {...}}`` response body."""
        return cls(
            kind=kind,
            message=message,
            status_code=status_code,
            remote_type=remote_type,
            remote_param=remote_param,
            remote_code=remote_code,
        )


class ApiResult(BaseModel, Generic[T]):
    """Universal return type for all client operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"create_assistant"``).
        value: Operation payload on success (``None`` for no-body operations).
        warnings: Non-fatal issues (partial upload failures, plugin errors).
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, counts, etc.).
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    op: str
    value: T | None = None
    warnings: list[str] = Field(default_factory=list)
    error: ApiError | None = None
    meta: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _exactly_one_branch(self) -> Self:
        if self.ok and self.error is not None:
            raise ValueError("successful result cannot carry an error")
        if not self.ok and self.error is None:
            raise ValueError("failed result must carry an error")
        if not self.ok and self.value is not None:
            raise ValueError("failed result cannot carry a value")
        return self

    @classmethod
    def success(
        cls,
        op: str,
        value: T | None = None,
        *,
        warnings: list[str] | None = None,
        meta: dict[str, Any] | None = None,
    ) -> Self:
        return cls(ok=True, op=op, value=value, warnings=warnings or [], meta=meta)

    @classmethod
    def failure(
        cls,
        op: str,
        error: ApiError,
        *,
        warnings: list[str] | None = None,
        meta: dict[str, Any] | None = None,
    ) -> Self:
        return cls(ok=False, op=op, error=error, warnings=warnings or [], meta=meta)

    def with_warnings(self, warnings: list[str]) -> Self:
        """Return a copy with *warnings* appended."""
        if not warnings:
            return self
        return self.model_copy(update={"warnings": [*self.warnings, *warnings]})

    def with_op(self, op: str) -> Self:
        """Return a copy relabelled as *op*."""
        return self.model_copy(update={"op": op})


def _first_line(text: str) -> str:
    return text.splitlines()[0] if text else text


class AssistError(Exception):
    """Base for internal exceptions that carry an :class:`ApiError`.

    Never escapes the library boundary: the transport converts it into a
    failed :class:`ApiResult`.
    """

    def __init__(self, error: ApiError) -> None:
        super().__init__(error.message)
        self.error = error


class RequestBuildError(AssistError):
    """A request could not be constructed (no credential, bad path, bad body)."""

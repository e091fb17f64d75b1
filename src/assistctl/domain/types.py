"""Wire enums shared by DTOs, parameter models, and the CLI."""

from __future__ import annotations

from enum import StrEnum


class ListOrder(StrEnum):
    """Sort order for paged list endpoints (by ``created_at``)."""

    ASC = "asc"
    DESC = "desc"


class MessageRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


class ReasoningEffort(StrEnum):
    """Effort hint accepted by reasoning-family models."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RunStatus(StrEnum):
    """Lifecycle states of a run on a thread."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    REQUIRES_ACTION = "requires_action"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"
    FAILED = "failed"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    EXPIRED = "expired"

    @property
    def terminal(self) -> bool:
        """Whether the run can no longer change state on its own."""
        return self in TERMINAL_RUN_STATUSES


TERMINAL_RUN_STATUSES = frozenset(
    {
        RunStatus.CANCELLED,
        RunStatus.FAILED,
        RunStatus.COMPLETED,
        RunStatus.INCOMPLETE,
        RunStatus.EXPIRED,
    }
)


class ToolType(StrEnum):
    CODE_INTERPRETER = "code_interpreter"
    FILE_SEARCH = "file_search"
    FUNCTION = "function"


class UploadState(StrEnum):
    """Per-file state during a concurrent upload: pending → uploading → uploaded | failed."""

    PENDING = "pending"
    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    FAILED = "failed"

from __future__ import annotations

from enum import Enum


class LogState(str, Enum):
    """Lifecycle state of an hour log as stored in the database."""

    PENDING = "pending"
    COMPLETE = "complete"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not LogState.PENDING


class LogFamily(str, Enum):
    """How a session was opened. Approved external logs take a category instead."""

    LAB = "lab"
    EXTERNAL = "external"


class LabAction(str, Enum):
    IN = "in"
    OUT = "out"
    VOID = "void"


class CloseOutcome(str, Enum):
    """Result requested when closing a pending log."""

    APPROVE = "approve"
    CANCEL = "cancel"


class ErrorCode(str, Enum):
    """Stable codes returned to callers alongside the human-readable reason."""

    UNKNOWN_MEMBER = "UnknownMember"
    UNKNOWN_SESSION = "UnknownSession"
    DUPLICATE_SESSION = "DuplicateSession"
    NO_ACTIVE_SESSION = "NoActiveSession"
    ALREADY_CLOSED = "AlreadyClosed"
    INVALID_REQUEST = "InvalidRequest"
    INTERNAL_ERROR = "InternalError"

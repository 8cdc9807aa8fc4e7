from __future__ import annotations

from typing import Optional

from .enums import ErrorCode


class DomainError(Exception):
    """Base exception for business rule violations."""

    code: ErrorCode = ErrorCode.INVALID_REQUEST


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = ErrorCode.INVALID_REQUEST


class UnknownMemberError(DomainError):
    code = ErrorCode.UNKNOWN_MEMBER

    def __init__(self, member_id: str):
        super().__init__("member unknown")
        self.member_id = member_id


class UnknownSessionError(DomainError):
    code = ErrorCode.UNKNOWN_SESSION

    def __init__(self, log_id: str):
        super().__init__("request unknown")
        self.log_id = log_id


class DuplicateSessionError(DomainError):
    """Raised when a member already has a pending lab log.

    Carries the existing log id so the caller can self-correct.
    """

    code = ErrorCode.DUPLICATE_SESSION

    def __init__(self, member_id: str, log_id: Optional[str] = None):
        super().__init__("member already logged in")
        self.member_id = member_id
        self.log_id = log_id


class NoActiveSessionError(DomainError):
    code = ErrorCode.NO_ACTIVE_SESSION

    def __init__(self, member_id: str):
        super().__init__("member not signed in")
        self.member_id = member_id

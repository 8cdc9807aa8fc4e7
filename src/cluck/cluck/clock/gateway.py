from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..common.locks import KeyedLock
from ..common.validators import require_member_id, require_non_empty
from ..core.constants import INTERNAL_ERROR_REASON
from ..core.enums import CloseOutcome, ErrorCode, LabAction, LogFamily
from ..core.exceptions import (
    DomainError,
    DuplicateSessionError,
    NoActiveSessionError,
    UnknownMemberError,
    UnknownSessionError,
    ValidationError,
)
from ..hours.model import HourLog
from ..hours.service import HourLogService
from ..members.repository import MemberRepository
from ..notifications.events import SessionChangeEvent
from ..notifications.outbox import NotificationOutbox

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClockResponse:
    """Structured result of every clock action; never raised, always returned."""

    success: bool
    log_id: Optional[str] = None
    error: Optional[str] = None
    code: Optional[ErrorCode] = None

    @classmethod
    def ok(cls, log: HourLog) -> "ClockResponse":
        return cls(success=True, log_id=log.id)

    @classmethod
    def from_error(cls, e: DomainError) -> "ClockResponse":
        log_id = e.log_id if isinstance(e, DuplicateSessionError) else None
        return cls(success=False, log_id=log_id, error=str(e), code=e.code)

    @classmethod
    def internal_error(cls) -> "ClockResponse":
        return cls(success=False, error=INTERNAL_ERROR_REASON, code=ErrorCode.INTERNAL_ERROR)

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"success": self.success}
        if self.log_id is not None:
            out["log_id"] = self.log_id
        if self.error is not None:
            out["error"] = self.error
        return out


class ClockGateway:
    """Entry point for clock actions.

    Validates the member, serializes lookup-then-write per (member, family),
    drives the hour-log state machine and shapes the response payload.
    """

    def __init__(
        self,
        hours: HourLogService,
        members: MemberRepository,
        outbox: Optional[NotificationOutbox] = None,
        *,
        locks: Optional[KeyedLock] = None,
    ):
        self._hours = hours
        self._members = members
        self._outbox = outbox
        self._locks = locks or KeyedLock()

    def _respond(self, context: str, action: Callable[[], ClockResponse]) -> ClockResponse:
        try:
            return action()
        except DomainError as e:
            logger.warning("%s rejected: %s (%s)", context, e, e.code.value)
            return ClockResponse.from_error(e)
        except Exception:
            logger.exception("%s failed", context)
            return ClockResponse.internal_error()

    def _require_member(self, member_id: Any) -> str:
        member = require_member_id(member_id)
        if not self._members.exists(member):
            raise UnknownMemberError(member)
        return member

    @staticmethod
    def _parse_lab_action(action: Any) -> LabAction:
        try:
            return LabAction(str(action).strip().lower())
        except ValueError:
            raise ValidationError(f"unknown action {action!r}")

    @staticmethod
    def _parse_outcome(action: Any) -> CloseOutcome:
        # Anything other than an approval cancels the request, a missing action included.
        value = action.strip().lower() if isinstance(action, str) else ""
        return CloseOutcome.APPROVE if value == CloseOutcome.APPROVE.value else CloseOutcome.CANCEL

    def _emit(self, event: SessionChangeEvent) -> None:
        if self._outbox is not None:
            self._outbox.emit(event)

    def lab(self, member_id: Any, action: Any) -> ClockResponse:
        def run() -> ClockResponse:
            lab_action = self._parse_lab_action(action)
            member = self._require_member(member_id)

            with self._locks.hold((member, LogFamily.LAB)):
                pending = self._hours.lookup_pending(member, LogFamily.LAB)
                if pending:
                    if lab_action == LabAction.IN:
                        raise DuplicateSessionError(member, pending.id)
                    outcome = CloseOutcome.APPROVE if lab_action == LabAction.OUT else CloseOutcome.CANCEL
                    return ClockResponse.ok(self._hours.close(pending.id, outcome))

                if lab_action != LabAction.IN:
                    raise NoActiveSessionError(member)
                log = self._hours.open(member, LogFamily.LAB)

            # Only sign-ins are announced; out/void stay silent.
            self._emit(SessionChangeEvent(member_id=member, logging_in=True))
            return ClockResponse.ok(log)

        return self._respond(f"lab {action!r} for {member_id!r}", run)

    def external_submit(self, member_id: Any, duration: Any, message: Any) -> ClockResponse:
        def run() -> ClockResponse:
            member = self._require_member(member_id)
            # Several external claims may be pending at once; no duplicate check.
            return ClockResponse.ok(
                self._hours.open(member, LogFamily.EXTERNAL, duration=duration, message=message)
            )

        return self._respond(f"external submission for {member_id!r}", run)

    def external_respond(self, log_id: Any, action: Any, category: Optional[str] = None) -> ClockResponse:
        def run() -> ClockResponse:
            target = require_non_empty(log_id, "id")
            outcome = self._parse_outcome(action)
            return ClockResponse.ok(self._hours.close(target, outcome, category=category))

        return self._respond(f"response to hour request {log_id!r}", run)

    def external_respond_by_ref(self, external_ref: Any, action: Any, category: Optional[str] = None) -> ClockResponse:
        """Resolve an approval reply that only carries the outbound message handle."""

        def run() -> ClockResponse:
            log = self._hours.find_by_external_ref(external_ref)
            if log is None:
                raise UnknownSessionError(str(external_ref))
            outcome = self._parse_outcome(action)
            return ClockResponse.ok(self._hours.close(log.id, outcome, category=category))

        return self._respond(f"response to hour request ref {external_ref!r}", run)

    def attach_external_ref(self, log_id: Any, external_ref: Any) -> ClockResponse:
        def run() -> ClockResponse:
            return ClockResponse.ok(self._hours.attach_external_ref(require_non_empty(log_id, "id"), external_ref))

        return self._respond(f"attach ref to hour request {log_id!r}", run)

    def list_pending(self, family: LogFamily) -> list[dict]:
        return [row.to_dict(family) for row in self._hours.list_pending(family)]

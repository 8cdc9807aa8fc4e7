from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import LogFamily, LogState


@dataclass(frozen=True)
class HourLog:
    """Domain entity: one work session attempt.

    ``type`` is a plain string because an approved external log carries the
    approver's category instead of one of the ``LogFamily`` values.
    """

    id: str
    member_id: str
    type: str
    state: LogState
    time_in: datetime
    time_out: Optional[datetime] = None
    duration: Optional[float] = None
    message: Optional[str] = None
    external_ref: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.state == LogState.PENDING

    def is_family(self, family: LogFamily) -> bool:
        return self.type == family.value


@dataclass(frozen=True)
class LogChanges:
    """Field updates produced by a transition; ``None`` means leave unchanged."""

    state: LogState
    time_out: datetime
    type: Optional[str] = None


@dataclass(frozen=True)
class PendingSessionRow:
    """Read-model for the pending-session listings."""

    id: str
    member_id: str
    time_in: datetime
    duration: Optional[float] = None
    external_ref: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_log(cls, log: HourLog) -> "PendingSessionRow":
        return cls(
            id=log.id,
            member_id=log.member_id,
            time_in=log.time_in,
            duration=log.duration,
            external_ref=log.external_ref,
            message=log.message,
        )

    def to_dict(self, family: LogFamily) -> dict:
        out = {"id": self.id, "email": self.member_id, "time_in": to_iso(self.time_in)}
        if family == LogFamily.EXTERNAL:
            out.update(duration=self.duration, external_ref=self.external_ref, message=self.message)
        return out

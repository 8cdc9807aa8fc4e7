from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LogFamily, LogState
from .model import HourLog


class HourLogRepository(Protocol):
    """Session store for hour logs.

    Pure data access: no transition rules live here. ``create`` must raise
    ``DuplicateSessionError`` when the store already holds a pending lab log
    for the member.
    """

    def get(self, log_id: str) -> Optional[HourLog]:
        raise NotImplementedError

    def find_pending(self, member_id: str, family: LogFamily) -> Optional[HourLog]:
        raise NotImplementedError

    def find_by_external_ref(self, external_ref: str) -> Optional[HourLog]:
        raise NotImplementedError

    def create(
        self,
        *,
        member_id: str,
        family: LogFamily,
        time_in: datetime,
        duration: Optional[float] = None,
        message: Optional[str] = None,
    ) -> HourLog:
        raise NotImplementedError

    def update(
        self,
        log_id: str,
        *,
        state: LogState,
        time_out: datetime,
        type: Optional[str] = None,
    ) -> Optional[HourLog]:
        """Apply a state change; ``duration`` and ``message`` are never written here."""

        raise NotImplementedError

    def attach_external_ref(self, log_id: str, external_ref: str) -> bool:
        """Return False when the log does not exist.

        Raises ``ValidationError`` when another log already carries ``external_ref``.
        """

        raise NotImplementedError

    def list_logs(
        self,
        *,
        state: Optional[LogState] = None,
        family: Optional[LogFamily] = None,
        member_id: Optional[str] = None,
        limit: int = 500,
    ) -> Sequence[HourLog]:
        raise NotImplementedError

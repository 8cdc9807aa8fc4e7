from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import CloseOutcome, LogState
from ..model import HourLog, LogChanges
from .base import OpenFields, TransitionStrategy


class LabStrategy(TransitionStrategy):
    """On-site session: opened by "in", closed by "out" or "void".

    The type of a lab log is never reclassified, so any category is ignored.
    """

    def prepare_open(self, *, duration: Optional[float], message: Optional[str]) -> OpenFields:
        return OpenFields()

    def decide_close(
        self,
        *,
        log: HourLog,
        outcome: CloseOutcome,
        category: Optional[str],
        now: datetime,
    ) -> LogChanges:
        if outcome == CloseOutcome.APPROVE:
            return LogChanges(state=LogState.COMPLETE, time_out=now)
        return LogChanges(state=LogState.CANCELLED, time_out=now)

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.validators import optional_text, require_non_empty, require_positive_hours
from ...core.constants import MAX_CATEGORY_LENGTH, MAX_MESSAGE_LENGTH
from ...core.enums import CloseOutcome, LogState
from ..model import HourLog, LogChanges
from .base import OpenFields, TransitionStrategy


class ExternalStrategy(TransitionStrategy):
    """Self-reported hours: opened by "submit", closed by an approver's response."""

    def prepare_open(self, *, duration: Optional[float], message: Optional[str]) -> OpenFields:
        return OpenFields(
            duration=require_positive_hours(duration),
            message=require_non_empty(message, "message", max_length=MAX_MESSAGE_LENGTH),
        )

    def decide_close(
        self,
        *,
        log: HourLog,
        outcome: CloseOutcome,
        category: Optional[str],
        now: datetime,
    ) -> LogChanges:
        if outcome != CloseOutcome.APPROVE:
            return LogChanges(state=LogState.CANCELLED, time_out=now)

        # Approving without a category keeps the current type.
        return LogChanges(
            state=LogState.COMPLETE,
            time_out=now,
            type=optional_text(category, "category", max_length=MAX_CATEGORY_LENGTH),
        )

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import CloseOutcome
from ..model import HourLog, LogChanges


@dataclass(frozen=True)
class OpenFields:
    """Write-once metadata stored when a log is created."""

    duration: Optional[float] = None
    message: Optional[str] = None


class TransitionStrategy(ABC):
    """Strategy Pattern: the transition rules of one log family."""

    @abstractmethod
    def prepare_open(self, *, duration: Optional[float], message: Optional[str]) -> OpenFields:
        raise NotImplementedError

    @abstractmethod
    def decide_close(
        self,
        *,
        log: HourLog,
        outcome: CloseOutcome,
        category: Optional[str],
        now: datetime,
    ) -> LogChanges:
        raise NotImplementedError

from __future__ import annotations

from dataclasses import dataclass, field

from ..core.enums import LogFamily
from .model import HourLog
from .strategies.base import TransitionStrategy
from .strategies.external_strategy import ExternalStrategy
from .strategies.lab_strategy import LabStrategy


@dataclass
class TransitionStrategyFactory:
    """Factory Pattern: choose the transition rules for a log family."""

    lab: TransitionStrategy = field(default_factory=LabStrategy)
    external: TransitionStrategy = field(default_factory=ExternalStrategy)

    def for_family(self, family: LogFamily) -> TransitionStrategy:
        if family == LogFamily.LAB:
            return self.lab
        return self.external

    def for_log(self, log: HourLog) -> TransitionStrategy:
        # Approved external logs carry a category as their type; only lab stays "lab".
        if log.is_family(LogFamily.LAB):
            return self.lab
        return self.external

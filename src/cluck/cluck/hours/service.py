from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_utc
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT, MAX_EXTERNAL_REF_LENGTH
from ..core.enums import CloseOutcome, ErrorCode, LogFamily, LogState
from ..core.exceptions import DuplicateSessionError, UnknownSessionError
from .factory import TransitionStrategyFactory
from .model import HourLog, PendingSessionRow
from .repository import HourLogRepository

logger = logging.getLogger(__name__)


class HourLogService:
    """Hour-log state machine: open, close and look up pending logs.

    Transition decisions come from the family strategies; this class only
    loads the current log, asks the strategy and persists the result.
    """

    def __init__(self, logs: HourLogRepository, *, strategy_factory: TransitionStrategyFactory | None = None):
        self._logs = logs
        self._factory = strategy_factory or TransitionStrategyFactory()

    def open(
        self,
        member_id: str,
        family: LogFamily,
        *,
        duration: Optional[float] = None,
        message: Optional[str] = None,
        now: datetime | None = None,
    ) -> HourLog:
        strategy = self._factory.for_family(family)
        fields = strategy.prepare_open(duration=duration, message=message)

        if family == LogFamily.LAB:
            existing = self._logs.find_pending(member_id, family)
            if existing:
                raise DuplicateSessionError(member_id, existing.id)

        log = self._logs.create(
            member_id=member_id,
            family=family,
            time_in=now or now_utc(),
            duration=fields.duration,
            message=fields.message,
        )
        logger.info("opened %s log %s for %s", family.value, log.id, member_id)
        return log

    def close(
        self,
        log_id: str,
        outcome: CloseOutcome,
        *,
        category: Optional[str] = None,
        now: datetime | None = None,
    ) -> HourLog:
        log = self._logs.get(log_id)
        if log is None:
            raise UnknownSessionError(log_id)

        changes = self._factory.for_log(log).decide_close(
            log=log,
            outcome=outcome,
            category=category,
            now=now or now_utc(),
        )

        if log.state.is_terminal:
            # Last response wins: replayed approvals overwrite the earlier close.
            logger.warning(
                "%s: log %s is already %s, applying %s anyway",
                ErrorCode.ALREADY_CLOSED.value,
                log.id,
                log.state.value,
                changes.state.value,
            )

        updated = self._logs.update(log.id, state=changes.state, time_out=changes.time_out, type=changes.type)
        if updated is None:
            raise UnknownSessionError(log_id)
        logger.info("closed log %s for %s as %s", updated.id, updated.member_id, updated.state.value)
        return updated

    def lookup_pending(self, member_id: str, family: LogFamily) -> Optional[HourLog]:
        return self._logs.find_pending(member_id, family)

    def get(self, log_id: str) -> Optional[HourLog]:
        return self._logs.get(log_id)

    def find_by_external_ref(self, external_ref: str) -> Optional[HourLog]:
        ref = require_non_empty(external_ref, "ref", max_length=MAX_EXTERNAL_REF_LENGTH)
        return self._logs.find_by_external_ref(ref)

    def attach_external_ref(self, log_id: str, external_ref: str) -> HourLog:
        external_ref = require_non_empty(external_ref, "ref", max_length=MAX_EXTERNAL_REF_LENGTH)
        log = self._logs.get(log_id)
        if log is None:
            raise UnknownSessionError(log_id)
        if not self._logs.attach_external_ref(log.id, external_ref):
            # Removed between the lookup and the write.
            raise UnknownSessionError(log_id)
        return replace(log, external_ref=external_ref)

    def list_pending(self, family: LogFamily, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[PendingSessionRow]:
        logs = self._logs.list_logs(state=LogState.PENDING, family=family, limit=limit)
        return [PendingSessionRow.from_log(log) for log in logs]

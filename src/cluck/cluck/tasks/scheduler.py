from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Sequence

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler

logger = logging.getLogger(__name__)


def _run_at(delay_seconds: float) -> datetime:
    return datetime.now(timezone.utc) + timedelta(seconds=max(0.0, float(delay_seconds)))


class KeyedTaskScheduler:
    """One-shot deferred jobs keyed by resource id.

    Each key owns at most one pending job, so work for one resource can be
    refreshed or cancelled without touching jobs for any other key.
    """

    def __init__(self, scheduler: Optional[BaseScheduler] = None):
        self._scheduler = scheduler or BackgroundScheduler(timezone="UTC")

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()

    def shutdown(self, *, wait: bool = False) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)

    def schedule(
        self,
        key: str,
        func: Callable[..., Any],
        *,
        delay_seconds: float = 0.0,
        args: Sequence[Any] = (),
        max_instances: int = 1,
        coalesce: bool = True,
    ) -> None:
        """Schedule ``func`` for ``key``, replacing any job the key already has.

        ``max_instances`` above 1 lets a replacement run start while an earlier
        run of the same key is still finishing.
        """
        self._scheduler.add_job(
            func,
            trigger="date",
            run_date=_run_at(delay_seconds),
            args=list(args),
            id=key,
            name=key,
            replace_existing=True,
            misfire_grace_time=None,
            max_instances=max_instances,
            coalesce=coalesce,
        )
        logger.debug("scheduled %s in %.1fs", key, delay_seconds)

    def schedule_or_refresh(
        self,
        key: str,
        func: Callable[..., Any],
        *,
        delay_seconds: float = 0.0,
        args: Sequence[Any] = (),
    ) -> None:
        """Push an existing job for ``key`` back by ``delay_seconds``, or schedule a new one."""
        if not self.reschedule(key, delay_seconds=delay_seconds):
            self.schedule(key, func, delay_seconds=delay_seconds, args=args)

    def reschedule(self, key: str, *, delay_seconds: float) -> bool:
        try:
            self._scheduler.reschedule_job(key, trigger="date", run_date=_run_at(delay_seconds))
        except JobLookupError:
            return False
        logger.debug("rescheduled %s in %.1fs", key, delay_seconds)
        return True

    def cancel(self, key: str) -> bool:
        try:
            self._scheduler.remove_job(key)
        except JobLookupError:
            return False
        logger.debug("cancelled %s", key)
        return True

    def is_scheduled(self, key: str) -> bool:
        return self._scheduler.get_job(key) is not None

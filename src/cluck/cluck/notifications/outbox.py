from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Optional

from ..core.constants import DEFAULT_NOTIFY_DELAY_SECONDS, NOTIFICATION_DRAIN_JOB
from ..tasks.scheduler import KeyedTaskScheduler
from .events import SessionChangeEvent
from .sink import NotificationSink

logger = logging.getLogger(__name__)


class NotificationOutbox:
    """Queue of outbound session events, delivered outside the request path.

    ``emit`` only enqueues and schedules a drain job; delivery failures are
    logged and never reach the request that produced the event. Without a
    scheduler, events are delivered inline.
    """

    def __init__(
        self,
        sink: NotificationSink,
        scheduler: Optional[KeyedTaskScheduler] = None,
        *,
        delay_seconds: float = DEFAULT_NOTIFY_DELAY_SECONDS,
    ):
        self._sink = sink
        self._scheduler = scheduler
        self._delay_seconds = float(delay_seconds)
        self._queue: deque[SessionChangeEvent] = deque()
        self._lock = threading.Lock()

    def emit(self, event: SessionChangeEvent) -> None:
        with self._lock:
            self._queue.append(event)
        try:
            if self._scheduler is None:
                self.drain()
            else:
                # A drain may still be finishing when the next one is due.
                self._scheduler.schedule(
                    NOTIFICATION_DRAIN_JOB,
                    self.drain,
                    delay_seconds=self._delay_seconds,
                    max_instances=2,
                    coalesce=True,
                )
        except Exception:
            logger.exception("could not dispatch session change for %s", event.member_id)

    def pending(self) -> int:
        with self._lock:
            return len(self._queue)

    def drain(self) -> int:
        """Deliver queued events in order. Returns how many were delivered."""
        delivered = 0
        while True:
            with self._lock:
                if not self._queue:
                    return delivered
                event = self._queue.popleft()
            try:
                self._sink.notify(event)
                delivered += 1
            except Exception:
                logger.exception("notification sink failed for %s", event.member_id)

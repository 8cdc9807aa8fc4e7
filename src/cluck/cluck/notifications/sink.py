from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

from ..core.constants import DEFAULT_WEBHOOK_TIMEOUT_SECONDS
from .events import SessionChangeEvent

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def notify(self, event: SessionChangeEvent) -> None:
        raise NotImplementedError


class LoggingNotificationSink(NotificationSink):
    """Used when no webhook is configured."""

    def notify(self, event: SessionChangeEvent) -> None:
        logger.info("session change: %s logging_in=%s", event.member_id, event.logging_in)


class WebhookNotificationSink(NotificationSink):
    """POST each event as JSON to a collaborator (UI relay, chat bridge)."""

    def __init__(
        self,
        url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_WEBHOOK_TIMEOUT_SECONDS,
    ):
        self._url = url
        self._session = session or requests.Session()
        self._timeout = timeout

    def notify(self, event: SessionChangeEvent) -> None:
        resp = self._session.post(self._url, json=event.to_dict(), timeout=self._timeout)
        resp.raise_for_status()

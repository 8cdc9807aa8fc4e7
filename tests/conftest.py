from __future__ import annotations

import threading
import time
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from cluck.clock.gateway import ClockGateway
from cluck.core.enums import LogFamily, LogState
from cluck.core.exceptions import DuplicateSessionError, ValidationError
from cluck.hours.model import HourLog
from cluck.hours.service import HourLogService
from cluck.notifications.outbox import NotificationOutbox


class InMemoryMembers:
    def __init__(self, emails=()):
        self.emails = set(emails)

    def exists(self, member_id: str) -> bool:
        return member_id in self.emails

    def list_active(self):
        return []


class InMemoryHourLogs:
    """Thread-safe store; with ``unique_pending_lab`` it rejects a second pending lab log like the DB index.

    ``race_delay`` sleeps between lookup and insert to widen race windows.
    """

    def __init__(self, *, unique_pending_lab: bool = True, race_delay: float = 0.0):
        self._rows: dict[str, HourLog] = {}
        self._lock = threading.Lock()
        self._unique = unique_pending_lab
        self._race_delay = race_delay
        self.update_calls = 0

    def get(self, log_id: str) -> Optional[HourLog]:
        with self._lock:
            return self._rows.get(log_id)

    def find_pending(self, member_id: str, family: LogFamily) -> Optional[HourLog]:
        with self._lock:
            found = [
                r for r in self._rows.values()
                if r.member_id == member_id and r.type == family.value and r.state == LogState.PENDING
            ]
        if self._race_delay:
            time.sleep(self._race_delay)
        return min(found, key=lambda r: r.time_in) if found else None

    def find_by_external_ref(self, external_ref: str) -> Optional[HourLog]:
        with self._lock:
            return next((r for r in self._rows.values() if r.external_ref == external_ref), None)

    def create(self, *, member_id, family, time_in, duration=None, message=None) -> HourLog:
        log = HourLog(
            id=str(uuid.uuid4()),
            member_id=member_id,
            type=family.value,
            state=LogState.PENDING,
            time_in=time_in,
            duration=duration,
            message=message,
        )
        with self._lock:
            if self._unique and family == LogFamily.LAB:
                for r in self._rows.values():
                    if r.member_id == member_id and r.type == "lab" and r.state == LogState.PENDING:
                        raise DuplicateSessionError(member_id, r.id)
            self._rows[log.id] = log
        return log

    def update(self, log_id: str, *, state: LogState, time_out: datetime, type: Optional[str] = None):
        with self._lock:
            self.update_calls += 1
            row = self._rows.get(log_id)
            if row is None:
                return None
            row = replace(row, state=state, time_out=time_out, type=type or row.type)
            self._rows[log_id] = row
            return row

    def attach_external_ref(self, log_id: str, external_ref: str) -> bool:
        with self._lock:
            row = self._rows.get(log_id)
            if row is None:
                return False
            if any(r.external_ref == external_ref and r.id != log_id for r in self._rows.values()):
                raise ValidationError("ref is already attached to another request")
            self._rows[log_id] = replace(row, external_ref=external_ref)
            return True

    def list_logs(self, *, state=None, family=None, member_id=None, limit=500):
        with self._lock:
            rows = list(self._rows.values())
        if state is not None:
            rows = [r for r in rows if r.state == state]
        if family is not None:
            rows = [r for r in rows if r.type == family.value]
        if member_id is not None:
            rows = [r for r in rows if r.member_id == member_id]
        rows.sort(key=lambda r: r.time_in)
        return rows[:limit]

    def all(self) -> list[HourLog]:
        with self._lock:
            return list(self._rows.values())


class RecordingSink:
    def __init__(self):
        self.events = []

    def notify(self, event) -> None:
        self.events.append(event)


@pytest.fixture
def members():
    return InMemoryMembers({"a@x.org", "b@x.org"})


@pytest.fixture
def logs():
    return InMemoryHourLogs()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def hour_service(logs):
    return HourLogService(logs)


@pytest.fixture
def gateway(hour_service, members, sink):
    return ClockGateway(hour_service, members, NotificationOutbox(sink))

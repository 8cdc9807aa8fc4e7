from __future__ import annotations

import logging

import requests

from cluck.core.constants import NOTIFICATION_DRAIN_JOB
from cluck.notifications.events import SessionChangeEvent
from cluck.notifications.outbox import NotificationOutbox
from cluck.notifications.sink import WebhookNotificationSink


class ListSink:
    def __init__(self, fail_for=()):
        self.events = []
        self._fail_for = set(fail_for)

    def notify(self, event):
        if event.member_id in self._fail_for:
            raise RuntimeError("sink unavailable")
        self.events.append(event)


class ManualScheduler:
    """Records scheduled jobs; tests run them explicitly."""

    def __init__(self):
        self.jobs = {}
        self.options = {}

    def schedule(self, key, func, *, delay_seconds=0.0, args=(), **options):
        self.jobs[key] = (func, delay_seconds, tuple(args))
        self.options[key] = options

    def run(self, key):
        func, _, args = self.jobs.pop(key)
        return func(*args)


def test_emit_without_scheduler_delivers_inline():
    sink = ListSink()
    outbox = NotificationOutbox(sink)

    outbox.emit(SessionChangeEvent("a@x.org", True))

    assert sink.events == [SessionChangeEvent("a@x.org", True)]
    assert outbox.pending() == 0


def test_emit_defers_delivery_to_scheduled_drain():
    sink = ListSink()
    scheduler = ManualScheduler()
    outbox = NotificationOutbox(sink, scheduler, delay_seconds=2.0)

    outbox.emit(SessionChangeEvent("a@x.org", True))
    outbox.emit(SessionChangeEvent("b@x.org", True))

    assert sink.events == []
    assert outbox.pending() == 2
    assert scheduler.jobs[NOTIFICATION_DRAIN_JOB][1] == 2.0

    delivered = scheduler.run(NOTIFICATION_DRAIN_JOB)

    assert delivered == 2
    assert [e.member_id for e in sink.events] == ["a@x.org", "b@x.org"]


def test_sink_failure_is_logged_and_other_events_still_delivered(caplog):
    sink = ListSink(fail_for={"a@x.org"})
    outbox = NotificationOutbox(sink, ManualScheduler())
    outbox.emit(SessionChangeEvent("a@x.org", True))
    outbox.emit(SessionChangeEvent("b@x.org", True))

    with caplog.at_level(logging.ERROR, logger="cluck.notifications.outbox"):
        delivered = outbox.drain()

    assert delivered == 1
    assert [e.member_id for e in sink.events] == ["b@x.org"]
    assert "a@x.org" in caplog.text


def test_scheduler_failure_never_raises_from_emit(caplog):
    class BrokenScheduler:
        def schedule(self, *args, **kwargs):
            raise RuntimeError("scheduler is shut down")

    outbox = NotificationOutbox(ListSink(), BrokenScheduler())

    outbox.emit(SessionChangeEvent("a@x.org", True))

    assert outbox.pending() == 1
    assert "could not dispatch" in caplog.text


def test_webhook_sink_posts_event_json():
    calls = []

    class FakeResponse:
        def raise_for_status(self):
            return None

    class FakeSession:
        def post(self, url, json=None, timeout=None):
            calls.append((url, json, timeout))
            return FakeResponse()

    sink = WebhookNotificationSink("http://relay.local/cluck", session=FakeSession(), timeout=3)

    sink.notify(SessionChangeEvent("a@x.org", True))

    assert calls == [("http://relay.local/cluck", {"email": "a@x.org", "logging_in": True}, 3)]


def test_webhook_sink_raises_on_http_error():
    class FakeResponse:
        def raise_for_status(self):
            raise requests.HTTPError("502 Bad Gateway")

    class FakeSession:
        def post(self, url, json=None, timeout=None):
            return FakeResponse()

    sink = WebhookNotificationSink("http://relay.local/cluck", session=FakeSession())
    outbox = NotificationOutbox(sink)

    # The outbox absorbs the failure; the event is dropped after logging.
    outbox.emit(SessionChangeEvent("a@x.org", True))

    assert outbox.pending() == 0


def test_drain_job_may_overlap_a_finishing_drain():
    scheduler = ManualScheduler()
    outbox = NotificationOutbox(ListSink(), scheduler)

    outbox.emit(SessionChangeEvent("a@x.org", True))

    assert scheduler.options[NOTIFICATION_DRAIN_JOB] == {"max_instances": 2, "coalesce": True}


def test_event_queued_after_a_drain_is_picked_up_by_the_next_one():
    sink = ListSink()
    scheduler = ManualScheduler()
    outbox = NotificationOutbox(sink, scheduler)

    outbox.emit(SessionChangeEvent("a@x.org", True))
    scheduler.run(NOTIFICATION_DRAIN_JOB)
    outbox.emit(SessionChangeEvent("b@x.org", True))
    scheduler.run(NOTIFICATION_DRAIN_JOB)

    assert [e.member_id for e in sink.events] == ["a@x.org", "b@x.org"]
    assert outbox.pending() == 0

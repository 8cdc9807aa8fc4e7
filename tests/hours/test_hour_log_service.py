from __future__ import annotations

import logging
from datetime import datetime

import pytest

from cluck.core.enums import CloseOutcome, LogFamily, LogState
from cluck.core.exceptions import DuplicateSessionError, UnknownSessionError, ValidationError

T_IN = datetime(2025, 3, 1, 9, 0, 0)
T_OUT = datetime(2025, 3, 1, 17, 0, 0)


def test_open_lab_creates_pending_log(hour_service):
    log = hour_service.open("a@x.org", LogFamily.LAB, now=T_IN)

    assert log.state == LogState.PENDING
    assert log.type == "lab"
    assert log.time_in == T_IN
    assert log.time_out is None
    assert hour_service.lookup_pending("a@x.org", LogFamily.LAB) == log


def test_second_lab_open_is_duplicate_with_existing_id(hour_service):
    first = hour_service.open("a@x.org", LogFamily.LAB)

    with pytest.raises(DuplicateSessionError) as exc:
        hour_service.open("a@x.org", LogFamily.LAB)

    assert exc.value.log_id == first.id


def test_store_uniqueness_violation_surfaces_as_duplicate(logs, hour_service, monkeypatch):
    first = hour_service.open("a@x.org", LogFamily.LAB)
    # Simulate a racing request that passed the lookup before the first insert landed.
    monkeypatch.setattr(logs, "find_pending", lambda member_id, family: None)

    with pytest.raises(DuplicateSessionError) as exc:
        hour_service.open("a@x.org", LogFamily.LAB)

    assert exc.value.log_id == first.id


def test_open_external_stores_write_once_metadata(hour_service):
    log = hour_service.open("a@x.org", LogFamily.EXTERNAL, duration=3, message="helped setup")

    assert log.duration == 3
    assert log.message == "helped setup"
    assert log.state == LogState.PENDING


def test_open_external_without_metadata_fails(hour_service, logs):
    with pytest.raises(ValidationError):
        hour_service.open("a@x.org", LogFamily.EXTERNAL)

    assert logs.all() == []


def test_close_unknown_log(hour_service):
    with pytest.raises(UnknownSessionError):
        hour_service.close("missing", CloseOutcome.APPROVE)


def test_close_sets_time_out_and_state(hour_service):
    log = hour_service.open("a@x.org", LogFamily.LAB, now=T_IN)

    closed = hour_service.close(log.id, CloseOutcome.APPROVE, now=T_OUT)

    assert closed.state == LogState.COMPLETE
    assert closed.time_out == T_OUT
    assert closed.type == "lab"
    assert hour_service.lookup_pending("a@x.org", LogFamily.LAB) is None


def test_approve_external_rewrites_type_and_keeps_metadata(hour_service):
    log = hour_service.open("a@x.org", LogFamily.EXTERNAL, duration=3, message="helped setup")

    closed = hour_service.close(log.id, CloseOutcome.APPROVE, category="volunteer")

    assert closed.type == "volunteer"
    assert closed.duration == 3
    assert closed.message == "helped setup"


def test_reclose_overwrites_and_warns(hour_service, logs, caplog):
    log = hour_service.open("a@x.org", LogFamily.EXTERNAL, duration=2, message="event")
    hour_service.close(log.id, CloseOutcome.CANCEL, now=T_IN)

    with caplog.at_level(logging.WARNING, logger="cluck.hours.service"):
        again = hour_service.close(log.id, CloseOutcome.APPROVE, category="outreach", now=T_OUT)

    assert again.state == LogState.COMPLETE
    assert again.type == "outreach"
    assert again.time_out == T_OUT
    assert logs.update_calls == 2
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "AlreadyClosed" in warnings[0].getMessage()


def test_each_reclose_is_logged_separately(hour_service, caplog):
    log = hour_service.open("a@x.org", LogFamily.LAB)
    hour_service.close(log.id, CloseOutcome.APPROVE)

    with caplog.at_level(logging.WARNING, logger="cluck.hours.service"):
        hour_service.close(log.id, CloseOutcome.APPROVE)
        hour_service.close(log.id, CloseOutcome.CANCEL)

    assert len([r for r in caplog.records if "AlreadyClosed" in r.getMessage()]) == 2


def test_attach_external_ref_and_lookup(hour_service):
    log = hour_service.open("a@x.org", LogFamily.EXTERNAL, duration=1, message="demo")

    updated = hour_service.attach_external_ref(log.id, "1700000000.000100")

    assert updated.external_ref == "1700000000.000100"
    assert hour_service.find_by_external_ref("1700000000.000100").id == log.id


def test_attach_external_ref_to_unknown_log(hour_service):
    with pytest.raises(UnknownSessionError):
        hour_service.attach_external_ref("missing", "ts")


def test_attach_external_ref_when_log_vanishes_before_write(logs, hour_service, monkeypatch):
    log = hour_service.open("a@x.org", LogFamily.EXTERNAL, duration=1, message="demo")
    monkeypatch.setattr(logs, "attach_external_ref", lambda log_id, external_ref: False)

    with pytest.raises(UnknownSessionError):
        hour_service.attach_external_ref(log.id, "1700000000.000100")


def test_attach_external_ref_rejects_overlong_ref(hour_service):
    log = hour_service.open("a@x.org", LogFamily.EXTERNAL, duration=1, message="demo")

    with pytest.raises(ValidationError):
        hour_service.attach_external_ref(log.id, "r" * 65)


def test_list_pending_filters_by_family_and_state(hour_service):
    lab = hour_service.open("a@x.org", LogFamily.LAB)
    ext = hour_service.open("b@x.org", LogFamily.EXTERNAL, duration=4, message="fair")
    closed = hour_service.open("b@x.org", LogFamily.LAB)
    hour_service.close(closed.id, CloseOutcome.CANCEL)

    assert [r.id for r in hour_service.list_pending(LogFamily.LAB)] == [lab.id]
    assert [r.id for r in hour_service.list_pending(LogFamily.EXTERNAL)] == [ext.id]

"""Tests for event presentation helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from scheduler.domain.models import Event, RecurrenceRule
from scheduler.services.formatters import (
    duration_minutes,
    event_log_fields,
    event_status,
    format_recurrence_rule,
)

_START = datetime(2026, 4, 10, 18, 0, tzinfo=timezone.utc)


def _event(**overrides) -> Event:
    defaults = dict(
        id="evt-42",
        title="Concert",
        description="Spring recital",
        location="Auditorium",
        start_time=_START,
        end_time=_START + timedelta(hours=1, minutes=30),
        is_recurring=False,
        created_at=_START - timedelta(days=7),
        updated_at=_START - timedelta(days=7),
    )
    defaults.update(overrides)
    return Event(**defaults)


def test_duration_minutes():
    assert duration_minutes(_event()) == 90


@pytest.mark.parametrize(
    "offset, expected",
    [
        (timedelta(minutes=-1), "upcoming"),
        (timedelta(0), "active"),
        (timedelta(minutes=45), "active"),
        (timedelta(minutes=90), "active"),
        (timedelta(minutes=91), "past"),
    ],
)
def test_event_status(offset: timedelta, expected: str):
    assert event_status(_event(), _START + offset) == expected


def test_format_recurrence_rule():
    assert format_recurrence_rule(RecurrenceRule.YEARLY) == "Yearly"
    assert format_recurrence_rule("DAILY") == "Daily"
    assert format_recurrence_rule(None) is None


def test_event_log_fields():
    fields = event_log_fields(
        _event(is_recurring=True, recurrence_rule=RecurrenceRule.WEEKLY)
    )
    assert fields == {
        "event_id": "evt-42",
        "title": "Concert",
        "start_time": "2026-04-10T18:00:00+00:00",
        "end_time": "2026-04-10T19:30:00+00:00",
        "location": "Auditorium",
        "duration_minutes": 90,
        "recurrence": "Weekly",
    }

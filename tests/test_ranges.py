"""Tests for the range-query engine."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from scheduler.domain.errors import InvalidRange
from scheduler.domain.models import EventFields
from scheduler.domain.result import Err, Ok
from scheduler.repos.memory import InMemoryEventStore
from scheduler.services.ranges import RangeQueryEngine

_DAY = datetime(2026, 5, 4, 0, 0, tzinfo=timezone.utc)


def _at(hours: float) -> datetime:
    return _DAY + timedelta(hours=hours)


def _add(store: InMemoryEventStore, start: float, end: float, title: str) -> str:
    return store.insert(
        EventFields(
            title=title,
            description=f"{title} description",
            location="Hall",
            start_time=_at(start),
            end_time=_at(end),
            is_recurring=False,
            created_at=_DAY,
            updated_at=_DAY,
        )
    )


@pytest.fixture()
def store() -> InMemoryEventStore:
    store = InMemoryEventStore()
    # Inserted out of chronological order on purpose.
    _add(store, 14, 15, "Afternoon")
    _add(store, 9, 10, "Morning")
    _add(store, 20, 21, "Evening")
    return store


def _titles(result) -> list[str]:
    assert isinstance(result, Ok)
    return [e.title for e in result.value]


def test_find_sorts_by_start_time(store: InMemoryEventStore):
    result = RangeQueryEngine(store).find(_at(0), _at(24))
    assert _titles(result) == ["Morning", "Afternoon", "Evening"]


def test_find_includes_events_touching_window_edges(store: InMemoryEventStore):
    """Window [10, 14] touches Morning's end and Afternoon's start."""
    result = RangeQueryEngine(store).find(_at(10), _at(14))
    assert _titles(result) == ["Morning", "Afternoon"]


def test_find_excludes_events_outside_window(store: InMemoryEventStore):
    result = RangeQueryEngine(store).find(_at(16), _at(19))
    assert _titles(result) == []


def test_find_includes_event_spanning_whole_window(store: InMemoryEventStore):
    result = RangeQueryEngine(store).find(_at(14.25), _at(14.75))
    assert _titles(result) == ["Afternoon"]


def test_find_reversed_window_is_invalid_range(store: InMemoryEventStore):
    result = RangeQueryEngine(store).find(_at(10), _at(9))
    assert isinstance(result, Err)
    assert isinstance(result.error, InvalidRange)


def test_equal_start_times_keep_insertion_order():
    store = InMemoryEventStore()
    _add(store, 9, 10, "First")
    _add(store, 9, 9.5, "Second")
    _add(store, 8, 9, "Earlier")

    result = RangeQueryEngine(store).find(_at(0), _at(24))
    assert _titles(result) == ["Earlier", "First", "Second"]


def test_repeated_find_returns_identical_results(store: InMemoryEventStore):
    engine = RangeQueryEngine(store)
    first = engine.find(_at(0), _at(24))
    second = engine.find(_at(0), _at(24))
    assert isinstance(first, Ok) and isinstance(second, Ok)
    assert first.value == second.value
    assert first.value is not second.value


def test_find_upcoming_drops_finished_events(store: InMemoryEventStore):
    upcoming = RangeQueryEngine(store).find_upcoming(_at(10))
    assert [e.title for e in upcoming] == ["Morning", "Afternoon", "Evening"]

    upcoming = RangeQueryEngine(store).find_upcoming(_at(10.5))
    assert [e.title for e in upcoming] == ["Afternoon", "Evening"]

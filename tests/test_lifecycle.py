"""Tests for change notifications: bus, audit handlers and service wiring."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from scheduler.domain.bus import EventBus
from scheduler.domain.events import EventAdded, EventDeleted, EventUpdated
from scheduler.domain.handlers import HandlerRegistry
from scheduler.domain.models import EventInput, EventUpdateInput
from scheduler.repos.memory import InMemoryEventStore
from scheduler.services.events import EventService

_NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


class RecordingLogger:
    def __init__(self) -> None:
        self.records: list[tuple[str, dict]] = []

    def info(self, event: str, **kw) -> None:
        self.records.append((event, kw))


@pytest.fixture()
def env():
    """Fresh bus + store + registry + service for each test."""
    bus = EventBus()
    logger = RecordingLogger()
    registry = HandlerRegistry(bus=bus, logger=logger, clock=lambda: _NOW)
    service = EventService(InMemoryEventStore(), bus=bus, clock=lambda: _NOW)

    class Env:
        pass

    e = Env()
    e.bus = bus
    e.logger = logger
    e.registry = registry
    e.service = service
    return e


def _create_result(env, hours: int = 1):
    return env.service.create(
        EventInput(
            title="Book club",
            description="Chapter 4",
            location="Library",
            start_time=_NOW + timedelta(hours=hours),
            end_time=_NOW + timedelta(hours=hours + 1),
            is_recurring=True,
            recurrence_rule="monthly",
        )
    )


def _create(env, hours: int = 1):
    return _create_result(env, hours).value


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------


def test_bus_dispatches_by_type_in_registration_order():
    bus = EventBus()
    calls: list[str] = []
    bus.subscribe(EventDeleted, lambda e: calls.append(f"first:{e.event_id}"))
    bus.subscribe(EventDeleted, lambda e: calls.append(f"second:{e.event_id}"))
    bus.subscribe(EventAdded, lambda e: calls.append("never"))

    bus.publish(EventDeleted(event_id="x"))

    assert calls == ["first:x", "second:x"]


def test_bus_unsubscribe():
    bus = EventBus()
    calls: list[str] = []
    unsubscribe = bus.subscribe(EventDeleted, lambda e: calls.append(e.event_id))

    bus.publish(EventDeleted(event_id="a"))
    unsubscribe()
    unsubscribe()
    bus.publish(EventDeleted(event_id="b"))

    assert calls == ["a"]


# ---------------------------------------------------------------------------
# Audit handlers
# ---------------------------------------------------------------------------


def test_added_event_is_audited(env):
    event = _create(env)

    name, fields = env.logger.records[-1]
    assert name == "event_added"
    assert fields["event_id"] == event.id
    assert fields["status"] == "upcoming"
    assert fields["duration_minutes"] == 60
    assert fields["recurrence"] == "Monthly"


def test_updated_event_is_audited_with_changed_fields(env):
    event = _create(env)

    env.service.update(event.id, EventUpdateInput(title="Book club (moved)"))

    name, fields = env.logger.records[-1]
    assert name == "event_updated"
    assert fields["changed_fields"] == ["title"]
    assert fields["title"] == "Book club (moved)"


def test_deleted_event_is_audited(env):
    event = _create(env)

    env.service.delete(event.id)

    assert env.logger.records[-1] == ("event_deleted", {"event_id": event.id})


def test_rejected_mutations_are_not_published(env):
    seen: list = []
    env.bus.subscribe(EventAdded, seen.append)
    env.bus.subscribe(EventUpdated, seen.append)
    env.bus.subscribe(EventDeleted, seen.append)
    event = _create(env)
    seen.clear()

    _create_result(env)  # same slot, conflicts
    env.service.update(event.id, EventUpdateInput(title=""))
    env.service.delete("missing")

    assert seen == []

"""In-memory event store."""

from __future__ import annotations

import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from scheduler.domain.models import Event, EventFields
from scheduler.repos.base import EventPredicate, EventStore, within_bounds


def _new_id() -> str:
    return str(uuid.uuid4())


class InMemoryEventStore(EventStore):
    """Dict-backed store for Event instances, keyed by id.

    Dict order doubles as insertion order; updates replace the value in place
    so an event keeps its original position.
    """

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}
        self._lock = threading.RLock()

    def insert(self, fields: EventFields) -> str:
        event = Event(id=_new_id(), **fields.model_dump())
        with self._lock:
            self._store[event.id] = event
        return event.id

    def find_by_id(self, event_id: str) -> Event | None:
        with self._lock:
            return self._store.get(event_id)

    def update_by_id(self, event_id: str, fields: dict[str, Any]) -> bool:
        with self._lock:
            current = self._store.get(event_id)
            if current is None:
                return False
            self._store[event_id] = current.model_copy(update=fields)
            return True

    def delete_by_id(self, event_id: str) -> bool:
        with self._lock:
            return self._store.pop(event_id, None) is not None

    def scan(
        self,
        predicate: EventPredicate | None = None,
        *,
        start_before: datetime | None = None,
        end_after: datetime | None = None,
    ) -> list[Event]:
        with self._lock:
            candidates = list(self._store.values())
        return [
            e
            for e in candidates
            if within_bounds(e, start_before, end_after)
            and (predicate is None or predicate(e))
        ]

    @contextmanager
    def transaction(self) -> Iterator[InMemoryEventStore]:
        with self._lock:
            yield self

"""Store interface for event persistence.

Stores must be swappable and return domain models. Every store also offers
``transaction()``: a critical section that serialises the conflict check and
the write that follows it, so two overlapping writers cannot both pass the
check.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any, Callable

from scheduler.domain.models import Event, EventFields

EventPredicate = Callable[[Event], bool]


class StoreFailure(Exception):
    """Raised by a store when the underlying persistence layer fails."""


class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    def insert(self, fields: EventFields) -> str:
        """Persist a new event and return its freshly assigned id."""
        ...

    @abstractmethod
    def find_by_id(self, event_id: str) -> Event | None:
        """Return an event by id, or None if not found."""
        ...

    @abstractmethod
    def update_by_id(self, event_id: str, fields: dict[str, Any]) -> bool:
        """Overwrite the given fields. Returns False if the id is unknown."""
        ...

    @abstractmethod
    def delete_by_id(self, event_id: str) -> bool:
        """Remove an event. Returns False if the id is unknown."""
        ...

    @abstractmethod
    def scan(
        self,
        predicate: EventPredicate | None = None,
        *,
        start_before: datetime | None = None,
        end_after: datetime | None = None,
    ) -> list[Event]:
        """Return matching events in insertion order.

        ``start_before`` and ``end_after`` are inclusive pruning bounds
        (``start_time <= start_before`` and ``end_time >= end_after``) that a
        store may push down to an index. ``predicate`` is the exact filter and
        is always applied.
        """
        ...

    @abstractmethod
    def transaction(self) -> AbstractContextManager[EventStore]:
        """Scheduling-wide critical section, scoped to a single operation."""
        ...


def within_bounds(
    event: Event, start_before: datetime | None, end_after: datetime | None
) -> bool:
    if start_before is not None and event.start_time > start_before:
        return False
    if end_after is not None and event.end_time < end_after:
        return False
    return True

"""Range queries over stored events."""

from __future__ import annotations

from datetime import datetime

from scheduler.domain.errors import InvalidRange
from scheduler.domain.intervals import intersects_range
from scheduler.domain.models import Event
from scheduler.domain.result import Err, Ok, Result
from scheduler.repos.base import EventStore


def by_start_time(events: list[Event]) -> list[Event]:
    # sorted() is stable, so equal start times keep the store's insertion order.
    return sorted(events, key=lambda e: e.start_time)


class RangeQueryEngine:
    """Selects events intersecting an inclusive window, ordered by start time.

    Every call re-queries the store and returns a fresh list.
    """

    def __init__(self, store: EventStore) -> None:
        self.store = store

    def find(
        self, range_start: datetime, range_end: datetime
    ) -> Result[list[Event], InvalidRange]:
        if range_start > range_end:
            return Err(
                InvalidRange(message="Start date must be before or equal to end date")
            )
        return Ok(self._select(range_start, range_end))

    def find_upcoming(self, now: datetime) -> list[Event]:
        """Events that have not ended yet (``end_time >= now``)."""
        return self._select(now, None)

    def _select(self, range_start: datetime, range_end: datetime | None) -> list[Event]:
        matches = self.store.scan(
            lambda e: intersects_range(e, range_start, range_end),
            start_before=range_end,
            end_after=range_start,
        )
        return by_start_time(matches)

"""Service for detecting scheduling conflicts between events."""

from __future__ import annotations

from collections.abc import Iterable

from scheduler.domain.intervals import conflicts
from scheduler.domain.models import Event, TimeInterval
from scheduler.repos.base import EventStore


def find_conflicts(
    candidate: TimeInterval,
    existing_events: Iterable[Event],
    exclude_id: str | None = None,
) -> list[Event]:
    """Return existing events that overlap the candidate interval.

    Overlap rule: conflict if candidate.start < existing.end_time AND
    existing.start_time < candidate.end. Exact boundary touches
    (end == start) are NOT considered conflicts.
    """
    return [
        event
        for event in existing_events
        if event.id != exclude_id and conflicts(event.interval, candidate)
    ]


class ConflictDetector:
    """Looks up stored events that would collide with a candidate interval.

    The lookup alone does not protect the no-overlap invariant: callers must
    run it and the subsequent write inside one ``store.transaction()``.
    """

    def __init__(self, store: EventStore) -> None:
        self.store = store

    def find_conflict(
        self, candidate: TimeInterval, exclude_id: str | None = None
    ) -> Event | None:
        """Return the first stored event overlapping *candidate*, if any.

        *exclude_id* skips the event being updated so it cannot collide with
        its own current interval.
        """
        # Any overlap needs start <= candidate.end and end >= candidate.start;
        # the store may use these inclusive bounds to prune before the exact test.
        nearby = self.store.scan(start_before=candidate.end, end_after=candidate.start)
        matches = find_conflicts(candidate, nearby, exclude_id)
        return matches[0] if matches else None

"""Overlap predicates for event intervals.

Two boundary conventions live here on purpose:

* ``conflicts`` is strict and half-open. Back-to-back events (one ends
  exactly when the next starts) do not conflict.
* ``intersects_range`` is inclusive at both ends. A display window that
  ends exactly when an event starts still shows that event.
"""

from __future__ import annotations

from datetime import datetime

from scheduler.domain.models import EventDraft, TimeInterval


def conflicts(a: TimeInterval, b: TimeInterval) -> bool:
    """Return True if the two half-open intervals share any instant."""
    return max(a.start, b.start) < min(a.end, b.end)


def intersects_range(
    event: EventDraft,
    range_start: datetime,
    range_end: datetime | None,
) -> bool:
    """Return True if *event* touches the inclusive window.

    ``range_end=None`` leaves the window open ended, which reduces the test to
    ``event.end_time >= range_start``.
    """
    if range_end is None:
        return range_start <= event.end_time
    return max(event.start_time, range_start) <= min(event.end_time, range_end)

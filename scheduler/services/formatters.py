"""Presentation helpers for events (log lines, status labels)."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from scheduler.domain.models import Event, EventDraft, RecurrenceRule

EventStatus = Literal["active", "upcoming", "past"]


def duration_minutes(event: EventDraft) -> int:
    return round((event.end_time - event.start_time).total_seconds() / 60)


def event_status(event: EventDraft, now: datetime) -> EventStatus:
    """Where *event* sits relative to *now*; both ends count as active."""
    if event.start_time <= now <= event.end_time:
        return "active"
    if event.start_time > now:
        return "upcoming"
    return "past"


def format_recurrence_rule(rule: RecurrenceRule | str | None) -> str | None:
    """``"weekly"`` -> ``"Weekly"``."""
    if not rule:
        return None
    return str(rule).lower().capitalize()


def event_log_fields(event: Event) -> dict[str, Any]:
    return {
        "event_id": event.id,
        "title": event.title,
        "start_time": event.start_time.isoformat(),
        "end_time": event.end_time.isoformat(),
        "location": event.location,
        "duration_minutes": duration_minutes(event),
        "recurrence": format_recurrence_rule(event.recurrence_rule),
    }

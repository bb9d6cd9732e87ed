"""Domain events emitted after a committed mutation."""

from __future__ import annotations

from pydantic import BaseModel

from scheduler.domain.models import Event


class EventAdded(BaseModel):
    """Fired when a new Event is persisted."""

    event: Event


class EventUpdated(BaseModel):
    """Fired when an Event is changed in place."""

    event: Event
    changed_fields: list[str]


class EventDeleted(BaseModel):
    """Fired when an Event is removed."""

    event_id: str

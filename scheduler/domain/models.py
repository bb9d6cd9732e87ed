"""Domain models for the event scheduler."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, StrictBool, model_validator
from pydantic.alias_generators import to_camel


class RecurrenceRule(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WireModel(BaseModel):
    """Base for every model that crosses the API boundary.

    Attributes are snake_case in Python; the wire names are camelCase
    (``startTime``, ``isRecurring``...). Either form is accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class TimeInterval(BaseModel):
    """Half-open ``[start, end)`` span of absolute instants."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime


class EventDraft(WireModel):
    """A validated, not yet stored event."""

    title: str
    description: str
    location: str
    start_time: datetime
    end_time: datetime
    is_recurring: bool
    recurrence_rule: RecurrenceRule | None = None

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(start=self.start_time, end=self.end_time)


class EventFields(EventDraft):
    created_at: datetime
    updated_at: datetime


class Event(EventFields):
    id: str

    @model_validator(mode="after")
    def _end_after_start(self) -> Event:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class EventPatch(WireModel):
    """Validated partial update; only the fields that were set are applied."""

    title: str | None = None
    description: str | None = None
    location: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    is_recurring: bool | None = None
    recurrence_rule: RecurrenceRule | None = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)

    @property
    def touches_interval(self) -> bool:
        return bool({"start_time", "end_time"} & self.model_fields_set)


# ---------------------------------------------------------------------------
# Request DTOs
# ---------------------------------------------------------------------------


class EventInput(WireModel):
    """Raw creation payload. Nothing is checked here beyond JSON types;
    the validator owns every business rule."""

    title: str | None = None
    description: str | None = None
    location: str | None = None
    start_time: datetime | str | None = None
    end_time: datetime | str | None = None
    is_recurring: StrictBool | None = None
    recurrence_rule: str | None = None


class EventUpdateInput(WireModel):
    """Raw partial-update payload. Omitted fields stay untouched; an explicit
    ``null`` counts as supplied."""

    title: str | None = None
    description: str | None = None
    location: str | None = None
    start_time: datetime | str | None = None
    end_time: datetime | str | None = None
    is_recurring: StrictBool | None = None
    recurrence_rule: str | None = None

"""Field and temporal validation for event input.

Rules run in a fixed order and stop at the first failure:

1. required fields present and non-blank
2. text length bounds
3. timestamps parse
4. start before end
5. span of at most 24 hours
6. start not in the past (creation only)
7. recurrence flag and rule agree

Text is trimmed before it is checked and stays trimmed in the result.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from dateutil.parser import isoparse

from scheduler.domain.errors import InvalidRange, ValidationError
from scheduler.domain.models import (
    Event,
    EventDraft,
    EventInput,
    EventPatch,
    EventUpdateInput,
    RecurrenceRule,
)
from scheduler.domain.result import Err, Ok, Result

MAX_EVENT_DURATION = timedelta(hours=24)

# (attribute, label, max length)
TEXT_FIELDS: tuple[tuple[str, str, int], ...] = (
    ("title", "Title", 200),
    ("description", "Description", 1000),
    ("location", "Location", 300),
)

_RULE_VALUES = tuple(rule.value for rule in RecurrenceRule)
_VALID_RULES = ", ".join(_RULE_VALUES)


def parse_timestamp(value: datetime | str) -> datetime:
    """Return *value* as an aware UTC datetime.

    Naive values are taken to be UTC already. Raises ``ValueError`` when a
    string is not an ISO-8601 timestamp.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = isoparse(value.strip())
        except OverflowError as exc:
            raise ValueError(str(exc)) from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _invalid(message: str, field: str | None = None) -> Err[ValidationError]:
    return Err(ValidationError(message=message, field=field))


def _check_interval(start: datetime, end: datetime) -> Err[ValidationError] | None:
    if start >= end:
        return _invalid("Start time must be before end time", "start_time")
    if end - start > MAX_EVENT_DURATION:
        return _invalid("Event duration cannot exceed 24 hours", "end_time")
    return None


def _check_recurrence(
    is_recurring: object, raw_rule: str | None
) -> Result[RecurrenceRule | None, ValidationError]:
    if not isinstance(is_recurring, bool):
        return _invalid("isRecurring must be a boolean value", "is_recurring")

    rule = raw_rule.strip().lower() if raw_rule else ""
    if is_recurring:
        if not rule:
            return _invalid(
                "Recurrence rule is required when event is recurring", "recurrence_rule"
            )
        if rule not in _RULE_VALUES:
            return _invalid(
                f"Recurrence rule must be one of: {_VALID_RULES}", "recurrence_rule"
            )
        return Ok(RecurrenceRule(rule))

    if rule:
        return _invalid(
            "Recurrence rule must be empty when event is not recurring",
            "recurrence_rule",
        )
    return Ok(None)


def validate_for_create(
    data: EventInput, now: datetime
) -> Result[EventDraft, ValidationError]:
    """Check a full creation payload against every rule."""
    text: dict[str, str] = {}
    for attr, label, _ in TEXT_FIELDS:
        value = getattr(data, attr)
        if value is None or not value.strip():
            return _invalid(f"{label} is required and cannot be empty", attr)
        text[attr] = value.strip()
    if data.start_time is None:
        return _invalid("Start time is required", "start_time")
    if data.end_time is None:
        return _invalid("End time is required", "end_time")
    if data.is_recurring is None:
        return _invalid("isRecurring is required", "is_recurring")

    for attr, label, limit in TEXT_FIELDS:
        if len(text[attr]) > limit:
            return _invalid(f"{label} must be at most {limit} characters", attr)

    try:
        start = parse_timestamp(data.start_time)
    except ValueError:
        return _invalid("Invalid start time format", "start_time")
    try:
        end = parse_timestamp(data.end_time)
    except ValueError:
        return _invalid("Invalid end time format", "end_time")

    failure = _check_interval(start, end)
    if failure is not None:
        return failure

    if start < now:
        return _invalid("Start time cannot be in the past", "start_time")

    rule = _check_recurrence(data.is_recurring, data.recurrence_rule)
    if isinstance(rule, Err):
        return rule

    return Ok(
        EventDraft(
            **text,
            start_time=start,
            end_time=end,
            is_recurring=data.is_recurring,
            recurrence_rule=rule.value,
        )
    )


def validate_for_update(
    data: EventUpdateInput, existing: Event
) -> Result[EventPatch, ValidationError]:
    """Check only the supplied fields of a partial update.

    A lone ``start_time`` or ``end_time`` is checked against the other end of
    *existing*. The past-start rule does not apply to updates.
    """
    supplied = data.model_fields_set
    changes: dict = {}

    for attr, label, _ in TEXT_FIELDS:
        if attr in supplied:
            value = getattr(data, attr)
            if value is None or not value.strip():
                return _invalid(f"{label} cannot be empty", attr)
            changes[attr] = value.strip()
    if "start_time" in supplied and data.start_time is None:
        return _invalid("Start time cannot be empty", "start_time")
    if "end_time" in supplied and data.end_time is None:
        return _invalid("End time cannot be empty", "end_time")

    for attr, label, limit in TEXT_FIELDS:
        if attr in changes and len(changes[attr]) > limit:
            return _invalid(f"{label} must be at most {limit} characters", attr)

    if "start_time" in supplied:
        try:
            changes["start_time"] = parse_timestamp(data.start_time)
        except ValueError:
            return _invalid("Invalid start time format", "start_time")
    if "end_time" in supplied:
        try:
            changes["end_time"] = parse_timestamp(data.end_time)
        except ValueError:
            return _invalid("Invalid end time format", "end_time")

    if "start_time" in changes or "end_time" in changes:
        failure = _check_interval(
            changes.get("start_time", existing.start_time),
            changes.get("end_time", existing.end_time),
        )
        if failure is not None:
            return failure

    if "is_recurring" in supplied or "recurrence_rule" in supplied:
        is_recurring = (
            data.is_recurring if "is_recurring" in supplied else existing.is_recurring
        )
        if "recurrence_rule" in supplied:
            raw_rule = data.recurrence_rule
        else:
            # Turning recurrence off clears the stored rule.
            raw_rule = existing.recurrence_rule if is_recurring else None
        rule = _check_recurrence(is_recurring, raw_rule)
        if isinstance(rule, Err):
            return rule
        if "is_recurring" in supplied:
            changes["is_recurring"] = is_recurring
        changes["recurrence_rule"] = rule.value

    return Ok(EventPatch(**changes))


def validate_range(
    range_start: datetime | str,
    range_end: datetime | str,
    max_span: timedelta | None = None,
) -> Result[tuple[datetime, datetime], InvalidRange]:
    """Parse and check a range-query window (inclusive at both ends)."""
    try:
        start = parse_timestamp(range_start)
    except ValueError:
        return Err(InvalidRange(message="Invalid start date format"))
    try:
        end = parse_timestamp(range_end)
    except ValueError:
        return Err(InvalidRange(message="Invalid end date format"))
    if start > end:
        return Err(InvalidRange(message="Start date must be before or equal to end date"))
    if max_span is not None and end - start > max_span:
        return Err(
            InvalidRange(message=f"Date range cannot exceed {max_span.days} days")
        )
    return Ok((start, end))

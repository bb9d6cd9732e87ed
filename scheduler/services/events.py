"""EventService: the operations exposed to the API layer.

Each mutation is a straight line (validate, check for conflicts, commit) and
any failure returns an error value before anything is written. The conflict
check and the write share one ``store.transaction()`` so overlapping writers
are serialised and only one of them can win.
"""

from __future__ import annotations

import functools
from datetime import datetime, timedelta
from typing import Callable

from scheduler.domain.bus import EventBus
from scheduler.domain.errors import ConflictError, NotFound, ServiceError, StoreError
from scheduler.domain.events import EventAdded, EventDeleted, EventUpdated
from scheduler.domain.models import (
    Event,
    EventFields,
    EventInput,
    EventUpdateInput,
    utcnow,
)
from scheduler.domain.result import Err, Ok, Result
from scheduler.logging_config import get_logger
from scheduler.repos.base import EventStore, StoreFailure
from scheduler.services.conflicts import ConflictDetector
from scheduler.services.ranges import RangeQueryEngine, by_start_time
from scheduler.services.validation import (
    validate_for_create,
    validate_for_update,
    validate_range,
)

logger = get_logger(__name__)


def _surface_store_failures(method):
    """Turn a ``StoreFailure`` raised anywhere in *method* into ``Err(StoreError)``."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except StoreFailure as exc:
            logger.error("store_failure", operation=method.__name__, error=str(exc))
            return Err(StoreError(message=str(exc)))

    return wrapper


class EventService:
    def __init__(
        self,
        store: EventStore,
        bus: EventBus | None = None,
        clock: Callable[[], datetime] = utcnow,
        max_range: timedelta | None = timedelta(days=365),
    ) -> None:
        self.store = store
        self.bus = bus or EventBus()
        self.clock = clock
        self.max_range = max_range
        self.conflicts = ConflictDetector(store)
        self.ranges = RangeQueryEngine(store)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @_surface_store_failures
    def create(self, data: EventInput) -> Result[Event, ServiceError]:
        now = self.clock()
        validated = validate_for_create(data, now)
        if isinstance(validated, Err):
            logger.info("event_rejected", operation="create", reason=validated.error.message)
            return validated
        draft = validated.value

        with self.store.transaction() as store:
            clash = self.conflicts.find_conflict(draft.interval)
            if clash is not None:
                return self._conflict("create", clash)
            fields = EventFields(**draft.model_dump(), created_at=now, updated_at=now)
            event = Event(id=store.insert(fields), **fields.model_dump())

        self.bus.publish(EventAdded(event=event))
        return Ok(event)

    @_surface_store_failures
    def update(self, event_id: str, data: EventUpdateInput) -> Result[Event, ServiceError]:
        with self.store.transaction() as store:
            existing = store.find_by_id(event_id)
            if existing is None:
                return self._not_found("update", event_id)

            validated = validate_for_update(data, existing)
            if isinstance(validated, Err):
                logger.info(
                    "event_rejected",
                    operation="update",
                    event_id=event_id,
                    reason=validated.error.message,
                )
                return validated
            changes = validated.value.changes()
            merged = existing.model_copy(update=changes)

            if merged.interval != existing.interval:
                clash = self.conflicts.find_conflict(merged.interval, exclude_id=event_id)
                if clash is not None:
                    return self._conflict("update", clash)

            now = self.clock()
            if not store.update_by_id(event_id, {**changes, "updated_at": now}):
                return self._not_found("update", event_id)
            updated = merged.model_copy(update={"updated_at": now})

        self.bus.publish(EventUpdated(event=updated, changed_fields=sorted(changes)))
        return Ok(updated)

    @_surface_store_failures
    def delete(self, event_id: str) -> Result[bool, ServiceError]:
        with self.store.transaction() as store:
            if store.find_by_id(event_id) is None or not store.delete_by_id(event_id):
                return self._not_found("delete", event_id)

        self.bus.publish(EventDeleted(event_id=event_id))
        return Ok(True)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @_surface_store_failures
    def get(self, event_id: str) -> Result[Event, ServiceError]:
        event = self.store.find_by_id(event_id)
        if event is None:
            return Err(NotFound(message="Event not found", event_id=event_id))
        return Ok(event)

    @_surface_store_failures
    def list_upcoming(self) -> Result[list[Event], ServiceError]:
        """Events that have not ended yet, soonest first."""
        return Ok(self.ranges.find_upcoming(self.clock()))

    @_surface_store_failures
    def list_by_range(
        self, range_start: datetime | str, range_end: datetime | str
    ) -> Result[list[Event], ServiceError]:
        window = validate_range(range_start, range_end, self.max_range)
        if isinstance(window, Err):
            return window
        return self.ranges.find(*window.value)

    @_surface_store_failures
    def list_all(self) -> Result[list[Event], ServiceError]:
        return Ok(by_start_time(self.store.scan()))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _conflict(self, operation: str, clash: Event) -> Err[ConflictError]:
        logger.info("event_conflict", operation=operation, conflicting_event_id=clash.id)
        message = (
            "Event time conflicts with existing event"
            if operation == "create"
            else "Updated event time conflicts with existing event"
        )
        return Err(ConflictError(message=message, conflicting_event=clash))

    def _not_found(self, operation: str, event_id: str) -> Err[NotFound]:
        logger.info("event_not_found", operation=operation, event_id=event_id)
        return Err(NotFound(message="Event not found", event_id=event_id))

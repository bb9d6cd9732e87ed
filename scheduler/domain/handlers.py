"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from scheduler.domain.bus import EventBus
from scheduler.domain.events import EventAdded, EventDeleted, EventUpdated
from scheduler.domain.models import utcnow
from scheduler.logging_config import get_logger
from scheduler.services.formatters import event_log_fields, event_status


class HandlerRegistry:
    """Subscribes the audit-log handlers for committed mutations."""

    def __init__(
        self,
        bus: EventBus,
        logger: Any = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.bus = bus
        self.logger = logger or get_logger("scheduler.audit")
        self.clock = clock
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventAdded, self.on_event_added)
        self.bus.subscribe(EventUpdated, self.on_event_updated)
        self.bus.subscribe(EventDeleted, self.on_event_deleted)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_event_added(self, event: EventAdded) -> None:
        self.logger.info(
            "event_added",
            status=event_status(event.event, self.clock()),
            **event_log_fields(event.event),
        )

    def on_event_updated(self, event: EventUpdated) -> None:
        self.logger.info(
            "event_updated",
            changed_fields=event.changed_fields,
            status=event_status(event.event, self.clock()),
            **event_log_fields(event.event),
        )

    def on_event_deleted(self, event: EventDeleted) -> None:
        self.logger.info("event_deleted", event_id=event.event_id)

"""FastAPI application: HTTP entry point for the event scheduler."""

from __future__ import annotations

from datetime import timedelta

from fastapi import FastAPI, HTTPException, Query

from scheduler.config import Settings, load_settings
from scheduler.domain.bus import EventBus
from scheduler.domain.errors import ConflictError
from scheduler.domain.handlers import HandlerRegistry
from scheduler.domain.models import Event, EventInput, EventUpdateInput
from scheduler.domain.result import Err, Result
from scheduler.logging_config import setup_logging
from scheduler.repos.base import EventStore
from scheduler.repos.memory import InMemoryEventStore
from scheduler.repos.sqlite import SqliteEventStore
from scheduler.services.events import EventService


def build_store(settings: Settings) -> EventStore:
    if settings.store.backend == "sqlite":
        return SqliteEventStore(settings.store.sqlite_path)
    return InMemoryEventStore()


settings = load_settings()
setup_logging(settings.logging.level, json_output=settings.logging.format == "json")

app = FastAPI(title="Event Scheduler")

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
event_store = build_store(settings)
handler_registry = HandlerRegistry(bus=event_bus)
event_service = EventService(
    event_store,
    bus=event_bus,
    max_range=timedelta(days=settings.max_range_days),
)

# One status code per error kind.
_STATUS_BY_KIND = {
    "validation": 422,
    "conflict": 409,
    "not_found": 404,
    "invalid_range": 400,
    "store": 503,
}


def _unwrap(result: Result):
    if isinstance(result, Err):
        error = result.error
        detail = error.message
        if isinstance(error, ConflictError):
            clash = error.conflicting_event
            detail = f"{error.message}: {clash.title} ({clash.id})"
        raise HTTPException(status_code=_STATUS_BY_KIND[error.kind], detail=detail)
    return result.value


# ── Routes ────────────────────────────────────────────────────────────


@app.post("/events", response_model=Event, status_code=201)
def add_event(payload: EventInput) -> Event:
    """Validate, conflict-check and store a new event."""
    return _unwrap(event_service.create(payload))


@app.get("/events", response_model=list[Event])
def list_events() -> list[Event]:
    """Return all stored events, earliest first."""
    return _unwrap(event_service.list_all())


@app.get("/events/upcoming", response_model=list[Event])
def list_upcoming_events() -> list[Event]:
    """Return events that have not ended yet."""
    return _unwrap(event_service.list_upcoming())


@app.get("/events/range", response_model=list[Event])
def list_events_by_range(
    start_date: str = Query(alias="startDate"),
    end_date: str = Query(alias="endDate"),
) -> list[Event]:
    """Return events touching the inclusive ``[startDate, endDate]`` window."""
    return _unwrap(event_service.list_by_range(start_date, end_date))


@app.get("/events/{event_id}", response_model=Event)
def get_event(event_id: str) -> Event:
    """Return a single event by id."""
    return _unwrap(event_service.get(event_id))


@app.patch("/events/{event_id}", response_model=Event)
def update_event(event_id: str, payload: EventUpdateInput) -> Event:
    """Apply a partial update; omitted fields are left as they are."""
    return _unwrap(event_service.update(event_id, payload))


@app.delete("/events/{event_id}")
def delete_event(event_id: str) -> dict:
    _unwrap(event_service.delete(event_id))
    return {"id": event_id, "deleted": True}

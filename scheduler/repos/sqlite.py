"""SQLite-backed event store.

One connection per store, shared across threads behind a re-entrant lock.
The connection runs in autocommit mode; ``transaction()`` opens an explicit
``BEGIN IMMEDIATE`` so the write lock is taken before the conflict check and
other processes sharing the file are serialised as well.
"""

from __future__ import annotations

import sqlite3
import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from scheduler.domain.models import Event, EventFields
from scheduler.logging_config import get_logger
from scheduler.repos.base import EventPredicate, EventStore, StoreFailure

logger = get_logger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS events (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    location TEXT NOT NULL,
    start_time TEXT NOT NULL,
    end_time TEXT NOT NULL,
    is_recurring INTEGER NOT NULL,
    recurrence_rule TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_events_start_time ON events (start_time);
CREATE INDEX IF NOT EXISTS idx_events_end_time ON events (end_time);
CREATE INDEX IF NOT EXISTS idx_events_start_end ON events (start_time, end_time);
CREATE INDEX IF NOT EXISTS idx_events_is_recurring ON events (is_recurring);
"""

_COLUMNS = (
    "title",
    "description",
    "location",
    "start_time",
    "end_time",
    "is_recurring",
    "recurrence_rule",
    "created_at",
    "updated_at",
)


def _to_db(value: Any) -> Any:
    # Fixed-width UTC text keeps lexicographic order equal to time order.
    if isinstance(value, datetime):
        return value.astimezone(timezone.utc).isoformat(timespec="microseconds")
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    return value


def _row_to_event(row: sqlite3.Row) -> Event:
    return Event(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        location=row["location"],
        start_time=datetime.fromisoformat(row["start_time"]),
        end_time=datetime.fromisoformat(row["end_time"]),
        is_recurring=bool(row["is_recurring"]),
        recurrence_rule=row["recurrence_rule"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class SqliteEventStore(EventStore):
    def __init__(self, path: str | Path = ":memory:", timeout: float = 5.0) -> None:
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._depth = 0
        try:
            self._conn = sqlite3.connect(
                self.path,
                timeout=timeout,
                isolation_level=None,
                check_same_thread=False,
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise StoreFailure(f"Could not open event database {self.path}: {exc}") from exc
        logger.debug("sqlite_store_opened", path=self.path)

    def _execute(self, sql: str, params: tuple = ()) -> int:
        """Run a statement and return the number of affected rows."""
        with self._lock:
            try:
                return self._conn.execute(sql, params).rowcount
            except sqlite3.Error as exc:
                raise StoreFailure(str(exc)) from exc

    def _query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise StoreFailure(str(exc)) from exc

    def insert(self, fields: EventFields) -> str:
        event_id = str(uuid.uuid4())
        values = fields.model_dump()
        placeholders = ", ".join("?" for _ in _COLUMNS)
        self._execute(
            f"INSERT INTO events (id, {', '.join(_COLUMNS)}) VALUES (?, {placeholders})",
            (event_id, *(_to_db(values[c]) for c in _COLUMNS)),
        )
        return event_id

    def find_by_id(self, event_id: str) -> Event | None:
        rows = self._query("SELECT * FROM events WHERE id = ?", (event_id,))
        return _row_to_event(rows[0]) if rows else None

    def update_by_id(self, event_id: str, fields: dict[str, Any]) -> bool:
        unknown = set(fields) - set(_COLUMNS)
        if unknown:
            raise StoreFailure(f"Unknown event columns: {sorted(unknown)}")
        if not fields:
            return self.find_by_id(event_id) is not None
        assignments = ", ".join(f"{name} = ?" for name in fields)
        changed = self._execute(
            f"UPDATE events SET {assignments} WHERE id = ?",
            (*(_to_db(v) for v in fields.values()), event_id),
        )
        return changed > 0

    def delete_by_id(self, event_id: str) -> bool:
        return self._execute("DELETE FROM events WHERE id = ?", (event_id,)) > 0

    def scan(
        self,
        predicate: EventPredicate | None = None,
        *,
        start_before: datetime | None = None,
        end_after: datetime | None = None,
    ) -> list[Event]:
        clauses: list[str] = []
        params: list[str] = []
        if start_before is not None:
            clauses.append("start_time <= ?")
            params.append(_to_db(start_before))
        if end_after is not None:
            clauses.append("end_time >= ?")
            params.append(_to_db(end_after))
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._query(f"SELECT * FROM events{where} ORDER BY seq", tuple(params))
        events = [_row_to_event(r) for r in rows]
        if predicate is None:
            return events
        return [e for e in events if predicate(e)]

    @contextmanager
    def transaction(self) -> Iterator[SqliteEventStore]:
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                self._execute("BEGIN IMMEDIATE")
            self._depth += 1
            try:
                yield self
            except BaseException:
                self._depth -= 1
                if outermost:
                    self._execute("ROLLBACK")
                raise
            else:
                self._depth -= 1
                if outermost:
                    self._commit()

    def _commit(self) -> None:
        try:
            self._execute("COMMIT")
        except StoreFailure:
            # A busy COMMIT leaves the transaction open and the write lock held.
            if self._conn.in_transaction:
                self._execute("ROLLBACK")
            logger.warning("sqlite_commit_failed", path=self.path)
            raise

    def close(self) -> None:
        with self._lock:
            self._conn.close()

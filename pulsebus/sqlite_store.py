"""
Pulse - SQLite Event Store
Durable persist/restore hooks backed by one SQLite connection per store.

Usage:
    store = SQLiteEventStore("events.db")
    bus = EventBus(on_persist=store.persist, on_restore=store.restore)
    ...
    store.close()
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from . import config
from .errors import CollisionError, NotFoundError
from .models import Event, NewEvent, new_id

logger = logging.getLogger("pulse.sqlite")


def _default_db_path() -> Path:
    """Resolved at runtime so PULSE_DB_PATH can be overridden after import."""
    return Path(os.getenv("PULSE_DB_PATH", config.DB_PATH))


class SQLiteEventStore:
    """
    Event store persisted to a SQLite file.

    Args:
        path: Database file (default: PULSE_DB_PATH or data/events.db)

    Context and args must be JSON-serializable. The store owns a single
    connection for its lifetime; call ``close()`` when done.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else _default_db_path()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: sqlite3.Connection | None = sqlite3.connect(str(self.path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._init_db()

    def __enter__(self) -> SQLiteEventStore:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        if self._conn is None:
            raise sqlite3.ProgrammingError(f"SQLiteEventStore for {self.path} is closed")
        conn = self._conn
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def _init_db(self) -> None:
        with self._connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS events (
                    id          TEXT    PRIMARY KEY,
                    name        TEXT    NOT NULL,
                    context     TEXT    DEFAULT NULL,
                    args        TEXT    NOT NULL DEFAULT '[]',
                    created_at  TEXT    NOT NULL DEFAULT (datetime('now'))
                );
                CREATE INDEX IF NOT EXISTS idx_events_name ON events (name);
            """)

    def persist(self, event: NewEvent) -> str:
        """Insert the event under a fresh id. Raises CollisionError on a taken id."""
        event_id = new_id()
        try:
            with self._connection() as conn:
                conn.execute(
                    "INSERT INTO events (id, name, context, args) VALUES (?, ?, ?, ?)",
                    (event_id, event.name, json.dumps(event.context), json.dumps(event.args)),
                )
        except sqlite3.IntegrityError as exc:
            raise CollisionError(event_id) from exc
        logger.debug("Persisted %s as %s in %s", event.name, event_id, self.path)
        return event_id

    def restore(self, event_id: str) -> Event:
        """Load a stored event. Raises NotFoundError for unknown ids."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT id, name, context, args FROM events WHERE id = ?", (event_id,)
            ).fetchone()
        if row is None:
            raise NotFoundError(event_id)
        return Event(
            id=row["id"],
            name=row["name"],
            context=json.loads(row["context"]) if row["context"] else None,
            args=json.loads(row["args"]),
        )

    def count(self) -> int:
        with self._connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM events").fetchone()[0]

    def clear(self) -> int:
        """Delete every stored event. Returns the number of rows deleted."""
        with self._connection() as conn:
            return conn.execute("DELETE FROM events").rowcount

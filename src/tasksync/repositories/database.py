"""SQLite database shared by the task store and the mutation queue."""

from __future__ import annotations

import contextlib
import logging
import sqlite3
import threading
import uuid
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS tasks (
    id              TEXT    PRIMARY KEY,
    title           TEXT    NOT NULL,
    description     TEXT,
    completed       INTEGER NOT NULL DEFAULT 0,
    created_at      TEXT    NOT NULL,
    updated_at      TEXT    NOT NULL,
    is_deleted      INTEGER NOT NULL DEFAULT 0,
    sync_status     TEXT    NOT NULL DEFAULT 'pending',
    server_id       TEXT,
    last_synced_at  TEXT
);

CREATE TABLE IF NOT EXISTS sync_queue (
    seq          INTEGER PRIMARY KEY AUTOINCREMENT,
    id           TEXT    NOT NULL UNIQUE,
    task_id      TEXT    NOT NULL,
    operation    TEXT    NOT NULL CHECK (operation IN ('create', 'update', 'delete')),
    data         TEXT    NOT NULL,
    retry_count  INTEGER NOT NULL DEFAULT 0 CHECK (retry_count >= 0),
    created_at   TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_sync_queue_task_id ON sync_queue(task_id);
CREATE INDEX IF NOT EXISTS idx_tasks_sync_status ON tasks(sync_status);
"""


class Database:
    """Thread-safe wrapper around a single SQLite connection.

    Every statement runs under one re-entrant lock, so a thread holding
    :meth:`transaction` sees its own writes while other threads wait.
    Nested transactions become savepoints.
    """

    def __init__(self, path: Path | str = ":memory:") -> None:
        """
        Open (and create if needed) the database.

        Args:
            path: Database file, or ":memory:" for a private in-memory store
        """
        self.path = path
        if isinstance(path, Path):
            path.parent.mkdir(parents=True, exist_ok=True)
        # Autocommit mode; transactions are managed explicitly
        self._conn = sqlite3.connect(str(path), check_same_thread=False, isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        with self._lock:
            if str(path) != ":memory:":
                self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(SCHEMA)
        logger.debug("Opened database at %s", path)

    def close(self) -> None:
        """Close the underlying connection."""
        with self._lock:
            self._conn.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @contextlib.contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed statements as one atomic unit."""
        with self._lock:
            if self._conn.in_transaction:
                savepoint = f"sp_{uuid.uuid4().hex}"
                self._conn.execute(f"SAVEPOINT {savepoint}")
                try:
                    yield
                    self._conn.execute(f"RELEASE SAVEPOINT {savepoint}")
                except Exception:
                    self._conn.execute(f"ROLLBACK TO SAVEPOINT {savepoint}")
                    self._conn.execute(f"RELEASE SAVEPOINT {savepoint}")
                    raise
                return

            self._conn.execute("BEGIN IMMEDIATE")
            try:
                yield
                self._conn.execute("COMMIT")
            except Exception:
                self._conn.execute("ROLLBACK")
                raise

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Execute a write statement and return the affected row count."""
        with self._lock:
            cursor = self._conn.execute(sql, params)
            return cursor.rowcount

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(sql, params).fetchall()

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Row | None:
        with self._lock:
            return self._conn.execute(sql, params).fetchone()

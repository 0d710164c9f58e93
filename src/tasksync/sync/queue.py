"""Durable FIFO queue of pending task mutations."""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from typing import Any

from ..models import QueuedMutation, SyncOperation
from ..repositories import Database
from ..utils import from_iso, now_utc, to_iso

logger = logging.getLogger(__name__)


class MutationQueue:
    """Ordered log of create/update/delete mutations awaiting sync.

    Entries are kept in insertion order and are never coalesced: several
    mutations for the same task may be queued at once. Reading a batch does
    not remove anything; entries leave the queue only through :meth:`remove`.
    Storage errors propagate to the caller.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def enqueue(
        self,
        task_id: str,
        operation: SyncOperation,
        payload: dict[str, Any],
    ) -> str:
        """Append a mutation and return its id."""
        mutation_id = str(uuid.uuid4())
        operation = SyncOperation(operation)
        self.db.execute(
            """
            INSERT INTO sync_queue (id, task_id, operation, data, retry_count, created_at)
            VALUES (?, ?, ?, ?, 0, ?)
            """,
            (mutation_id, task_id, operation.value, json.dumps(payload), to_iso(now_utc())),
        )
        logger.debug(
            "Enqueued %s mutation %s for task %s", operation.value, mutation_id, task_id
        )
        return mutation_id

    def take_batch(self, limit: int) -> list[QueuedMutation]:
        """Return up to ``limit`` oldest entries without removing them."""
        if limit <= 0:
            return []
        rows = self.db.fetch_all("SELECT * FROM sync_queue ORDER BY seq ASC LIMIT ?", (limit,))
        return [_row_to_mutation(row) for row in rows]

    def get(self, mutation_id: str) -> QueuedMutation | None:
        row = self.db.fetch_one("SELECT * FROM sync_queue WHERE id = ?", (mutation_id,))
        if row is None:
            return None
        return _row_to_mutation(row)

    def remove(self, mutation_id: str) -> bool:
        """Delete a mutation. Returns False if it was not queued."""
        return self.db.execute("DELETE FROM sync_queue WHERE id = ?", (mutation_id,)) > 0

    def increment_retry(self, mutation_id: str) -> int:
        """Bump the retry counter and return the new value.

        Raises:
            KeyError: If the mutation is not queued.
        """
        with self.db.transaction():
            updated = self.db.execute(
                "UPDATE sync_queue SET retry_count = retry_count + 1 WHERE id = ?",
                (mutation_id,),
            )
            if not updated:
                raise KeyError(mutation_id)
            return self.get_retry_count(mutation_id)

    def get_retry_count(self, mutation_id: str) -> int:
        """Current retry counter of a queued mutation.

        Raises:
            KeyError: If the mutation is not queued.
        """
        row = self.db.fetch_one("SELECT retry_count FROM sync_queue WHERE id = ?", (mutation_id,))
        if row is None:
            raise KeyError(mutation_id)
        return int(row["retry_count"])

    def count(self, task_id: str | None = None) -> int:
        """Number of queued mutations, optionally for one task."""
        if task_id is None:
            row = self.db.fetch_one("SELECT COUNT(*) AS cnt FROM sync_queue")
        else:
            row = self.db.fetch_one(
                "SELECT COUNT(*) AS cnt FROM sync_queue WHERE task_id = ?", (task_id,)
            )
        return int(row["cnt"]) if row else 0


def _row_to_mutation(row: sqlite3.Row) -> QueuedMutation:
    return QueuedMutation(
        id=row["id"],
        task_id=row["task_id"],
        operation=SyncOperation(row["operation"]),
        payload=json.loads(row["data"]),
        retry_count=row["retry_count"],
        created_at=from_iso(row["created_at"]),
    )

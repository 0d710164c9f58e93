"""SQLite-backed task repository."""

from __future__ import annotations

import sqlite3

from ..models import SyncStatus, Task
from ..utils import from_iso, to_iso
from .database import Database


class SqliteTaskRepository:
    """Task store on the ``tasks`` table of a :class:`Database`."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def get_by_id(self, task_id: str) -> Task | None:
        row = self.db.fetch_one("SELECT * FROM tasks WHERE id = ?", (task_id,))
        if row is None:
            return None
        return _row_to_task(row)

    def get_all(self, include_deleted: bool = False) -> list[Task]:
        sql = "SELECT * FROM tasks"
        if not include_deleted:
            sql += " WHERE is_deleted = 0"
        sql += " ORDER BY updated_at DESC"
        return [_row_to_task(row) for row in self.db.fetch_all(sql)]

    def get_needing_sync(self) -> list[Task]:
        rows = self.db.fetch_all(
            "SELECT * FROM tasks WHERE sync_status IN (?, ?) ORDER BY updated_at DESC",
            (SyncStatus.PENDING.value, SyncStatus.ERROR.value),
        )
        return [_row_to_task(row) for row in rows]

    def save(self, task: Task) -> Task:
        self.db.execute(
            """
            INSERT OR REPLACE INTO tasks (
                id, title, description, completed, created_at, updated_at,
                is_deleted, sync_status, server_id, last_synced_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.id,
                task.title,
                task.description,
                int(task.completed),
                to_iso(task.created_at),
                to_iso(task.updated_at),
                int(task.is_deleted),
                task.sync_status.value,
                task.server_id,
                to_iso(task.last_synced_at) if task.last_synced_at else None,
            ),
        )
        return task

    def set_sync_status(self, task_id: str, status: SyncStatus) -> bool:
        """Update only the sync status. Returns False if the task is missing."""
        count = self.db.execute(
            "UPDATE tasks SET sync_status = ? WHERE id = ?", (status.value, task_id)
        )
        return count > 0


def _row_to_task(row: sqlite3.Row) -> Task:
    return Task(
        id=row["id"],
        server_id=row["server_id"],
        title=row["title"],
        description=row["description"],
        completed=bool(row["completed"]),
        created_at=from_iso(row["created_at"]),
        updated_at=from_iso(row["updated_at"]),
        is_deleted=bool(row["is_deleted"]),
        sync_status=SyncStatus(row["sync_status"]),
        last_synced_at=from_iso(row["last_synced_at"]),
    )

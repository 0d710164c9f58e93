"""Repository protocol for the local task store."""

from typing import Protocol

from ..models import SyncStatus, Task


class TaskRepositoryProtocol(Protocol):
    """Interface for durable task storage.

    The store keeps every task, including soft-deleted ones, so that a
    delete can still be synced and reconciled.
    """

    def get_by_id(self, task_id: str) -> Task | None:
        """Get a single task by ID.

        Args:
            task_id: The local task identifier

        Returns:
            The task if found (deleted or not), None otherwise.
        """
        ...

    def get_all(self, include_deleted: bool = False) -> list[Task]:
        """Load tasks, most recently updated first.

        Args:
            include_deleted: Also return soft-deleted tasks.
        """
        ...

    def get_needing_sync(self) -> list[Task]:
        """Tasks whose sync status is pending or error."""
        ...

    def save(self, task: Task) -> Task:
        """Insert or replace a task.

        Returns:
            The saved task.
        """
        ...

    def set_sync_status(self, task_id: str, status: SyncStatus) -> bool:
        """Update only the sync status of a task.

        Returns:
            False if the task does not exist.
        """
        ...

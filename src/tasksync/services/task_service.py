"""Service for task CRUD operations that feed the mutation queue."""

from __future__ import annotations

import logging
import uuid

from ..models import SyncOperation, SyncStatus, Task
from ..repositories import Database, TaskRepositoryProtocol
from ..sync import MutationQueue
from ..utils import now_utc

logger = logging.getLogger(__name__)


class TaskServiceError(Exception):
    """Base exception for task service errors."""

    pass


class TaskValidationError(TaskServiceError):
    """Input rejected before anything was stored or queued."""

    pass


class TaskNotFoundError(TaskServiceError):
    """No task with the given id exists."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class TaskService:
    """Service for task CRUD operations.

    Every change is applied to the local store optimistically (sync status
    ``pending``) and recorded as a queued mutation in the same transaction.
    """

    def __init__(
        self,
        db: Database,
        repository: TaskRepositoryProtocol,
        queue: MutationQueue,
    ) -> None:
        self._db = db
        self.repository = repository
        self.queue = queue

    def create_task(
        self,
        title: str,
        description: str | None = None,
        completed: bool = False,
    ) -> Task:
        """
        Create a new task and queue it for sync.

        The remote id starts as a placeholder derived from the local id.

        Raises:
            TaskValidationError: If the title is missing or blank
        """
        if not title or not title.strip():
            raise TaskValidationError("Title is required")

        task_id = str(uuid.uuid4())
        now = now_utc()
        task = Task(
            id=task_id,
            server_id=f"srv-{task_id}",
            title=title,
            description=description,
            completed=completed,
            created_at=now,
            updated_at=now,
            sync_status=SyncStatus.PENDING,
        )

        with self._db.transaction():
            saved = self.repository.save(task)
            self.queue.enqueue(saved.id, SyncOperation.CREATE, saved.to_payload())

        logger.info("Task created: %s", saved.id)
        return saved

    def get_task(self, task_id: str) -> Task | None:
        """Get a task by id, including soft-deleted ones."""
        return self.repository.get_by_id(task_id)

    def list_tasks(self) -> list[Task]:
        """All non-deleted tasks, most recently updated first."""
        return self.repository.get_all()

    def get_tasks_needing_sync(self) -> list[Task]:
        return self.repository.get_needing_sync()

    def update_task(
        self,
        task_id: str,
        title: str | None = None,
        description: str | None = None,
        completed: bool | None = None,
    ) -> Task:
        """
        Update the given fields of a task and queue the new snapshot.

        Fields left as None keep their current value.

        Raises:
            TaskNotFoundError: If the task does not exist
            TaskValidationError: If the new title is blank
        """
        if title is not None and not title.strip():
            raise TaskValidationError("Title cannot be blank")

        with self._db.transaction():
            existing = self._require(task_id)
            updated = existing.model_copy(
                update={
                    "title": title if title is not None else existing.title,
                    "description": (
                        description if description is not None else existing.description
                    ),
                    "completed": completed if completed is not None else existing.completed,
                    "updated_at": now_utc(),
                    "sync_status": SyncStatus.PENDING,
                }
            )
            self.repository.save(updated)
            self.queue.enqueue(task_id, SyncOperation.UPDATE, updated.to_payload())

        logger.info("Task updated: %s", task_id)
        return updated

    def delete_task(self, task_id: str) -> None:
        """
        Soft-delete a task and queue the deletion.

        The row stays in the store so the delete can be synced.

        Raises:
            TaskNotFoundError: If the task does not exist
        """
        with self._db.transaction():
            existing = self._require(task_id)
            self.repository.save(
                existing.model_copy(
                    update={
                        "is_deleted": True,
                        "updated_at": now_utc(),
                        "sync_status": SyncStatus.PENDING,
                    }
                )
            )
            self.queue.enqueue(task_id, SyncOperation.DELETE, {"id": task_id})

        logger.info("Task deleted: %s", task_id)

    def _require(self, task_id: str) -> Task:
        task = self.repository.get_by_id(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

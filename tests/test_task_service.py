"""Integration tests for TaskService."""

import sqlite3
from unittest.mock import patch

import pytest

from tasksync.models import SyncOperation, SyncStatus
from tasksync.repositories import Database, SqliteTaskRepository
from tasksync.services import TaskNotFoundError, TaskService, TaskValidationError
from tasksync.sync import MutationQueue


@pytest.fixture
def db():
    database = Database()
    yield database
    database.close()


@pytest.fixture
def queue(db: Database) -> MutationQueue:
    return MutationQueue(db)


@pytest.fixture
def task_service(db: Database, queue: MutationQueue) -> TaskService:
    return TaskService(db, SqliteTaskRepository(db), queue)


class TestTaskServiceCreate:
    """Tests for task creation."""

    def test_create_task_basic(self, task_service: TaskService):
        """create_task stores a pending task with a placeholder remote id."""
        task = task_service.create_task("Buy milk", description="2 litres")

        assert task.title == "Buy milk"
        assert task.description == "2 litres"
        assert task.completed is False
        assert task.sync_status == SyncStatus.PENDING
        assert task.server_id == f"srv-{task.id}"
        assert task.created_at == task.updated_at
        assert task_service.get_task(task.id) == task

    def test_create_task_enqueues_snapshot(self, task_service: TaskService, queue: MutationQueue):
        task = task_service.create_task("Buy milk")

        [mutation] = queue.take_batch(10)
        assert mutation.task_id == task.id
        assert mutation.operation == SyncOperation.CREATE
        assert mutation.payload["title"] == "Buy milk"
        assert mutation.payload["id"] == task.id

    def test_create_task_ids_are_unique(self, task_service: TaskService):
        first = task_service.create_task("Same")
        second = task_service.create_task("Same")
        assert first.id != second.id

    @pytest.mark.parametrize("title", ["", "   "])
    def test_create_task_requires_title(
        self, task_service: TaskService, queue: MutationQueue, title: str
    ):
        """Invalid input is rejected and never enqueued."""
        with pytest.raises(TaskValidationError):
            task_service.create_task(title)
        assert queue.count() == 0
        assert task_service.list_tasks() == []


class TestTaskServiceUpdate:
    """Tests for task updates."""

    def test_update_merges_fields(self, task_service: TaskService):
        task = task_service.create_task("Draft", description="keep me")
        updated = task_service.update_task(task.id, completed=True)

        assert updated.title == "Draft"
        assert updated.description == "keep me"
        assert updated.completed is True
        assert updated.updated_at >= task.updated_at
        assert task_service.get_task(task.id) == updated

    def test_update_enqueues_new_snapshot(self, task_service: TaskService, queue: MutationQueue):
        task = task_service.create_task("Draft")
        task_service.update_task(task.id, title="Final")

        create, update = queue.take_batch(10)
        assert create.operation == SyncOperation.CREATE
        assert update.operation == SyncOperation.UPDATE
        assert update.payload["title"] == "Final"

    def test_update_resets_status_to_pending(self, task_service: TaskService):
        task = task_service.create_task("Draft")
        task_service.repository.set_sync_status(task.id, SyncStatus.SYNCED)

        updated = task_service.update_task(task.id, title="Again")
        assert updated.sync_status == SyncStatus.PENDING

    def test_update_missing_task(self, task_service: TaskService, queue: MutationQueue):
        with pytest.raises(TaskNotFoundError) as exc_info:
            task_service.update_task("missing", title="x")
        assert exc_info.value.task_id == "missing"
        assert queue.count() == 0

    def test_update_blank_title(self, task_service: TaskService):
        task = task_service.create_task("Draft")
        with pytest.raises(TaskValidationError):
            task_service.update_task(task.id, title=" ")


class TestTaskServiceDelete:
    """Tests for task deletion."""

    def test_delete_is_soft(self, task_service: TaskService):
        """Deleted tasks stay in the store but leave the listing."""
        task = task_service.create_task("Temp")
        task_service.delete_task(task.id)

        stored = task_service.get_task(task.id)
        assert stored is not None
        assert stored.is_deleted is True
        assert stored.sync_status == SyncStatus.PENDING
        assert task_service.list_tasks() == []

    def test_delete_enqueues_id_only(self, task_service: TaskService, queue: MutationQueue):
        task = task_service.create_task("Temp")
        task_service.delete_task(task.id)

        mutation = queue.take_batch(10)[-1]
        assert mutation.operation == SyncOperation.DELETE
        assert mutation.payload == {"id": task.id}

    def test_delete_missing_task(self, task_service: TaskService):
        with pytest.raises(TaskNotFoundError):
            task_service.delete_task("missing")


class TestTaskServiceQueries:
    """Tests for listing helpers."""

    def test_tasks_needing_sync(self, task_service: TaskService):
        pending = task_service.create_task("Pending")
        synced = task_service.create_task("Synced")
        task_service.repository.set_sync_status(synced.id, SyncStatus.SYNCED)

        assert [t.id for t in task_service.get_tasks_needing_sync()] == [pending.id]

    def test_get_missing_task(self, task_service: TaskService):
        assert task_service.get_task("missing") is None


def broken_enqueue(queue: MutationQueue):
    return patch.object(queue, "enqueue", side_effect=sqlite3.OperationalError("disk I/O error"))


class TestTaskServiceAtomicity:
    """A task write and its queued mutation commit together or not at all."""

    def test_create_rolls_back_when_enqueue_fails(
        self, task_service: TaskService, queue: MutationQueue
    ):
        with broken_enqueue(queue), pytest.raises(sqlite3.OperationalError):
            task_service.create_task("Lost")

        assert task_service.repository.get_all(include_deleted=True) == []
        assert queue.count() == 0

    def test_update_rolls_back_when_enqueue_fails(
        self, task_service: TaskService, queue: MutationQueue
    ):
        task = task_service.create_task("Original")

        with broken_enqueue(queue), pytest.raises(sqlite3.OperationalError):
            task_service.update_task(task.id, title="Changed")

        assert task_service.get_task(task.id) == task
        assert queue.count() == 1

    def test_delete_rolls_back_when_enqueue_fails(
        self, task_service: TaskService, queue: MutationQueue
    ):
        task = task_service.create_task("Keep")

        with broken_enqueue(queue), pytest.raises(sqlite3.OperationalError):
            task_service.delete_task(task.id)

        stored = task_service.get_task(task.id)
        assert stored is not None
        assert stored.is_deleted is False
        assert task_service.list_tasks() == [task]
        assert queue.count() == 1

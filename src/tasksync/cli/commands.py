"""Operational commands: sync trigger, pending count, health, task CRUD.

Each command returns a process exit code (0 for success, 1 for error).
"""

import json
import logging

from ..models import Task
from ..remote import NetworkError
from ..repositories import Database, SqliteTaskRepository
from ..services import TaskService, TaskServiceError
from ..sync import MutationQueue, SyncEngine
from .output import error, info, success

logger = logging.getLogger(__name__)


def run_sync(engine: SyncEngine) -> int:
    """Run one sync pass and report the counts."""
    try:
        result = engine.run_once()
    except NetworkError as e:
        error(f"Sync failed: {e}")
        info(f"{engine.pending_count()} mutations remain queued")
        return 1

    if result.skipped:
        info("A sync pass is already running")
        return 0

    if result.has_errors:
        error(f"Synced {result.processed} mutations, {result.errors} failed")
        return 1

    success(f"Synced {result.processed} mutations")
    return 0


def run_status(engine: SyncEngine) -> int:
    """Print the number of queued mutations."""
    print(json.dumps({"pending": engine.pending_count()}))
    return 0


def run_health(engine: SyncEngine) -> int:
    """Probe the remote endpoint."""
    if engine.is_reachable():
        success("Remote is reachable")
        return 0
    error("Remote is unreachable")
    return 1


def build_task_service(db: Database) -> TaskService:
    return TaskService(db, SqliteTaskRepository(db), MutationQueue(db))


def run_task_command(
    service: TaskService,
    action: str,
    task_id: str | None = None,
    title: str | None = None,
    description: str | None = None,
    completed: bool | None = None,
) -> int:
    """Run a task CRUD action and print the affected task as JSON."""
    try:
        if action == "add":
            _print_task(service.create_task(title or "", description, bool(completed)))
        elif action == "update":
            _print_task(service.update_task(task_id or "", title, description, completed))
        elif action == "delete":
            service.delete_task(task_id or "")
            success(f"Deleted {task_id}")
        elif action == "list":
            print(json.dumps([t.model_dump(mode="json") for t in service.list_tasks()], indent=2))
        elif action == "show":
            task = service.get_task(task_id or "")
            if task is None:
                error(f"Task not found: {task_id}")
                return 1
            _print_task(task)
        else:
            error(f"Unknown action: {action}")
            return 1
    except TaskServiceError as e:
        error(str(e))
        return 1
    return 0


def _print_task(task: Task) -> None:
    print(task.model_dump_json(indent=2))

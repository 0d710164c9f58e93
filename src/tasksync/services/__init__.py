"""Service layer for business logic."""

from .task_service import (
    TaskNotFoundError,
    TaskService,
    TaskServiceError,
    TaskValidationError,
)

__all__ = [
    "TaskNotFoundError",
    "TaskService",
    "TaskServiceError",
    "TaskValidationError",
]

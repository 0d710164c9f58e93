"""Repository layer for data access."""

from .database import Database
from .protocol import TaskRepositoryProtocol
from .sqlite import SqliteTaskRepository

__all__ = [
    "Database",
    "SqliteTaskRepository",
    "TaskRepositoryProtocol",
]

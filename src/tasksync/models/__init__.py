"""Data models."""

from .sync import (
    BatchSyncItem,
    BatchSyncRequest,
    BatchSyncResponse,
    OutcomeStatus,
    ProcessedItem,
    QueuedMutation,
    SyncOperation,
    SyncResult,
    SyncStatus,
)
from .sync_config import SyncConfig
from .task import EDITABLE_FIELDS, Task

__all__ = [
    "EDITABLE_FIELDS",
    "BatchSyncItem",
    "BatchSyncRequest",
    "BatchSyncResponse",
    "OutcomeStatus",
    "ProcessedItem",
    "QueuedMutation",
    "SyncConfig",
    "SyncOperation",
    "SyncResult",
    "SyncStatus",
    "Task",
]

"""Task domain model."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from .sync import SyncStatus

# Fields the remote may overwrite when it resolves a conflict
EDITABLE_FIELDS = ("title", "description", "completed", "updated_at")


class Task(BaseModel):
    """A user-editable task kept locally and reconciled with the remote."""

    # Identification
    id: str  # Locally generated UUID
    server_id: str | None = None  # Remote identity once known

    # Editable content
    title: str
    description: str | None = None
    completed: bool = False

    # Timestamps
    created_at: datetime
    updated_at: datetime

    # Sync metadata
    is_deleted: bool = False  # Soft delete so the removal can still sync
    sync_status: SyncStatus = SyncStatus.PENDING
    last_synced_at: datetime | None = None

    @property
    def needs_sync(self) -> bool:
        """Whether the task has changes the remote has not confirmed."""
        return self.sync_status != SyncStatus.SYNCED

    def to_payload(self) -> dict[str, Any]:
        """Snapshot suitable for a queued mutation payload."""
        return self.model_dump(mode="json")

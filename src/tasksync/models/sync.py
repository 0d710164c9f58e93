"""Sync-related data models: queued mutations and the batch wire contract."""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class SyncStatus(str, Enum):
    """Sync state of a local task relative to the remote authority."""

    PENDING = "pending"  # Local changes not yet confirmed
    SYNCED = "synced"  # Confirmed by the remote, nothing queued
    ERROR = "error"  # Retries exhausted, needs attention


class SyncOperation(str, Enum):
    """Kind of change carried by a queued mutation."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class OutcomeStatus(str, Enum):
    """Per-item verdict returned by the remote for one mutation."""

    SUCCESS = "success"
    CONFLICT = "conflict"
    ERROR = "error"


class QueuedMutation(BaseModel):
    """One pending change to exactly one task, as stored in the queue."""

    id: str
    task_id: str
    operation: SyncOperation
    payload: dict[str, Any] = Field(default_factory=dict)
    retry_count: int = Field(default=0, ge=0)
    created_at: datetime

    def to_wire(self) -> "BatchSyncItem":
        """Convert to the outbound request item."""
        return BatchSyncItem(
            id=self.id,
            task_id=self.task_id,
            operation=self.operation,
            task_data=self.payload,
            retry_count=self.retry_count,
            created_at=self.created_at,
        )


class BatchSyncItem(BaseModel):
    """A mutation as sent to the remote batch endpoint."""

    id: str
    task_id: str
    operation: SyncOperation
    task_data: dict[str, Any]
    retry_count: int
    created_at: datetime


class BatchSyncRequest(BaseModel):
    """Body of a batch sync request."""

    items: list[BatchSyncItem]


class ProcessedItem(BaseModel):
    """The remote's verdict for one submitted mutation."""

    # Some servers echo the client mutation id as "client_id"
    id: str = Field(validation_alias=AliasChoices("id", "client_id"))
    server_id: str | None = None
    status: OutcomeStatus
    resolved_data: dict[str, Any] | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _unknown_status_is_error(cls, value: Any) -> Any:
        """Any verdict other than success or conflict is an error."""
        if isinstance(value, OutcomeStatus):
            return value
        try:
            return OutcomeStatus(value)
        except ValueError:
            logger.warning("Unknown outcome status %r treated as error", value)
            return OutcomeStatus.ERROR

    def resolved_server_id(self) -> str | None:
        """Remote identity, falling back to what the resolved payload carries."""
        if self.server_id:
            return self.server_id
        if self.resolved_data:
            return self.resolved_data.get("server_id") or self.resolved_data.get("id")
        return None


class BatchSyncResponse(BaseModel):
    """Body of a batch sync response."""

    processed_items: list[ProcessedItem] = Field(default_factory=list)

    @field_validator("processed_items", mode="before")
    @classmethod
    def _drop_unreadable_items(cls, value: Any) -> Any:
        """Parse items one at a time so one bad item cannot void its siblings.

        Dropped items leave their mutations without a verdict. A value that
        is not a list is left for normal validation to reject.
        """
        if not isinstance(value, list):
            return value
        items: list[ProcessedItem] = []
        for raw in value:
            try:
                items.append(ProcessedItem.model_validate(raw))
            except ValidationError as e:
                logger.warning("Dropping unreadable batch item %r: %s", raw, e)
        return items

    def by_mutation_id(self) -> dict[str, ProcessedItem]:
        """Index items by client mutation id. Later duplicates win."""
        return {item.id: item for item in self.processed_items}


@dataclass
class SyncResult:
    """Aggregate result of one sync pass."""

    processed: int = 0  # Mutations resolved (success or conflict with payload)
    errors: int = 0  # Mutations left queued for retry
    skipped: bool = False  # Another pass was already running

    @property
    def has_errors(self) -> bool:
        """Whether any item failed."""
        return self.errors > 0

    def to_dict(self) -> dict[str, int]:
        return {"processed": self.processed, "errors": self.errors}

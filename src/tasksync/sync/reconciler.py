"""Apply remote batch outcomes to the task store and the mutation queue.

Each mutation in a batch is reconciled on its own, inside its own
transaction, so a task is never observed as synced while the mutation
that produced the change is still queued (or the other way around).
Partial success within a batch is normal.

Outcome handling per mutation:

    success                      -> commit remote id, mark synced, dequeue
    conflict + resolved payload  -> overwrite editable fields (remote wins),
                                    mark synced, dequeue
    conflict without payload     -> treated as error
    error / no verdict           -> bump retry counter, keep queued,
                                    escalate task to "error" at max_retries

A whole-batch transport failure bumps every mutation in the batch and is
re-raised once the bookkeeping is done.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..models import (
    EDITABLE_FIELDS,
    BatchSyncResponse,
    OutcomeStatus,
    ProcessedItem,
    QueuedMutation,
    SyncConfig,
    SyncResult,
    SyncStatus,
    Task,
)
from ..remote import NetworkError
from ..repositories import Database, TaskRepositoryProtocol
from ..utils import now_utc
from .queue import MutationQueue

logger = logging.getLogger(__name__)


class Reconciler:
    """Commit per-item sync outcomes and manage retry escalation.

    The reconciler is the only writer of a task's sync metadata once the
    task has been enqueued.
    """

    def __init__(
        self,
        db: Database,
        repository: TaskRepositoryProtocol,
        queue: MutationQueue,
        config: SyncConfig | None = None,
    ) -> None:
        self._db = db
        self._repository = repository
        self._queue = queue
        self._config = config or SyncConfig()

    @property
    def max_retries(self) -> int:
        return self._config.max_retries

    def reconcile(
        self,
        batch: Sequence[QueuedMutation],
        outcome: BatchSyncResponse | NetworkError,
    ) -> SyncResult:
        """Apply ``outcome`` to every mutation in ``batch``.

        Args:
            batch: The mutations that were dispatched
            outcome: The parsed response, or the transport failure

        Returns:
            Aggregate processed/error counts

        Raises:
            NetworkError: Re-raised after bookkeeping when ``outcome`` is one
        """
        if isinstance(outcome, NetworkError):
            self._handle_transport_failure(batch, outcome)
            raise outcome

        result = SyncResult()
        if not batch:
            return result

        verdicts = outcome.by_mutation_id()
        batch_ids = {mutation.id for mutation in batch}
        for unknown_id in verdicts.keys() - batch_ids:
            logger.warning("Ignoring verdict for unknown mutation %s", unknown_id)

        for mutation in batch:
            if self._reconcile_item(mutation, verdicts.get(mutation.id)):
                result.processed += 1
            else:
                result.errors += 1

        logger.info(
            "Reconciled batch of %d: processed=%d errors=%d",
            len(batch),
            result.processed,
            result.errors,
        )
        return result

    # --- Per-item outcomes ---

    def _reconcile_item(self, mutation: QueuedMutation, item: ProcessedItem | None) -> bool:
        """Reconcile one mutation. Returns True if it left the queue."""
        if item is None:
            logger.warning("No verdict for mutation %s (task %s)", mutation.id, mutation.task_id)
            self._record_failure(mutation)
            return False

        if item.status == OutcomeStatus.SUCCESS:
            with self._db.transaction():
                self._commit_success(mutation, item)
            return True

        if item.status == OutcomeStatus.CONFLICT:
            if item.resolved_data is not None:
                try:
                    with self._db.transaction():
                        self._commit_resolved_conflict(mutation, item)
                    return True
                except ValueError as e:
                    logger.warning(
                        "Unusable resolved payload for mutation %s: %s", mutation.id, e
                    )
            else:
                logger.warning(
                    "Conflict without resolved payload for mutation %s (task %s)",
                    mutation.id,
                    mutation.task_id,
                )

        self._record_failure(mutation)
        return False

    def _commit_success(self, mutation: QueuedMutation, item: ProcessedItem) -> None:
        self._queue.remove(mutation.id)
        task = self._repository.get_by_id(mutation.task_id)
        if task is None:
            logger.warning("Task %s vanished before its sync was committed", mutation.task_id)
            return

        self._repository.save(
            task.model_copy(
                update={
                    "server_id": item.resolved_server_id() or task.server_id,
                    "sync_status": self._settled_status(task),
                    "last_synced_at": now_utc(),
                }
            )
        )
        logger.debug("Mutation %s succeeded for task %s", mutation.id, task.id)

    def _commit_resolved_conflict(self, mutation: QueuedMutation, item: ProcessedItem) -> None:
        resolved = item.resolved_data or {}
        self._queue.remove(mutation.id)
        task = self._repository.get_by_id(mutation.task_id)
        if task is None:
            logger.warning("Task %s vanished before its conflict was resolved", mutation.task_id)
            return

        # Remote wins: local edits not in the resolved payload are discarded
        data = task.model_dump()
        data.update({field: resolved[field] for field in EDITABLE_FIELDS if field in resolved})
        data["server_id"] = resolved.get("server_id") or item.server_id or task.server_id
        data["sync_status"] = self._settled_status(task)
        data["last_synced_at"] = now_utc()
        self._repository.save(Task.model_validate(data))
        logger.info("Conflict on task %s resolved from remote", task.id)

    def _settled_status(self, task: Task) -> SyncStatus:
        """Status after one of the task's mutations left the queue.

        A task with further queued mutations is not synced yet.
        """
        if self._queue.count(task.id) == 0:
            return SyncStatus.SYNCED
        return task.sync_status

    # --- Failures ---

    def _handle_transport_failure(
        self, batch: Sequence[QueuedMutation], error: NetworkError
    ) -> None:
        logger.error("Batch of %d mutations failed in transport: %s", len(batch), error)
        for mutation in batch:
            self._record_failure(mutation)

    def _record_failure(self, mutation: QueuedMutation) -> None:
        """Count a failed delivery and escalate the task once retries run out."""
        with self._db.transaction():
            try:
                retries = self._queue.increment_retry(mutation.id)
            except KeyError:
                logger.warning("Mutation %s is no longer queued", mutation.id)
                return

            if retries < self._config.max_retries:
                logger.debug("Mutation %s failed (attempt %d)", mutation.id, retries)
                return

            if self._repository.set_sync_status(mutation.task_id, SyncStatus.ERROR):
                logger.warning(
                    "Task %s marked as error after %d failed attempts of mutation %s",
                    mutation.task_id,
                    retries,
                    mutation.id,
                )

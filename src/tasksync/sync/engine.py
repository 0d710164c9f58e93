"""Sync engine: one serialized pass of take-batch, dispatch, reconcile."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from ..models import SyncConfig, SyncResult
from ..remote import NetworkError, SyncClient
from ..repositories import SqliteTaskRepository
from .dispatcher import BatchDispatcher
from .probe import ConnectivityProbe
from .queue import MutationQueue
from .reconciler import Reconciler

if TYPE_CHECKING:
    from ..repositories import Database

logger = logging.getLogger(__name__)


class SyncEngine:
    """Run sync passes against the mutation queue, at most one at a time.

    A pass that is triggered while another is in flight returns at once
    with ``skipped=True`` instead of dispatching the same batch twice.
    Mutations enqueued during a pass are picked up by the next one.
    """

    def __init__(
        self,
        queue: MutationQueue,
        dispatcher: BatchDispatcher,
        reconciler: Reconciler,
        probe: ConnectivityProbe | None = None,
    ) -> None:
        self._queue = queue
        self._dispatcher = dispatcher
        self._reconciler = reconciler
        self._probe = probe
        self._lock = threading.Lock()

    @classmethod
    def create(
        cls,
        db: Database,
        config: SyncConfig,
        client: SyncClient | None = None,
    ) -> SyncEngine:
        """Wire up an engine over ``db`` talking to ``config.base_url``."""
        client = client or SyncClient(config.base_url, timeout=config.sync_timeout)
        queue = MutationQueue(db)
        return cls(
            queue=queue,
            dispatcher=BatchDispatcher(client, config),
            reconciler=Reconciler(db, SqliteTaskRepository(db), queue, config),
            probe=ConnectivityProbe(client, config),
        )

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def pending_count(self) -> int:
        return self._queue.count()

    def is_reachable(self) -> bool:
        if self._probe is None:
            return False
        return self._probe.is_reachable()

    def run_once(self) -> SyncResult:
        """Sync the oldest batch of queued mutations.

        Raises:
            NetworkError: If the batch could not be delivered (after its
                mutations have been retry-counted)
        """
        if not self._lock.acquire(blocking=False):
            logger.info("Sync pass already running, skipping")
            return SyncResult(skipped=True)

        try:
            batch = self._queue.take_batch(self._dispatcher.batch_size)
            if not batch:
                logger.debug("Mutation queue empty, nothing to sync")
                return SyncResult()

            logger.info("Sync pass started with %d mutations", len(batch))
            try:
                response = self._dispatcher.dispatch(batch)
            except NetworkError as e:
                return self._reconciler.reconcile(batch, e)
            return self._reconciler.reconcile(batch, response)
        finally:
            self._lock.release()

"""Batch dispatcher: one bounded request per batch of queued mutations."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..models import BatchSyncRequest, BatchSyncResponse, QueuedMutation, SyncConfig

if TYPE_CHECKING:
    from ..remote import SyncClient

logger = logging.getLogger(__name__)


class BatchDispatcher:
    """Send a batch of mutations to the remote and return its verdicts.

    Transport failures surface as :class:`~tasksync.remote.NetworkError`
    with no partial results. Response items are returned as the remote
    sent them; matching to mutations is by client mutation id, never by
    position.
    """

    def __init__(self, client: SyncClient, config: SyncConfig | None = None) -> None:
        self._client = client
        self._config = config or SyncConfig()

    @property
    def batch_size(self) -> int:
        return self._config.batch_size

    def dispatch(self, batch: Sequence[QueuedMutation]) -> BatchSyncResponse:
        """Ship ``batch`` as a single request.

        Raises:
            ValueError: If the batch is empty or larger than the batch size
            NetworkError: If the request fails for any reason
        """
        if not batch:
            raise ValueError("Cannot dispatch an empty batch")
        if len(batch) > self._config.batch_size:
            raise ValueError(
                f"Batch of {len(batch)} exceeds batch size {self._config.batch_size}"
            )

        request = BatchSyncRequest(items=[mutation.to_wire() for mutation in batch])
        logger.debug("Dispatching %d mutations", len(batch))
        return self._client.post_batch(request, timeout=self._config.sync_timeout)

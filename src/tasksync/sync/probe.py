"""Connectivity probe against the remote health endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from ..models import SyncConfig
from ..remote import SyncClientError

if TYPE_CHECKING:
    from ..remote import SyncClient

logger = logging.getLogger(__name__)


class ConnectivityProbe:
    """Best-effort liveness check, independent of batch dispatch."""

    def __init__(self, client: SyncClient, config: SyncConfig | None = None) -> None:
        self._client = client
        self._config = config or SyncConfig()

    def is_reachable(self) -> bool:
        """Return True if the remote answered the health call. Never raises."""
        try:
            self._client.check_health(timeout=self._config.health_timeout)
        except (SyncClientError, httpx.HTTPError, httpx.InvalidURL, RuntimeError) as e:
            logger.info("Remote unreachable: %s", e)
            return False
        return True

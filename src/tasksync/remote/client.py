"""HTTP client for the remote batch-sync endpoint."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
from pydantic import ValidationError

from ..models import BatchSyncRequest, BatchSyncResponse

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000/api"
DEFAULT_SYNC_TIMEOUT = 15.0
DEFAULT_HEALTH_TIMEOUT = 5.0


class SyncClientError(Exception):
    """Base exception for sync client errors."""

    pass


class NetworkError(SyncClientError):
    """The remote could not be reached or did not answer usefully.

    Covers timeouts, refused connections, non-2xx statuses and bodies that
    are not a valid batch response. Carries no partial results.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SyncClient:
    """Thin wrapper around the remote sync API.

    Endpoints (relative to ``base_url``):
    - ``POST /sync/batch``: submit a batch of mutations
    - ``GET /sync/health``: liveness check
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_SYNC_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API base URL, e.g. "http://localhost:3000/api"
            timeout: Default request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._batch_url = f"{self.base_url}/sync/batch"
        self._health_url = f"{self.base_url}/sync/health"
        self._client = httpx.Client(
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> SyncClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def post_batch(
        self, request: BatchSyncRequest, timeout: float | None = None
    ) -> BatchSyncResponse:
        """Submit a batch and return the parsed per-item outcomes.

        Args:
            request: The batch request body
            timeout: Override for the client timeout

        Raises:
            NetworkError: On any transport failure, non-2xx status or invalid body
        """
        count = len(request.items)
        start_time = time.monotonic()
        try:
            response = self._client.post(
                self._batch_url,
                json=request.model_dump(mode="json"),
                timeout=timeout if timeout is not None else self.timeout,
            )
        except httpx.TimeoutException as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            logger.error("POST sync/batch (%d items) timed out after %.0fms", count, elapsed_ms)
            raise NetworkError(f"Request timed out: {e}") from e
        except httpx.RequestError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            logger.error(
                "POST sync/batch (%d items) failed after %.0fms: %s", count, elapsed_ms, e
            )
            raise NetworkError(f"Request failed: {e}") from e

        elapsed_ms = (time.monotonic() - start_time) * 1000

        if response.status_code < 200 or response.status_code >= 300:
            logger.error(
                "POST sync/batch: HTTP %d (%.0fms)", response.status_code, elapsed_ms
            )
            raise NetworkError(
                f"HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            logger.error("POST sync/batch: Invalid JSON response (%.0fms)", elapsed_ms)
            raise NetworkError(f"Invalid JSON response: {e}") from e

        try:
            parsed = BatchSyncResponse.model_validate(body)
        except ValidationError as e:
            logger.error("POST sync/batch: Malformed batch response (%.0fms)", elapsed_ms)
            raise NetworkError(f"Malformed batch response: {e}") from e

        logger.info(
            "POST sync/batch: %d OK, %d items (%.0fms)",
            response.status_code,
            len(parsed.processed_items),
            elapsed_ms,
        )
        return parsed

    def check_health(self, timeout: float = DEFAULT_HEALTH_TIMEOUT) -> None:
        """Call the health endpoint.

        Raises:
            NetworkError: If the remote is unreachable or answers with an error
        """
        start_time = time.monotonic()
        try:
            response = self._client.get(self._health_url, timeout=timeout)
        except httpx.RequestError as e:
            raise NetworkError(f"Health check failed: {e}") from e

        elapsed_ms = (time.monotonic() - start_time) * 1000
        if response.status_code < 200 or response.status_code >= 300:
            raise NetworkError(
                f"Health check returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        logger.debug("GET sync/health: %d (%.0fms)", response.status_code, elapsed_ms)

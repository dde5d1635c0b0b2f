"""
HTTP sync provider.

Pushes each outbox entry to a remote REST endpoint with httpx.
"""

import hashlib
import json

import httpx

from stockflow.config import get_logger
from stockflow.core.entities.sync import SyncOperation
from stockflow.core.exceptions import FatalSyncError, RetryableSyncError
from stockflow.core.interfaces import ISyncProvider

logger = get_logger(__name__)

RETRYABLE_STATUS = {408, 425, 429}


class HttpSyncProvider(ISyncProvider):
    """
    POSTs ``{"operation": ..., "data": ...}`` to
    ``{base_url}/{entity_type}/{entity_id}``.

    2xx is success; 408/425/429, 5xx and transport errors are retryable;
    any other status is fatal. An ``Idempotency-Key`` header lets the
    remote drop duplicate deliveries.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        name: str = "http",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._name = name
        self._owns_client = client is None
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = client or httpx.AsyncClient(timeout=timeout, headers=headers)

    @property
    def name(self) -> str:
        return self._name

    async def push(
        self,
        entity_type: str,
        entity_id: str,
        operation: SyncOperation,
        snapshot: str,
    ) -> None:
        url = f"{self.base_url}/{entity_type}/{entity_id}"
        digest = hashlib.sha256(snapshot.encode()).hexdigest()[:16]
        headers = {
            "Idempotency-Key": f"{entity_type}:{entity_id}:{operation.value}:{digest}"
        }
        payload = {"operation": operation.value, "data": json.loads(snapshot)}

        try:
            response = await self._client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise RetryableSyncError(self.name, f"timeout: {e}") from e
        except httpx.TransportError as e:
            raise RetryableSyncError(self.name, f"transport error: {e}") from e

        status = response.status_code
        if 200 <= status < 300:
            logger.debug(
                "sync_push_ok",
                provider=self.name,
                entity_type=entity_type,
                entity_id=entity_id,
                status=status,
            )
            return

        error_text = response.text[:200]
        if status in RETRYABLE_STATUS or status >= 500:
            raise RetryableSyncError(self.name, f"HTTP {status}: {error_text}")
        raise FatalSyncError(self.name, f"HTTP {status}: {error_text}")

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

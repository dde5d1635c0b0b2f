"""Remote sync provider capability."""

from abc import ABC, abstractmethod

from stockflow.core.entities.sync import SyncOperation


class ISyncProvider(ABC):
    """
    Pushes one change to a remote system.

    ``push`` returns on success and raises ``RetryableSyncError`` or
    ``FatalSyncError`` otherwise. Implementations must tolerate receiving
    the same (entity_type, entity_id, operation) more than once.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name recorded in the sync log."""
        pass

    @abstractmethod
    async def push(
        self,
        entity_type: str,
        entity_id: str,
        operation: SyncOperation,
        snapshot: str,
    ) -> None:
        """Send one change to the remote."""
        pass

    async def close(self) -> None:
        """Release provider resources."""
        return None

"""Abstract interfaces for the sync outbox and the sync run log."""

from abc import ABC, abstractmethod

from stockflow.core.entities.sync import SyncLogEntry, SyncOperation, SyncQueueEntry
from stockflow.core.interfaces.unit_of_work import Transaction


class ISyncOutbox(ABC):
    """Durable record of local changes awaiting replication."""

    @abstractmethod
    async def enqueue(
        self,
        entity_type: str,
        entity_id: str,
        operation: SyncOperation,
        snapshot: str,
        tx: Transaction | None = None,
    ) -> SyncQueueEntry:
        """Insert a pending entry. No deduplication at this layer."""
        pass

    @abstractmethod
    async def peek_pending(
        self, limit: int, after_id: int | None = None
    ) -> list[SyncQueueEntry]:
        """Oldest unsynced entries first, optionally only those after ``after_id``."""
        pass

    @abstractmethod
    async def mark_synced(self, entry_ids: list[int]) -> int:
        """Set synced_at on the given entries; returns rows updated."""
        pass

    @abstractmethod
    async def count_pending(self) -> int:
        """Number of unsynced entries."""
        pass


class ISyncLogStore(ABC):
    """One record per sync run."""

    @abstractmethod
    async def start_run(self, entry: SyncLogEntry) -> SyncLogEntry:
        """Insert a run in ``running`` state."""
        pass

    @abstractmethod
    async def finish_run(self, entry: SyncLogEntry) -> SyncLogEntry:
        """Persist the final status, counters and timestamps of a run."""
        pass

    @abstractmethod
    async def get_last_run(self, provider: str | None = None) -> SyncLogEntry | None:
        """Most recently started run, optionally for one provider."""
        pass

    @abstractmethod
    async def list_runs(self, limit: int = 20) -> list[SyncLogEntry]:
        """Runs newest first."""
        pass

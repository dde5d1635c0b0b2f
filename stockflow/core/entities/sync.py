"""Outbox and sync run entities."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class SyncOperation(str, Enum):
    """Kind of change being replicated."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class SyncRunStatus(str, Enum):
    """Outcome of a sync run."""

    RUNNING = "running"
    SUCCEEDED = "succeeded"
    PARTIAL = "partial"
    FAILED = "failed"


class SyncQueueEntry(BaseModel):
    """A local change not yet acknowledged by the remote."""

    id: int | None = None  # autoincrement, gives FIFO order
    entity_type: str
    entity_id: str
    operation: SyncOperation
    data: str  # serialized snapshot
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    synced_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.synced_at is None

    @property
    def dedup_key(self) -> tuple[str, str, str]:
        return (self.entity_type, self.entity_id, self.operation.value)


class SyncLogEntry(BaseModel):
    """One row per sync run."""

    id: int | None = None
    provider: str
    status: SyncRunStatus = SyncRunStatus.RUNNING
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    items_count: int = 0
    error_message: str | None = None
    backup_path: str | None = None

    @property
    def duration_seconds(self) -> float | None:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()


class SyncRunReport(BaseModel):
    """Summary handed back to the caller of a run."""

    log: SyncLogEntry
    synced_ids: list[int] = Field(default_factory=list)
    pending_ids: list[int] = Field(default_factory=list)  # left for a later run
    batches: int = 0
    cancelled: bool = False

    @property
    def status(self) -> SyncRunStatus:
        return self.log.status

"""SQLite implementation of the sync outbox."""

from datetime import UTC, datetime

import aiosqlite

from stockflow.config import get_logger
from stockflow.core.entities.sync import SyncOperation, SyncQueueEntry
from stockflow.core.interfaces import ISyncOutbox, Transaction
from stockflow.infrastructure.storage.sqlite.connection import ConnectionPool, use_connection

logger = get_logger(__name__)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a stored ISO timestamp; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


class SQLiteSyncOutbox(ISyncOutbox):
    """Pending changes in ``sync_queue``. Synced rows are kept for replay."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def enqueue(
        self,
        entity_type: str,
        entity_id: str,
        operation: SyncOperation,
        snapshot: str,
        tx: Transaction | None = None,
    ) -> SyncQueueEntry:
        entry = SyncQueueEntry(
            entity_type=entity_type,
            entity_id=entity_id,
            operation=operation,
            data=snapshot,
        )
        async with use_connection(self._pool, tx, write=True) as conn:
            cursor = await conn.execute(
                """
                INSERT INTO sync_queue (entity_type, entity_id, operation, data, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    entry.entity_type,
                    entry.entity_id,
                    entry.operation.value,
                    entry.data,
                    entry.created_at.isoformat(),
                ),
            )
            entry.id = cursor.lastrowid
        return entry

    async def peek_pending(
        self, limit: int, after_id: int | None = None
    ) -> list[SyncQueueEntry]:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM sync_queue
                WHERE synced_at IS NULL AND id > ?
                ORDER BY id
                LIMIT ?
                """,
                (after_id or 0, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_entry(row) for row in rows]

    async def mark_synced(self, entry_ids: list[int]) -> int:
        if not entry_ids:
            return 0
        placeholders = ",".join("?" for _ in entry_ids)
        now = datetime.now(UTC).isoformat()
        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                f"""
                UPDATE sync_queue SET synced_at = ?
                WHERE id IN ({placeholders}) AND synced_at IS NULL
                """,
                [now, *entry_ids],
            )
            updated = cursor.rowcount
        logger.debug("outbox_marked_synced", count=updated)
        return updated

    async def count_pending(self) -> int:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM sync_queue WHERE synced_at IS NULL"
            )
            row = await cursor.fetchone()
            return int(row[0]) if row else 0

    @staticmethod
    def _row_to_entry(row: aiosqlite.Row) -> SyncQueueEntry:
        """Convert a database row to a SyncQueueEntry."""
        return SyncQueueEntry(
            id=row["id"],
            entity_type=row["entity_type"],
            entity_id=row["entity_id"],
            operation=SyncOperation(row["operation"]),
            data=row["data"],
            created_at=parse_timestamp(row["created_at"]) or datetime.now(UTC),
            synced_at=parse_timestamp(row["synced_at"]),
        )

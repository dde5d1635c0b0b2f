"""SQLite implementation of the sync run log."""

from datetime import UTC, datetime

import aiosqlite

from stockflow.core.entities.sync import SyncLogEntry, SyncRunStatus
from stockflow.core.interfaces import ISyncLogStore
from stockflow.infrastructure.storage.sqlite.connection import ConnectionPool
from stockflow.infrastructure.storage.sqlite.sync_outbox import parse_timestamp


class SQLiteSyncLogStore(ISyncLogStore):
    """Sync runs in ``sync_logs``."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def start_run(self, entry: SyncLogEntry) -> SyncLogEntry:
        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO sync_logs (
                    provider, status, started_at, items_count, backup_path
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (
                    entry.provider,
                    entry.status.value,
                    entry.started_at.isoformat(),
                    entry.items_count,
                    entry.backup_path,
                ),
            )
            entry.id = cursor.lastrowid
        return entry

    async def finish_run(self, entry: SyncLogEntry) -> SyncLogEntry:
        async with self._pool.transaction() as conn:
            await conn.execute(
                """
                UPDATE sync_logs SET
                    status = ?,
                    completed_at = ?,
                    items_count = ?,
                    error_message = ?,
                    backup_path = ?
                WHERE id = ?
                """,
                (
                    entry.status.value,
                    entry.completed_at.isoformat() if entry.completed_at else None,
                    entry.items_count,
                    entry.error_message,
                    entry.backup_path,
                    entry.id,
                ),
            )
        return entry

    async def get_last_run(self, provider: str | None = None) -> SyncLogEntry | None:
        async with self._pool.acquire() as conn:
            if provider is None:
                cursor = await conn.execute(
                    "SELECT * FROM sync_logs ORDER BY started_at DESC, id DESC LIMIT 1"
                )
            else:
                cursor = await conn.execute(
                    """
                    SELECT * FROM sync_logs WHERE provider = ?
                    ORDER BY started_at DESC, id DESC LIMIT 1
                    """,
                    (provider,),
                )
            row = await cursor.fetchone()
            return self._row_to_log(row) if row else None

    async def list_runs(self, limit: int = 20) -> list[SyncLogEntry]:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT * FROM sync_logs ORDER BY started_at DESC, id DESC LIMIT ?",
                (limit,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_log(row) for row in rows]

    @staticmethod
    def _row_to_log(row: aiosqlite.Row) -> SyncLogEntry:
        return SyncLogEntry(
            id=row["id"],
            provider=row["provider"],
            status=SyncRunStatus(row["status"]),
            started_at=parse_timestamp(row["started_at"]) or datetime.now(UTC),
            completed_at=parse_timestamp(row["completed_at"]),
            items_count=row["items_count"],
            error_message=row["error_message"],
            backup_path=row["backup_path"],
        )

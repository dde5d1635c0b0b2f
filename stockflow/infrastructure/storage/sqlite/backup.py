"""Local database snapshots taken before a sync run."""

from datetime import UTC, datetime
from pathlib import Path

from stockflow.config import get_logger
from stockflow.infrastructure.storage.sqlite.connection import ConnectionPool

logger = get_logger(__name__)

SNAPSHOT_PREFIX = "backup-"
SNAPSHOT_SUFFIX = ".db"


class SQLiteSnapshotter:
    """
    Writes consistent copies of the live database with ``VACUUM INTO``.

    Keeps only the newest ``keep`` snapshots in ``backup_dir``.
    """

    def __init__(self, pool: ConnectionPool, backup_dir: Path, keep: int = 5):
        self._pool = pool
        self.backup_dir = backup_dir
        self.keep = keep

    async def snapshot(self) -> Path:
        """Create a snapshot and prune old ones. Returns the new file path."""
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%f")
        target = self.backup_dir / f"{SNAPSHOT_PREFIX}{timestamp}{SNAPSHOT_SUFFIX}"

        async with self._pool.acquire() as conn:
            await conn.execute("VACUUM INTO ?", (str(target),))

        logger.info("database_snapshot_created", path=str(target))
        self.prune()
        return target

    def list_snapshots(self) -> list[Path]:
        """Snapshots newest first."""
        if not self.backup_dir.exists():
            return []
        snapshots = [
            p
            for p in self.backup_dir.iterdir()
            if p.name.startswith(SNAPSHOT_PREFIX) and p.name.endswith(SNAPSHOT_SUFFIX)
        ]
        return sorted(snapshots, key=lambda p: p.name, reverse=True)

    def prune(self) -> list[Path]:
        """Delete all but the newest ``keep`` snapshots."""
        removed = []
        for old in self.list_snapshots()[self.keep :]:
            old.unlink(missing_ok=True)
            removed.append(old)
        if removed:
            logger.info("database_snapshots_pruned", removed=len(removed))
        return removed

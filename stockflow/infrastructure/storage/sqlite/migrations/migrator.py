"""
Versioned schema migrations for the inventory database.

Files named ``vNNN_name.sql`` next to this module are applied in version
order and recorded in ``schema_migrations`` with a checksum of their text.
An applied file whose text has changed is refused rather than re-run.

Before migrating an existing database the migrator takes a copy through
SQLite's online backup API (safe with WAL mode, unlike a file copy) and
restores it if any step fails.
"""

import hashlib
import re
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from stockflow.config import get_logger, get_settings
from stockflow.core.exceptions import MigrationError

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
MIGRATION_FILE = re.compile(r"^v(\d{3,})_(\w+)\.sql$")


@dataclass(frozen=True)
class MigrationInfo:
    """One migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = MIGRATION_FILE.match(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=digest)


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


@dataclass
class MigrationStatus:
    """Applied and pending versions for a database file."""

    exists: bool
    applied: list[str] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)

    @property
    def current_version(self) -> str | None:
        return self.applied[-1] if self.applied else None


def discover_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration files in version order; badly named files are skipped."""
    found = []
    for path in migrations_dir.glob("v*.sql"):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return sorted(found, key=lambda m: int(m.version))


class SchemaMigrator:
    """Applies pending migrations to one SQLite file."""

    def __init__(self, db_path: Path, migrations_dir: Path = MIGRATIONS_DIR):
        self.db_path = db_path
        self.migrations_dir = migrations_dir

    async def status(self) -> MigrationStatus:
        available = discover_migrations(self.migrations_dir)
        if not self.db_path.exists():
            return MigrationStatus(exists=False, pending=[m.version for m in available])

        async with aiosqlite.connect(self.db_path) as conn:
            applied = await self._applied(conn)
        return MigrationStatus(
            exists=True,
            applied=sorted(applied, key=int),
            pending=[m.version for m in available if m.version not in applied],
        )

    async def migrate(self, backup: bool = True) -> list[MigrationResult]:
        """
        Apply every pending migration, stopping at the first failure.

        Raises:
            MigrationError: A step failed (the database is restored from the
                pre-migration copy) or an applied file was edited
        """
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        available = discover_migrations(self.migrations_dir)
        if not available:
            logger.warning("no_migrations_found", migrations_dir=str(self.migrations_dir))
            return []

        backup_path = await self._backup() if backup and self.db_path.exists() else None
        results: list[MigrationResult] = []
        try:
            async with aiosqlite.connect(self.db_path) as conn:
                await conn.execute("PRAGMA journal_mode=WAL")
                await conn.execute("PRAGMA foreign_keys=ON")
                applied = await self._applied(conn)

                for migration in available:
                    recorded = applied.get(migration.version)
                    if recorded is not None:
                        if recorded != migration.checksum:
                            raise MigrationError(
                                migration.version,
                                f"applied file changed (recorded {recorded}, "
                                f"found {migration.checksum})",
                            )
                        continue

                    result = await self._apply(conn, migration)
                    results.append(result)
                    if not result.success:
                        raise MigrationError(migration.version, result.error or "unknown")
        except MigrationError:
            if backup_path is not None:
                await self._restore(backup_path)
            raise

        if backup_path is not None:
            backup_path.unlink(missing_ok=True)

        logger.info(
            "database_migrated",
            db_path=str(self.db_path),
            applied=[r.version for r in results],
        )
        return results

    async def _apply(
        self, conn: aiosqlite.Connection, migration: MigrationInfo
    ) -> MigrationResult:
        logger.info("applying_migration", version=migration.version, name=migration.name)
        started = time.perf_counter()

        try:
            await conn.executescript(migration.path.read_text(encoding="utf-8"))
            cursor = await conn.execute("PRAGMA foreign_key_check")
            violations = await cursor.fetchall()
            if violations:
                raise aiosqlite.IntegrityError(
                    f"{len(violations)} foreign key violation(s), first in {violations[0][0]}"
                )
            elapsed = int((time.perf_counter() - started) * 1000)
            await conn.execute(
                "INSERT INTO schema_migrations (version, name, checksum, execution_time_ms) "
                "VALUES (?, ?, ?, ?)",
                (migration.version, migration.name, migration.checksum, elapsed),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            await conn.rollback()
            elapsed = int((time.perf_counter() - started) * 1000)
            logger.error("migration_failed", version=migration.version, error=str(e))
            return MigrationResult(
                migration.version, migration.name, False, elapsed, error=str(e)
            )

        logger.info("migration_applied", version=migration.version, execution_time_ms=elapsed)
        return MigrationResult(migration.version, migration.name, True, elapsed)

    @staticmethod
    async def _applied(conn: aiosqlite.Connection) -> dict[str, str]:
        """Applied version -> checksum; empty before the first migration."""
        cursor = await conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_migrations'"
        )
        if await cursor.fetchone() is None:
            return {}
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
        return {row[0]: row[1] for row in await cursor.fetchall()}

    async def _backup(self) -> Path:
        stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
        target = self.db_path.with_name(f"{self.db_path.stem}.pre-migrate-{stamp}.db")
        async with (
            aiosqlite.connect(self.db_path) as source,
            aiosqlite.connect(target) as dest,
        ):
            await source.backup(dest)
        logger.info("pre_migration_backup_created", backup_path=str(target))
        return target

    async def _restore(self, backup_path: Path) -> None:
        async with (
            aiosqlite.connect(backup_path) as source,
            aiosqlite.connect(self.db_path) as dest,
        ):
            await source.backup(dest)
        logger.warning("database_restored_from_backup", backup_path=str(backup_path))


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """Migrate ``db_path`` (default: the configured database) to the latest schema."""
    migrator = SchemaMigrator(db_path or get_settings().storage.db_path)
    return await migrator.migrate(backup=create_backup_before)


async def get_migration_status(db_path: Path | None = None) -> MigrationStatus:
    """Applied and pending migrations for ``db_path`` (default: the configured database)."""
    return await SchemaMigrator(db_path or get_settings().storage.db_path).status()

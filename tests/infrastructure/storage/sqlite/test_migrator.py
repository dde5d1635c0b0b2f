"""Tests for the schema migrator."""

from pathlib import Path

import aiosqlite
import pytest

from stockflow.core.exceptions import MigrationError
from stockflow.infrastructure.storage.sqlite.migrations import (
    MigrationInfo,
    SchemaMigrator,
    discover_migrations,
    get_migration_status,
    initialize_database,
)

EXPECTED_TABLES = {
    "schema_migrations",
    "companies",
    "warehouses",
    "users",
    "products",
    "stock",
    "inventory_movements",
    "movement_items",
    "sync_queue",
    "sync_logs",
}


async def _tables(db_path: Path) -> set[str]:
    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        return {row[0] for row in await cursor.fetchall()}


class TestMigrationInfo:
    def test_from_file_parses_filename(self, tmp_path: Path):
        migration_file = tmp_path / "v002_add_lots.sql"
        migration_file.write_text("SELECT 1;")

        info = MigrationInfo.from_file(migration_file)

        assert info.version == "002"
        assert info.name == "add_lots"
        assert len(info.checksum) == 16

    def test_invalid_filename_raises(self, tmp_path: Path):
        bad = tmp_path / "schema.sql"
        bad.write_text("SELECT 1;")
        with pytest.raises(ValueError, match="Invalid migration filename"):
            MigrationInfo.from_file(bad)

    def test_discover_orders_by_version_and_skips_invalid(self, tmp_path: Path):
        (tmp_path / "v010_later.sql").write_text("SELECT 1;")
        (tmp_path / "v002_first.sql").write_text("SELECT 1;")
        (tmp_path / "v_bad.sql").write_text("SELECT 1;")
        assert [m.version for m in discover_migrations(tmp_path)] == ["002", "010"]

    def test_bundled_migrations(self):
        assert discover_migrations()[0].name == "initial_schema"


class TestInitializeDatabase:
    async def test_creates_schema(self, temp_db_path: Path):
        results = await initialize_database(temp_db_path, create_backup_before=False)

        assert results and all(r.success for r in results)
        assert EXPECTED_TABLES <= await _tables(temp_db_path)

    async def test_second_run_is_noop(self, temp_db_path: Path):
        await initialize_database(temp_db_path, create_backup_before=False)
        assert await initialize_database(temp_db_path) == []
        # the pre-migration copy is removed after success
        assert not list(temp_db_path.parent.glob("*.pre-migrate-*"))

    async def test_movement_reference_is_indexed(self, migrated_db: Path):
        async with aiosqlite.connect(migrated_db) as conn:
            cursor = await conn.execute("PRAGMA index_list(inventory_movements)")
            names = {row[1] for row in await cursor.fetchall()}
        assert "idx_movements_reference" in names

    async def test_stock_quantity_check_constraint(self, migrated_db: Path):
        async with aiosqlite.connect(migrated_db) as conn:
            await conn.execute("INSERT INTO companies (id, commercial_name) VALUES ('C', 'c')")
            await conn.execute("INSERT INTO warehouses (id, company_id, name) VALUES ('W', 'C', 'w')")
            await conn.execute("INSERT INTO products (id, code, name) VALUES ('P', 'p', 'p')")
            with pytest.raises(aiosqlite.IntegrityError):
                await conn.execute(
                    "INSERT INTO stock (id, product_id, warehouse_id, quantity, last_updated) "
                    "VALUES ('s', 'P', 'W', -1, 'now')"
                )

    async def test_movement_type_check_constraint(self, migrated_db: Path):
        async with aiosqlite.connect(migrated_db) as conn:
            with pytest.raises(aiosqlite.IntegrityError):
                await conn.execute(
                    "INSERT INTO inventory_movements (id, type, date, user_id, created_at) "
                    "VALUES ('m', 'RETURN', 'now', 'U1', 'now')"
                )


class TestSchemaMigrator:
    @pytest.fixture
    def migrations_dir(self, tmp_path: Path) -> Path:
        path = tmp_path / "migrations"
        path.mkdir()
        (path / "v001_base.sql").write_text(
            "CREATE TABLE schema_migrations (version TEXT PRIMARY KEY, name TEXT, "
            "checksum TEXT, applied_at TEXT, execution_time_ms INTEGER);\n"
            "CREATE TABLE lots (id TEXT PRIMARY KEY);\n"
        )
        return path

    async def test_failed_step_restores_backup(self, tmp_path: Path, migrations_dir: Path):
        db_path = tmp_path / "inv.db"
        migrator = SchemaMigrator(db_path, migrations_dir)
        await migrator.migrate(backup=False)

        (migrations_dir / "v002_broken.sql").write_text(
            "CREATE TABLE extra (id TEXT);\nTHIS IS NOT SQL;\n"
        )
        with pytest.raises(MigrationError) as exc_info:
            await migrator.migrate()

        assert exc_info.value.version == "002"
        assert "extra" not in await _tables(db_path)
        status = await migrator.status()
        assert status.applied == ["001"]
        assert status.pending == ["002"]

    async def test_edited_applied_file_is_refused(self, tmp_path: Path, migrations_dir: Path):
        db_path = tmp_path / "inv.db"
        migrator = SchemaMigrator(db_path, migrations_dir)
        await migrator.migrate(backup=False)

        with (migrations_dir / "v001_base.sql").open("a") as fh:
            fh.write("CREATE TABLE sneaky (id TEXT);\n")

        with pytest.raises(MigrationError, match="applied file changed"):
            await migrator.migrate(backup=False)


class TestMigrationStatus:
    async def test_status_before_and_after(self, temp_db_path: Path):
        before = await get_migration_status(temp_db_path)
        assert before.exists is False
        assert before.current_version is None
        assert "001" in before.pending

        await initialize_database(temp_db_path, create_backup_before=False)
        after = await get_migration_status(temp_db_path)
        assert after.exists is True
        assert after.current_version == "002"
        assert after.pending == []

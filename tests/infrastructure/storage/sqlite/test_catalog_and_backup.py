"""Tests for SQLiteCatalogReader and SQLiteSnapshotter."""

from pathlib import Path

import aiosqlite

from stockflow.core.entities import ProductStatus
from stockflow.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteCatalogReader,
    SQLiteSnapshotter,
)


class TestSQLiteCatalogReader:
    async def test_get_product(self, pool: ConnectionPool):
        reader = SQLiteCatalogReader(pool)
        product = await reader.get_product("P1")
        assert product is not None
        assert product.code == "CABLE-01"
        assert product.cost == 2.5
        assert product.min_stock == 5
        assert product.max_stock == 100

        inactive = await reader.get_product("P3")
        assert inactive.status == ProductStatus.INACTIVE
        assert not inactive.is_active

    async def test_get_products_ignores_unknown(self, pool: ConnectionPool):
        reader = SQLiteCatalogReader(pool)
        products = await reader.get_products(["P1", "P2", "P9", "P1"])
        assert set(products) == {"P1", "P2"}
        assert await reader.get_products([]) == {}

    async def test_get_warehouse(self, pool: ConnectionPool):
        reader = SQLiteCatalogReader(pool)
        warehouse = await reader.get_warehouse("W2")
        assert warehouse.name == "North"
        assert warehouse.company_id == "C1"
        assert await reader.get_warehouse("W9") is None


class TestSQLiteSnapshotter:
    async def test_snapshot_is_readable_copy(self, pool: ConnectionPool, tmp_path: Path):
        snapshotter = SQLiteSnapshotter(pool, tmp_path / "backups")

        path = await snapshotter.snapshot()

        assert path.exists()
        assert path.name.startswith("backup-") and path.suffix == ".db"
        async with aiosqlite.connect(path) as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM warehouses")
            assert (await cursor.fetchone())[0] == 3

    async def test_keeps_newest(self, pool: ConnectionPool, tmp_path: Path):
        backup_dir = tmp_path / "backups"
        backup_dir.mkdir()
        for i in range(4):
            (backup_dir / f"backup-2020010{i}T000000000000.db").write_bytes(b"")
        (backup_dir / "notes.txt").write_text("keep me")

        snapshotter = SQLiteSnapshotter(pool, backup_dir, keep=2)
        newest = await snapshotter.snapshot()

        remaining = snapshotter.list_snapshots()
        assert len(remaining) == 2
        assert remaining[0] == newest
        assert remaining[1].name == "backup-20200103T000000000000.db"
        assert (backup_dir / "notes.txt").exists()

    async def test_list_without_dir(self, pool: ConnectionPool, tmp_path: Path):
        assert SQLiteSnapshotter(pool, tmp_path / "missing").list_snapshots() == []

"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path

import aiosqlite
import pytest

from stockflow.config import reset_settings
from stockflow.infrastructure.storage.sqlite import ConnectionPool
from stockflow.infrastructure.storage.sqlite.migrations import initialize_database


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point settings at a temp data dir and rebuild them per test."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("LEDGER_RETRY_DELAY", "0.001")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test_inventory.db"


@pytest.fixture
async def migrated_db(temp_db_path: Path) -> Path:
    """Temporary database with the full schema applied."""
    await initialize_database(temp_db_path, create_backup_before=False)
    return temp_db_path


@pytest.fixture
async def seeded_db(migrated_db: Path) -> Path:
    """Migrated database with a small catalog.

    Warehouses W1, W2, W3 (company C1); products P1 (cost 2.5, min 5,
    max 100), P2 (cost 10, no min), P3 (inactive, min 3).
    """
    async with aiosqlite.connect(migrated_db) as conn:
        await conn.execute("PRAGMA foreign_keys=ON")
        await conn.execute(
            "INSERT INTO companies (id, commercial_name) VALUES ('C1', 'Acme')"
        )
        await conn.executemany(
            "INSERT INTO warehouses (id, company_id, name) VALUES (?, 'C1', ?)",
            [("W1", "Main"), ("W2", "North"), ("W3", "South")],
        )
        await conn.executemany(
            """
            INSERT INTO products (id, code, name, cost, price, min_stock, max_stock, status)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                ("P1", "CABLE-01", "Cable 3x2.5mm", 2.5, 4.0, 5, 100, "ACTIVE"),
                ("P2", "PIPE-01", "PVC Pipe", 10.0, 15.0, 0, None, "ACTIVE"),
                ("P3", "OLD-01", "Old Fitting", 1.0, 2.0, 3, None, "INACTIVE"),
            ],
        )
        await conn.commit()
    return migrated_db


@pytest.fixture
async def pool(seeded_db: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Connection pool over the seeded database."""
    db_pool = ConnectionPool(db_path=seeded_db, pool_size=3, busy_timeout=5000)
    await db_pool.initialize()
    yield db_pool
    await db_pool.close()


@pytest.fixture
def fetch_rows(seeded_db: Path):
    """Read rows with a fresh connection, outside any pool."""

    async def _fetch(sql: str, params: tuple = ()) -> list[aiosqlite.Row]:
        async with aiosqlite.connect(seeded_db) as conn:
            conn.row_factory = aiosqlite.Row
            cursor = await conn.execute(sql, params)
            return list(await cursor.fetchall())

    return _fetch

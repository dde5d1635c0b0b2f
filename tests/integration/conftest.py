"""Fixtures wiring real SQLite stores into the core services."""

import pytest

from stockflow.application.services import get_movement_processor, get_stock_ledger, get_sync_outbox
from stockflow.core.services import MovementProcessor
from stockflow.infrastructure.storage.sqlite import ConnectionPool


@pytest.fixture
async def processor(pool: ConnectionPool) -> MovementProcessor:
    return await get_movement_processor(pool=pool)


@pytest.fixture
async def ledger(pool: ConnectionPool):
    return await get_stock_ledger(pool)


@pytest.fixture
async def outbox(pool: ConnectionPool):
    return await get_sync_outbox(pool)


@pytest.fixture
def table_counts(fetch_rows):
    """Row counts of every table a movement writes."""

    async def _counts() -> dict[str, int]:
        counts = {}
        for table in ("stock", "inventory_movements", "movement_items", "sync_queue"):
            rows = await fetch_rows(f"SELECT COUNT(*) AS n FROM {table}")
            counts[table] = rows[0]["n"]
        return counts

    return _counts

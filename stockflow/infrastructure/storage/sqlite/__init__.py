"""SQLite storage implementations."""

from stockflow.infrastructure.storage.sqlite.backup import SQLiteSnapshotter
from stockflow.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogReader
from stockflow.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    SQLiteUnitOfWork,
    close_pool,
    get_pool,
    is_transient,
    use_connection,
)
from stockflow.infrastructure.storage.sqlite.movement_store import SQLiteMovementStore
from stockflow.infrastructure.storage.sqlite.stock_ledger import SQLiteStockLedger
from stockflow.infrastructure.storage.sqlite.sync_log_store import SQLiteSyncLogStore
from stockflow.infrastructure.storage.sqlite.sync_outbox import SQLiteSyncOutbox

__all__ = [
    # Connection
    "ConnectionPool",
    "SQLiteUnitOfWork",
    "get_pool",
    "close_pool",
    "is_transient",
    "use_connection",
    # Stores
    "SQLiteCatalogReader",
    "SQLiteMovementStore",
    "SQLiteStockLedger",
    "SQLiteSyncLogStore",
    "SQLiteSyncOutbox",
    # Snapshots
    "SQLiteSnapshotter",
]

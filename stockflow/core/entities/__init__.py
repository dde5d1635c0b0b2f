"""Core domain entities."""

from stockflow.core.entities.audit import AuditEvent
from stockflow.core.entities.catalog import Product, ProductStatus, Warehouse
from stockflow.core.entities.movement import (
    AdjustmentRoute,
    InboundRoute,
    InventoryMovement,
    MovementItem,
    MovementRoute,
    MovementType,
    OutboundRoute,
    TransferRoute,
)
from stockflow.core.entities.stock import (
    ProductStockSummary,
    Stock,
    StockChange,
    StockDelta,
    StockLevel,
    StockStatus,
)
from stockflow.core.entities.sync import (
    SyncLogEntry,
    SyncOperation,
    SyncQueueEntry,
    SyncRunReport,
    SyncRunStatus,
)

__all__ = [
    # Audit
    "AuditEvent",
    # Catalog
    "Product",
    "ProductStatus",
    "Warehouse",
    # Movement
    "AdjustmentRoute",
    "InboundRoute",
    "InventoryMovement",
    "MovementItem",
    "MovementRoute",
    "MovementType",
    "OutboundRoute",
    "TransferRoute",
    # Stock
    "ProductStockSummary",
    "Stock",
    "StockChange",
    "StockDelta",
    "StockLevel",
    "StockStatus",
    # Sync
    "SyncLogEntry",
    "SyncOperation",
    "SyncQueueEntry",
    "SyncRunReport",
    "SyncRunStatus",
]

"""Ledger entities: stock rows, deltas and stock level classification."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class StockStatus(str, Enum):
    """Classification of a quantity against product thresholds."""

    OK = "OK"
    LOW = "LOW"
    CRITICAL = "CRITICAL"
    EXCESS = "EXCESS"

    @classmethod
    def classify(
        cls, quantity: int, min_stock: int, max_stock: int | None = None
    ) -> "StockStatus":
        """Classify a quantity: empty is CRITICAL, below min LOW, above max EXCESS."""
        if quantity <= 0:
            return cls.CRITICAL
        if quantity < min_stock:
            return cls.LOW
        if max_stock is not None and quantity > max_stock:
            return cls.EXCESS
        return cls.OK


class Stock(BaseModel):
    """Quantity on hand for one (product, warehouse) pair."""

    id: str
    product_id: str
    warehouse_id: str
    quantity: int = Field(default=0, ge=0)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))


class StockDelta(BaseModel):
    """A signed change to apply to one ledger row."""

    product_id: str
    warehouse_id: str
    delta: int

    @property
    def key(self) -> tuple[str, str]:
        return (self.product_id, self.warehouse_id)


class StockChange(BaseModel):
    """Outcome of applying a delta: the row after the change."""

    stock: Stock
    previous_quantity: int
    created: bool = False  # True if the row did not exist before


class StockLevel(BaseModel):
    """Reporting view of a stock row joined with catalog data."""

    product_id: str
    product_code: str
    product_name: str
    warehouse_id: str
    warehouse_name: str
    quantity: int
    min_stock: int = 0
    max_stock: int | None = None
    unit_cost: float = 0.0

    @property
    def status(self) -> StockStatus:
        return StockStatus.classify(self.quantity, self.min_stock, self.max_stock)

    @property
    def value(self) -> float:
        return self.quantity * self.unit_cost


class ProductStockSummary(BaseModel):
    """Total quantity of a product across all warehouses."""

    product_id: str
    product_code: str
    product_name: str
    total_quantity: int
    min_stock: int = 0
    max_stock: int | None = None

    @property
    def status(self) -> StockStatus:
        return StockStatus.classify(self.total_quantity, self.min_stock, self.max_stock)

    @property
    def shortfall(self) -> int:
        return max(0, self.min_stock - self.total_quantity)

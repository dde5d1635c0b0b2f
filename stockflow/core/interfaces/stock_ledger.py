"""Abstract interface for the stock ledger."""

from abc import ABC, abstractmethod

from stockflow.core.entities.stock import (
    ProductStockSummary,
    Stock,
    StockChange,
    StockDelta,
    StockLevel,
)
from stockflow.core.interfaces.unit_of_work import Transaction


class IStockLedger(ABC):
    """Quantity on hand per (product, warehouse), never negative."""

    @abstractmethod
    async def get_quantity(
        self, product_id: str, warehouse_id: str, tx: Transaction | None = None
    ) -> int:
        """Quantity on hand; 0 when no row exists."""
        pass

    @abstractmethod
    async def get_stock(
        self, product_id: str, warehouse_id: str, tx: Transaction | None = None
    ) -> Stock | None:
        """Get the ledger row for a pair, if any."""
        pass

    @abstractmethod
    async def adjust(
        self,
        product_id: str,
        warehouse_id: str,
        delta: int,
        tx: Transaction | None = None,
    ) -> int:
        """
        Apply a signed delta to one row and return the new quantity.

        Raises:
            InsufficientStockError: If the result would be negative
        """
        pass

    @abstractmethod
    async def adjust_many(
        self, deltas: list[StockDelta], tx: Transaction | None = None
    ) -> list[StockChange]:
        """
        Apply a batch of deltas atomically.

        Deltas for the same pair are netted. If any row would go negative
        nothing is changed.

        Raises:
            InsufficientStockError: For the first offending pair
        """
        pass

    @abstractmethod
    async def get_stock_by_product(self, product_id: str) -> list[Stock]:
        """All ledger rows for a product."""
        pass

    @abstractmethod
    async def get_stock_by_warehouse(self, warehouse_id: str) -> list[Stock]:
        """All ledger rows for a warehouse."""
        pass

    @abstractmethod
    async def list_stock_levels(
        self,
        warehouse_id: str | None = None,
        product_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[StockLevel]:
        """Ledger rows joined with product and warehouse data, optionally filtered."""
        pass

    @abstractmethod
    async def list_low_stock(self) -> list[ProductStockSummary]:
        """Products whose total quantity across warehouses is below min_stock."""
        pass

    @abstractmethod
    async def get_total_stock_value(self) -> float:
        """Sum of quantity * product cost over all rows."""
        pass

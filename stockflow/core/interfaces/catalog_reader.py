"""Read-only access to catalog data owned by catalog management."""

from abc import ABC, abstractmethod

from stockflow.core.entities.catalog import Product, Warehouse
from stockflow.core.interfaces.unit_of_work import Transaction


class ICatalogReader(ABC):
    """Looks up products and warehouses by id. Never mutates them."""

    @abstractmethod
    async def get_product(
        self, product_id: str, tx: Transaction | None = None
    ) -> Product | None:
        """Get product by ID."""
        pass

    @abstractmethod
    async def get_products(
        self, product_ids: list[str], tx: Transaction | None = None
    ) -> dict[str, Product]:
        """Get several products at once, keyed by ID. Unknown IDs are absent."""
        pass

    @abstractmethod
    async def get_warehouse(
        self, warehouse_id: str, tx: Transaction | None = None
    ) -> Warehouse | None:
        """Get warehouse by ID."""
        pass

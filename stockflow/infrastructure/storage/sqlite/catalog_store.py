"""SQLite read-only catalog lookups."""

from datetime import UTC, datetime

import aiosqlite

from stockflow.core.entities.catalog import Product, ProductStatus, Warehouse
from stockflow.core.interfaces import ICatalogReader, Transaction
from stockflow.infrastructure.storage.sqlite.connection import ConnectionPool, use_connection


class SQLiteCatalogReader(ICatalogReader):
    """Reads products and warehouses by id."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def get_product(
        self, product_id: str, tx: Transaction | None = None
    ) -> Product | None:
        async with use_connection(self._pool, tx) as conn:
            cursor = await conn.execute("SELECT * FROM products WHERE id = ?", (product_id,))
            row = await cursor.fetchone()
            return self._row_to_product(row) if row else None

    async def get_products(
        self, product_ids: list[str], tx: Transaction | None = None
    ) -> dict[str, Product]:
        unique_ids = sorted(set(product_ids))
        if not unique_ids:
            return {}
        placeholders = ",".join("?" for _ in unique_ids)
        async with use_connection(self._pool, tx) as conn:
            cursor = await conn.execute(
                f"SELECT * FROM products WHERE id IN ({placeholders})",
                unique_ids,
            )
            rows = await cursor.fetchall()
            return {row["id"]: self._row_to_product(row) for row in rows}

    async def get_warehouse(
        self, warehouse_id: str, tx: Transaction | None = None
    ) -> Warehouse | None:
        async with use_connection(self._pool, tx) as conn:
            cursor = await conn.execute(
                "SELECT * FROM warehouses WHERE id = ?", (warehouse_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return Warehouse(
                id=row["id"],
                company_id=row["company_id"],
                name=row["name"],
                location=row["location"],
            )

    @staticmethod
    def _row_to_product(row: aiosqlite.Row) -> Product:
        """Convert a database row to a Product entity."""
        created_at = datetime.now(UTC)
        if row["created_at"]:
            try:
                created_at = datetime.fromisoformat(row["created_at"])
            except (ValueError, TypeError):
                pass

        return Product(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            unit=row["unit"],
            cost=float(row["cost"]),
            price=float(row["price"]),
            min_stock=int(row["min_stock"]),
            max_stock=row["max_stock"],
            status=ProductStatus(row["status"]),
            created_at=created_at,
        )

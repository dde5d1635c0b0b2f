"""SQLite implementation of the stock ledger."""

from datetime import UTC, datetime
from uuid import uuid4

import aiosqlite

from stockflow.config import get_logger
from stockflow.core.entities.stock import (
    ProductStockSummary,
    Stock,
    StockChange,
    StockDelta,
    StockLevel,
)
from stockflow.core.exceptions import InsufficientStockError
from stockflow.core.interfaces import IStockLedger, Transaction
from stockflow.infrastructure.storage.sqlite.connection import ConnectionPool, use_connection

logger = get_logger(__name__)


def net_deltas(deltas: list[StockDelta]) -> dict[tuple[str, str], int]:
    """Sum deltas per (product, warehouse), keeping first-seen order."""
    netted: dict[tuple[str, str], int] = {}
    for d in deltas:
        netted[d.key] = netted.get(d.key, 0) + d.delta
    return netted


class SQLiteStockLedger(IStockLedger):
    """
    Ledger rows in the ``stock`` table.

    ``adjust_many`` reads every affected row, checks all of them, then
    writes. Inside a ``BEGIN IMMEDIATE`` transaction no other writer can
    interleave, and each UPDATE is additionally guarded by
    ``quantity + delta >= 0``.
    """

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def get_quantity(
        self, product_id: str, warehouse_id: str, tx: Transaction | None = None
    ) -> int:
        stock = await self.get_stock(product_id, warehouse_id, tx=tx)
        return stock.quantity if stock else 0

    async def get_stock(
        self, product_id: str, warehouse_id: str, tx: Transaction | None = None
    ) -> Stock | None:
        async with use_connection(self._pool, tx) as conn:
            return await self._fetch(conn, product_id, warehouse_id)

    async def adjust(
        self,
        product_id: str,
        warehouse_id: str,
        delta: int,
        tx: Transaction | None = None,
    ) -> int:
        changes = await self.adjust_many(
            [StockDelta(product_id=product_id, warehouse_id=warehouse_id, delta=delta)],
            tx=tx,
        )
        return changes[0].stock.quantity if changes else 0

    async def adjust_many(
        self, deltas: list[StockDelta], tx: Transaction | None = None
    ) -> list[StockChange]:
        netted = net_deltas(deltas)
        if not netted:
            return []

        async with use_connection(self._pool, tx, write=True) as conn:
            current: dict[tuple[str, str], Stock | None] = {}
            for product_id, warehouse_id in netted:
                current[(product_id, warehouse_id)] = await self._fetch(
                    conn, product_id, warehouse_id
                )

            # Check everything before the first write
            for (product_id, warehouse_id), delta in netted.items():
                row = current[(product_id, warehouse_id)]
                available = row.quantity if row else 0
                if available + delta < 0:
                    logger.info(
                        "stock_adjustment_rejected",
                        product_id=product_id,
                        warehouse_id=warehouse_id,
                        requested=-delta,
                        available=available,
                    )
                    raise InsufficientStockError(
                        product_id=product_id,
                        warehouse_id=warehouse_id,
                        requested=-delta,
                        available=available,
                    )

            now = datetime.now(UTC)
            changes: list[StockChange] = []
            for (product_id, warehouse_id), delta in netted.items():
                row = current[(product_id, warehouse_id)]
                if row is None:
                    if delta == 0:
                        continue
                    changes.append(
                        await self._insert(conn, product_id, warehouse_id, delta, now)
                    )
                else:
                    changes.append(await self._update(conn, row, delta, now))

        logger.debug("stock_adjusted", rows=len(changes))
        return changes

    async def _insert(
        self,
        conn: aiosqlite.Connection,
        product_id: str,
        warehouse_id: str,
        quantity: int,
        now: datetime,
    ) -> StockChange:
        stock = Stock(
            id=uuid4().hex,
            product_id=product_id,
            warehouse_id=warehouse_id,
            quantity=quantity,
            last_updated=now,
        )
        await conn.execute(
            """
            INSERT INTO stock (id, product_id, warehouse_id, quantity, last_updated)
            VALUES (?, ?, ?, ?, ?)
            """,
            (stock.id, product_id, warehouse_id, quantity, now.isoformat()),
        )
        return StockChange(stock=stock, previous_quantity=0, created=True)

    async def _update(
        self,
        conn: aiosqlite.Connection,
        row: Stock,
        delta: int,
        now: datetime,
    ) -> StockChange:
        cursor = await conn.execute(
            """
            UPDATE stock SET quantity = quantity + ?, last_updated = ?
            WHERE id = ? AND quantity + ? >= 0
            """,
            (delta, now.isoformat(), row.id, delta),
        )
        if cursor.rowcount != 1:
            # Row changed under us; only possible without an enclosing write lock
            available = await self._fetch(conn, row.product_id, row.warehouse_id)
            raise InsufficientStockError(
                product_id=row.product_id,
                warehouse_id=row.warehouse_id,
                requested=-delta,
                available=available.quantity if available else 0,
            )
        updated = row.model_copy(
            update={"quantity": row.quantity + delta, "last_updated": now}
        )
        return StockChange(stock=updated, previous_quantity=row.quantity)

    async def _fetch(
        self, conn: aiosqlite.Connection, product_id: str, warehouse_id: str
    ) -> Stock | None:
        cursor = await conn.execute(
            "SELECT * FROM stock WHERE product_id = ? AND warehouse_id = ?",
            (product_id, warehouse_id),
        )
        row = await cursor.fetchone()
        return self._row_to_stock(row) if row else None

    async def get_stock_by_product(self, product_id: str) -> list[Stock]:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock WHERE product_id = ? ORDER BY warehouse_id",
                (product_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_stock(row) for row in rows]

    async def get_stock_by_warehouse(self, warehouse_id: str) -> list[Stock]:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock WHERE warehouse_id = ? ORDER BY product_id",
                (warehouse_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_stock(row) for row in rows]

    async def list_stock_levels(
        self,
        warehouse_id: str | None = None,
        product_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[StockLevel]:
        clauses: list[str] = []
        params: list = []
        if warehouse_id is not None:
            clauses.append("s.warehouse_id = ?")
            params.append(warehouse_id)
        if product_id is not None:
            clauses.append("s.product_id = ?")
            params.append(product_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.extend([limit, offset])

        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                f"""
                SELECT s.product_id, p.code AS product_code, p.name AS product_name,
                       s.warehouse_id, w.name AS warehouse_name, s.quantity,
                       p.min_stock, p.max_stock, p.cost
                FROM stock s
                JOIN products p ON p.id = s.product_id
                JOIN warehouses w ON w.id = s.warehouse_id
                {where}
                ORDER BY p.code, w.name
                LIMIT ? OFFSET ?
                """,
                params,
            )
            rows = await cursor.fetchall()
            return [
                StockLevel(
                    product_id=row["product_id"],
                    product_code=row["product_code"],
                    product_name=row["product_name"],
                    warehouse_id=row["warehouse_id"],
                    warehouse_name=row["warehouse_name"],
                    quantity=row["quantity"],
                    min_stock=row["min_stock"],
                    max_stock=row["max_stock"],
                    unit_cost=float(row["cost"]),
                )
                for row in rows
            ]

    async def list_low_stock(self) -> list[ProductStockSummary]:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                """
                SELECT p.id, p.code, p.name, p.min_stock, p.max_stock,
                       COALESCE(SUM(s.quantity), 0) AS total_quantity
                FROM products p
                LEFT JOIN stock s ON s.product_id = p.id
                WHERE p.status = 'ACTIVE'
                GROUP BY p.id
                HAVING total_quantity < p.min_stock
                ORDER BY p.code
                """
            )
            rows = await cursor.fetchall()
            return [
                ProductStockSummary(
                    product_id=row["id"],
                    product_code=row["code"],
                    product_name=row["name"],
                    total_quantity=row["total_quantity"],
                    min_stock=row["min_stock"],
                    max_stock=row["max_stock"],
                )
                for row in rows
            ]

    async def get_total_stock_value(self) -> float:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                """
                SELECT COALESCE(SUM(s.quantity * p.cost), 0.0)
                FROM stock s JOIN products p ON p.id = s.product_id
                """
            )
            row = await cursor.fetchone()
            return float(row[0]) if row else 0.0

    @staticmethod
    def _row_to_stock(row: aiosqlite.Row) -> Stock:
        """Convert a database row to a Stock entity."""
        last_updated = datetime.now(UTC)
        if row["last_updated"]:
            try:
                last_updated = datetime.fromisoformat(row["last_updated"])
            except (ValueError, TypeError):
                pass

        return Stock(
            id=row["id"],
            product_id=row["product_id"],
            warehouse_id=row["warehouse_id"],
            quantity=int(row["quantity"]),
            last_updated=last_updated,
        )

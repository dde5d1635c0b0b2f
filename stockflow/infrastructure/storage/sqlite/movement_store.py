"""SQLite implementation of movement storage."""

from datetime import UTC, datetime

import aiosqlite

from stockflow.config import get_logger
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
from stockflow.core.exceptions import DatabaseError
from stockflow.core.interfaces import IMovementStore, Transaction
from stockflow.infrastructure.storage.sqlite.connection import ConnectionPool, use_connection

logger = get_logger(__name__)


def route_from_columns(
    movement_type: MovementType,
    warehouse_from_id: str | None,
    warehouse_to_id: str | None,
) -> MovementRoute:
    """Rebuild a tagged route from the flat storage columns."""
    if movement_type == MovementType.IN:
        return InboundRoute(warehouse_to_id=warehouse_to_id)
    if movement_type == MovementType.OUT:
        return OutboundRoute(warehouse_from_id=warehouse_from_id)
    if movement_type == MovementType.TRANSFER:
        return TransferRoute(
            warehouse_from_id=warehouse_from_id, warehouse_to_id=warehouse_to_id
        )
    if warehouse_to_id:
        return AdjustmentRoute(warehouse_id=warehouse_to_id, side="to")
    return AdjustmentRoute(warehouse_id=warehouse_from_id, side="from")


class SQLiteMovementStore(IMovementStore):
    """Movement headers in ``inventory_movements``, lines in ``movement_items``."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def add_movement(
        self, movement: InventoryMovement, tx: Transaction | None = None
    ) -> InventoryMovement:
        async with use_connection(self._pool, tx, write=True) as conn:
            await conn.execute(
                """
                INSERT INTO inventory_movements (
                    id, type, date, user_id, warehouse_from_id, warehouse_to_id,
                    notes, reference, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    movement.id,
                    movement.type.value,
                    movement.date.isoformat(),
                    movement.user_id,
                    movement.warehouse_from_id,
                    movement.warehouse_to_id,
                    movement.notes,
                    movement.reference,
                    movement.created_at.isoformat(),
                ),
            )
            for item in movement.items:
                item.movement_id = movement.id
            await conn.executemany(
                """
                INSERT INTO movement_items (
                    id, movement_id, product_id, quantity, cost, price, notes
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        item.id,
                        movement.id,
                        item.product_id,
                        item.quantity,
                        item.cost,
                        item.price,
                        item.notes,
                    )
                    for item in movement.items
                ],
            )
        logger.debug(
            "movement_recorded",
            movement_id=movement.id,
            type=movement.type.value,
            items=len(movement.items),
        )
        return movement

    async def get_movement(self, movement_id: str) -> InventoryMovement | None:
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT * FROM inventory_movements WHERE id = ?", (movement_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            items = await self._load_items(conn, [movement_id])
            return self._row_to_movement(row, items.get(movement_id, []))

    async def find_by_reference(
        self, reference: str, tx: Transaction | None = None
    ) -> list[InventoryMovement]:
        async with use_connection(self._pool, tx) as conn:
            cursor = await conn.execute(
                "SELECT * FROM inventory_movements WHERE reference = ? ORDER BY created_at",
                (reference,),
            )
            rows = await cursor.fetchall()
            items = await self._load_items(conn, [row["id"] for row in rows])
            return [self._row_to_movement(row, items.get(row["id"], [])) for row in rows]

    async def list_movements(
        self,
        movement_type: MovementType | None = None,
        warehouse_id: str | None = None,
        product_id: str | None = None,
        since: datetime | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[InventoryMovement]:
        clauses: list[str] = []
        params: list = []
        if movement_type is not None:
            clauses.append("m.type = ?")
            params.append(movement_type.value)
        if warehouse_id is not None:
            clauses.append("(m.warehouse_from_id = ? OR m.warehouse_to_id = ?)")
            params.extend([warehouse_id, warehouse_id])
        if product_id is not None:
            clauses.append(
                "EXISTS (SELECT 1 FROM movement_items i "
                "WHERE i.movement_id = m.id AND i.product_id = ?)"
            )
            params.append(product_id)
        if since is not None:
            clauses.append("m.date >= ?")
            params.append(since.isoformat())

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.extend([limit, offset])

        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                f"""
                SELECT m.* FROM inventory_movements m
                {where}
                ORDER BY m.date DESC, m.created_at DESC
                LIMIT ? OFFSET ?
                """,
                params,
            )
            rows = await cursor.fetchall()
            items = await self._load_items(conn, [row["id"] for row in rows])
            return [self._row_to_movement(row, items.get(row["id"], [])) for row in rows]

    async def _load_items(
        self, conn: aiosqlite.Connection, movement_ids: list[str]
    ) -> dict[str, list[MovementItem]]:
        if not movement_ids:
            return {}
        placeholders = ",".join("?" for _ in movement_ids)
        cursor = await conn.execute(
            f"SELECT * FROM movement_items WHERE movement_id IN ({placeholders}) "
            "ORDER BY rowid",
            movement_ids,
        )
        grouped: dict[str, list[MovementItem]] = {}
        for row in await cursor.fetchall():
            grouped.setdefault(row["movement_id"], []).append(
                MovementItem(
                    id=row["id"],
                    movement_id=row["movement_id"],
                    product_id=row["product_id"],
                    quantity=int(row["quantity"]),
                    cost=float(row["cost"]),
                    price=float(row["price"]),
                    notes=row["notes"],
                )
            )
        return grouped

    @staticmethod
    def _row_to_movement(
        row: aiosqlite.Row, items: list[MovementItem]
    ) -> InventoryMovement:
        """Convert a database row to an InventoryMovement entity."""
        try:
            movement_date = datetime.fromisoformat(row["date"])
            created_at = datetime.fromisoformat(row["created_at"])
        except (ValueError, TypeError) as e:
            raise DatabaseError("read_movement", f"bad timestamp on {row['id']}: {e}") from e

        if movement_date.tzinfo is None:
            movement_date = movement_date.replace(tzinfo=UTC)
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)

        return InventoryMovement(
            id=row["id"],
            route=route_from_columns(
                MovementType(row["type"]),
                row["warehouse_from_id"],
                row["warehouse_to_id"],
            ),
            user_id=row["user_id"],
            date=movement_date,
            notes=row["notes"],
            reference=row["reference"],
            created_at=created_at,
            items=items,
        )

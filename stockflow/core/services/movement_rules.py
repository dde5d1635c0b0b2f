"""
Structural rules for inventory movements.

Pure functions: no storage access. They turn a flat movement request into
a tagged route, check line items, and compute the ledger deltas a valid
movement produces.
"""

from datetime import datetime
from uuid import uuid4

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
from stockflow.core.entities.stock import StockDelta
from stockflow.core.exceptions import ValidationError


def build_route(
    movement_type: MovementType,
    warehouse_from_id: str | None,
    warehouse_to_id: str | None,
) -> MovementRoute:
    """
    Check the warehouse combination for a movement type.

    IN needs only a destination, OUT only a source, TRANSFER both (and they
    must differ), ADJUSTMENT exactly one of the two.

    Raises:
        ValidationError: On a missing, extra or repeated warehouse
    """
    src = warehouse_from_id or None
    dst = warehouse_to_id or None

    if movement_type == MovementType.IN:
        if dst is None:
            raise ValidationError("warehouse_to_id", "IN requires a destination warehouse")
        if src is not None:
            raise ValidationError(
                "warehouse_from_id", "IN must not have a source warehouse", src
            )
        return InboundRoute(warehouse_to_id=dst)

    if movement_type == MovementType.OUT:
        if src is None:
            raise ValidationError("warehouse_from_id", "OUT requires a source warehouse")
        if dst is not None:
            raise ValidationError(
                "warehouse_to_id", "OUT must not have a destination warehouse", dst
            )
        return OutboundRoute(warehouse_from_id=src)

    if movement_type == MovementType.TRANSFER:
        if src is None:
            raise ValidationError("warehouse_from_id", "TRANSFER requires a source warehouse")
        if dst is None:
            raise ValidationError(
                "warehouse_to_id", "TRANSFER requires a destination warehouse"
            )
        if src == dst:
            raise ValidationError(
                "warehouse_to_id",
                "source and destination warehouses must differ",
                dst,
            )
        return TransferRoute(warehouse_from_id=src, warehouse_to_id=dst)

    if movement_type == MovementType.ADJUSTMENT:
        if (src is None) == (dst is None):
            raise ValidationError(
                "warehouse_id",
                "ADJUSTMENT requires exactly one warehouse",
                f"from={src} to={dst}",
            )
        if src is not None:
            return AdjustmentRoute(warehouse_id=src, side="from")
        return AdjustmentRoute(warehouse_id=dst, side="to")

    raise ValidationError("type", "unknown movement type", movement_type)


def validate_items(movement_type: MovementType, items: list[MovementItem]) -> None:
    """
    Check line items for a movement type.

    Raises:
        ValidationError: On an empty list, a missing product, a quantity of
            the wrong sign, or a negative cost/price
    """
    if not items:
        raise ValidationError("items", "a movement needs at least one item")

    for index, item in enumerate(items):
        field = f"items[{index}]"
        if not item.product_id:
            raise ValidationError(f"{field}.product_id", "product is required")
        if movement_type == MovementType.ADJUSTMENT:
            if item.quantity == 0:
                raise ValidationError(
                    f"{field}.quantity", "adjustment quantity cannot be zero", item.quantity
                )
        elif item.quantity <= 0:
            raise ValidationError(
                f"{field}.quantity", "quantity must be positive", item.quantity
            )
        if item.cost < 0:
            raise ValidationError(f"{field}.cost", "cost cannot be negative", item.cost)
        if item.price < 0:
            raise ValidationError(f"{field}.price", "price cannot be negative", item.price)


def build_movement(
    movement_type: MovementType | str,
    user_id: str,
    items: list[MovementItem],
    warehouse_from_id: str | None = None,
    warehouse_to_id: str | None = None,
    notes: str | None = None,
    reference: str | None = None,
    date: datetime | None = None,
) -> InventoryMovement:
    """Validate a flat movement request and build the movement entity."""
    try:
        movement_type = MovementType(movement_type)
    except ValueError:
        raise ValidationError(
            "type", "must be one of IN, OUT, TRANSFER, ADJUSTMENT", movement_type
        ) from None

    if not user_id:
        raise ValidationError("user_id", "authorizing user is required")

    route = build_route(movement_type, warehouse_from_id, warehouse_to_id)
    validate_items(movement_type, items)

    movement = InventoryMovement(
        route=route,
        user_id=user_id,
        notes=notes,
        reference=reference,
        items=[_fresh_line(item) for item in items],
    )
    if date is not None:
        movement.date = date
    return movement


def _fresh_line(item: MovementItem, **changes) -> MovementItem:
    """Copy of a caller line with its own id, not yet bound to a movement."""
    return item.model_copy(update={"id": uuid4().hex, "movement_id": None, **changes})


def compute_deltas(movement: InventoryMovement) -> list[StockDelta]:
    """
    Ledger deltas for a movement, one per item (two for TRANSFER).

    IN adds at the destination, OUT removes at the source, TRANSFER does
    both, ADJUSTMENT applies the signed item quantity at its warehouse.
    """
    route = movement.route
    deltas: list[StockDelta] = []
    for item in movement.items:
        if isinstance(route, InboundRoute):
            deltas.append(_delta(item, route.warehouse_to_id, item.quantity))
        elif isinstance(route, OutboundRoute):
            deltas.append(_delta(item, route.warehouse_from_id, -item.quantity))
        elif isinstance(route, TransferRoute):
            deltas.append(_delta(item, route.warehouse_from_id, -item.quantity))
            deltas.append(_delta(item, route.warehouse_to_id, item.quantity))
        else:
            deltas.append(_delta(item, route.warehouse_id, item.quantity))
    return deltas


def _delta(item: MovementItem, warehouse_id: str, delta: int) -> StockDelta:
    return StockDelta(product_id=item.product_id, warehouse_id=warehouse_id, delta=delta)


def warehouses_of(movement: InventoryMovement) -> list[str]:
    """Warehouse ids referenced by a movement's route."""
    ids = [movement.warehouse_from_id, movement.warehouse_to_id]
    return [w for w in dict.fromkeys(ids) if w]


def compensating_movement(
    movement: InventoryMovement, user_id: str, notes: str | None = None
) -> InventoryMovement:
    """
    Build the movement that reverses a committed one.

    IN becomes OUT, OUT becomes IN, TRANSFER swaps its warehouses and
    ADJUSTMENT flips the sign of every line.
    """
    route = movement.route
    new_route: MovementRoute
    if isinstance(route, InboundRoute):
        new_route = OutboundRoute(warehouse_from_id=route.warehouse_to_id)
    elif isinstance(route, OutboundRoute):
        new_route = InboundRoute(warehouse_to_id=route.warehouse_from_id)
    elif isinstance(route, TransferRoute):
        new_route = TransferRoute(
            warehouse_from_id=route.warehouse_to_id,
            warehouse_to_id=route.warehouse_from_id,
        )
    else:
        new_route = route

    flip = -1 if isinstance(route, AdjustmentRoute) else 1
    items = [_fresh_line(item, quantity=item.quantity * flip) for item in movement.items]
    return InventoryMovement(
        route=new_route,
        user_id=user_id,
        notes=notes or f"Reversal of movement {movement.id}",
        reference=movement.id,
        items=items,
    )

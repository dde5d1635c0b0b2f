"""Inventory movement entities.

A movement's warehouse references are a tagged route per movement type,
so an IN with a source warehouse or a TRANSFER without a destination
cannot be constructed. Storage and wire formats still use the flat
``warehouse_from_id`` / ``warehouse_to_id`` pair, exposed as properties.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class MovementType(str, Enum):
    """Wire-level movement type tokens."""

    IN = "IN"
    OUT = "OUT"
    TRANSFER = "TRANSFER"
    ADJUSTMENT = "ADJUSTMENT"


class InboundRoute(BaseModel):
    """Stock enters a warehouse."""

    model_config = ConfigDict(frozen=True)

    type: Literal[MovementType.IN] = MovementType.IN
    warehouse_to_id: str


class OutboundRoute(BaseModel):
    """Stock leaves a warehouse."""

    model_config = ConfigDict(frozen=True)

    type: Literal[MovementType.OUT] = MovementType.OUT
    warehouse_from_id: str


class TransferRoute(BaseModel):
    """Stock moves between two different warehouses."""

    model_config = ConfigDict(frozen=True)

    type: Literal[MovementType.TRANSFER] = MovementType.TRANSFER
    warehouse_from_id: str
    warehouse_to_id: str


class AdjustmentRoute(BaseModel):
    """Signed correction at a single warehouse.

    ``side`` is the flat column the warehouse was given in.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal[MovementType.ADJUSTMENT] = MovementType.ADJUSTMENT
    warehouse_id: str
    side: Literal["from", "to"] = "to"


MovementRoute = Annotated[
    InboundRoute | OutboundRoute | TransferRoute | AdjustmentRoute,
    Field(discriminator="type"),
]


class MovementItem(BaseModel):
    """A movement line.

    ``quantity`` is positive for IN, OUT and TRANSFER; ADJUSTMENT lines are
    signed (negative removes stock).
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    movement_id: str | None = None
    product_id: str
    quantity: int
    cost: float = 0.0
    price: float = 0.0
    notes: str | None = None

    @property
    def total_cost(self) -> float:
        return abs(self.quantity) * self.cost

    @property
    def total_price(self) -> float:
        return abs(self.quantity) * self.price


class InventoryMovement(BaseModel):
    """Movement header with its line items."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    route: MovementRoute
    user_id: str
    date: datetime = Field(default_factory=lambda: datetime.now(UTC))
    notes: str | None = None
    reference: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    items: list[MovementItem] = Field(default_factory=list)

    @property
    def type(self) -> MovementType:
        return self.route.type

    @property
    def warehouse_from_id(self) -> str | None:
        if isinstance(self.route, OutboundRoute | TransferRoute):
            return self.route.warehouse_from_id
        if isinstance(self.route, AdjustmentRoute) and self.route.side == "from":
            return self.route.warehouse_id
        return None

    @property
    def warehouse_to_id(self) -> str | None:
        if isinstance(self.route, InboundRoute | TransferRoute):
            return self.route.warehouse_to_id
        if isinstance(self.route, AdjustmentRoute) and self.route.side == "to":
            return self.route.warehouse_id
        return None

    @property
    def total_cost(self) -> float:
        return sum(item.total_cost for item in self.items)

    def to_snapshot(self) -> dict[str, Any]:
        """Flat wire representation used for replication."""
        return {
            "id": self.id,
            "type": self.type.value,
            "date": self.date.isoformat(),
            "user_id": self.user_id,
            "warehouse_from_id": self.warehouse_from_id,
            "warehouse_to_id": self.warehouse_to_id,
            "notes": self.notes,
            "reference": self.reference,
            "created_at": self.created_at.isoformat(),
            "items": [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "cost": item.cost,
                    "price": item.price,
                    "notes": item.notes,
                }
                for item in self.items
            ],
        }

"""Request DTOs.

Pydantic v2 models for incoming movement requests. These are the ONLY
contracts between callers (CLI, API handlers) and use cases.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class MovementItemRequest(BaseModel):
    """One line of a movement request."""

    product_id: str = Field(..., description="Product ID")
    quantity: int = Field(
        ...,
        description="Units moved; signed for ADJUSTMENT, positive otherwise",
    )
    cost: float = Field(default=0.0, description="Unit cost")
    price: float = Field(default=0.0, description="Unit price")
    notes: str | None = Field(default=None, description="Line notes")


class CreateMovementRequest(BaseModel):
    """Flat movement request as received on the wire.

    Type and warehouse combination are checked by the movement rules, not
    here, so the caller gets a field-level ValidationError either way.
    """

    type: str = Field(..., description="IN, OUT, TRANSFER or ADJUSTMENT", examples=["IN"])
    user_id: str = Field(..., description="Authorizing user")
    warehouse_from_id: str | None = Field(default=None, description="Source warehouse")
    warehouse_to_id: str | None = Field(default=None, description="Destination warehouse")
    notes: str | None = Field(default=None, description="Free-form notes")
    reference: str | None = Field(
        default=None, description="External reference (PO, invoice, ticket)"
    )
    date: datetime | None = Field(
        default=None, description="Business date (defaults to now)"
    )
    items: list[MovementItemRequest] = Field(default_factory=list)


class ReverseMovementRequest(BaseModel):
    """Request to undo a committed movement."""

    movement_id: str = Field(..., description="Movement to reverse")
    user_id: str = Field(..., description="Authorizing user")
    notes: str | None = Field(default=None, description="Reason for the reversal")


class StockReportRequest(BaseModel):
    """Filters for a stock report."""

    warehouse_id: str | None = Field(default=None, description="Limit to one warehouse")
    product_id: str | None = Field(default=None, description="Limit to one product")
    limit: int = Field(default=100, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)

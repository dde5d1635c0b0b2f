"""Response DTOs.

Pydantic v2 models for serializing use case results. These are the ONLY
contracts between use cases and callers.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class MovementItemResponse(BaseModel):
    """Movement line response DTO."""

    id: str
    product_id: str
    quantity: int
    cost: float
    price: float
    total_cost: float
    total_price: float
    notes: str | None = None


class StockChangeResponse(BaseModel):
    """Ledger row touched by a movement."""

    stock_id: str
    product_id: str
    warehouse_id: str
    previous_quantity: int
    quantity: int
    created: bool = False


class MovementResponse(BaseModel):
    """Movement response DTO."""

    id: str
    type: str
    user_id: str
    warehouse_from_id: str | None = None
    warehouse_to_id: str | None = None
    date: datetime
    notes: str | None = None
    reference: str | None = None
    total_cost: float
    items: list[MovementItemResponse] = Field(default_factory=list)
    stock_changes: list[StockChangeResponse] = Field(default_factory=list)
    attempts: int = 1


class StockLevelResponse(BaseModel):
    """Stock level response DTO."""

    product_id: str
    product_code: str
    product_name: str
    warehouse_id: str
    warehouse_name: str
    quantity: int
    status: str
    value: float


class LowStockResponse(BaseModel):
    """Product below its minimum across all warehouses."""

    product_id: str
    product_code: str
    product_name: str
    total_quantity: int
    min_stock: int
    shortfall: int
    status: str


class StockReportResponse(BaseModel):
    """Stock levels, low stock and valuation."""

    levels: list[StockLevelResponse] = Field(default_factory=list)
    low_stock: list[LowStockResponse] = Field(default_factory=list)
    total_value: float = 0.0
    pending_sync: int = 0


class SyncRunResponse(BaseModel):
    """Sync run response DTO."""

    id: int | None = None
    provider: str
    status: str
    started_at: datetime
    completed_at: datetime | None = None
    duration_seconds: float | None = None
    items_count: int = 0
    pending_count: int = 0
    batches: int = 0
    cancelled: bool = False
    error_message: str | None = None
    backup_path: str | None = None


class ErrorResponse(BaseModel):
    """Error response DTO."""

    error: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable message")
    details: dict = Field(default_factory=dict)

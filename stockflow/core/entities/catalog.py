"""Catalog entities referenced (never mutated) by the ledger."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class ProductStatus(str, Enum):
    """Product lifecycle status."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    DISCONTINUED = "DISCONTINUED"


class Product(BaseModel):
    """A stockable product."""

    id: str
    code: str
    name: str
    unit: str = "unit"
    cost: float = 0.0
    price: float = 0.0
    min_stock: int = 0
    max_stock: int | None = None
    status: ProductStatus = ProductStatus.ACTIVE
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE


class Warehouse(BaseModel):
    """A stock location owned by exactly one company."""

    id: str
    company_id: str
    name: str
    location: str | None = None

"""Data Transfer Objects.

Request DTOs: Validate and parse incoming requests.
Response DTOs: Structure and serialize results.
"""

from stockflow.application.dto.requests import (
    CreateMovementRequest,
    MovementItemRequest,
    ReverseMovementRequest,
    StockReportRequest,
)
from stockflow.application.dto.responses import (
    ErrorResponse,
    LowStockResponse,
    MovementItemResponse,
    MovementResponse,
    StockChangeResponse,
    StockLevelResponse,
    StockReportResponse,
    SyncRunResponse,
)

__all__ = [
    # Requests
    "CreateMovementRequest",
    "MovementItemRequest",
    "ReverseMovementRequest",
    "StockReportRequest",
    # Responses
    "ErrorResponse",
    "LowStockResponse",
    "MovementItemResponse",
    "MovementResponse",
    "StockChangeResponse",
    "StockLevelResponse",
    "StockReportResponse",
    "SyncRunResponse",
]

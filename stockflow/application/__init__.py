"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for caller contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection
"""

from stockflow.application.dto.requests import (
    CreateMovementRequest,
    MovementItemRequest,
    ReverseMovementRequest,
    StockReportRequest,
)
from stockflow.application.dto.responses import (
    ErrorResponse,
    MovementResponse,
    StockReportResponse,
    SyncRunResponse,
)
from stockflow.application.services import (
    get_audit_sink,
    get_movement_processor,
    get_stock_ledger,
    get_sync_outbox,
    get_sync_runner,
    reset_services,
)
from stockflow.application.use_cases import (
    RecordMovementUseCase,
    RunSyncUseCase,
    StockReportUseCase,
)

__all__ = [
    # Request DTOs
    "CreateMovementRequest",
    "MovementItemRequest",
    "ReverseMovementRequest",
    "StockReportRequest",
    # Response DTOs
    "ErrorResponse",
    "MovementResponse",
    "StockReportResponse",
    "SyncRunResponse",
    # Use Cases
    "RecordMovementUseCase",
    "RunSyncUseCase",
    "StockReportUseCase",
    # Service factories
    "get_audit_sink",
    "get_movement_processor",
    "get_stock_ledger",
    "get_sync_outbox",
    "get_sync_runner",
    "reset_services",
]

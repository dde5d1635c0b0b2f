"""
Domain exceptions for the stock ledger.

Business rejections (validation, insufficient stock) carry the exact
product, warehouse and quantities involved so callers can report them.
"""

from typing import Any


class StockflowError(Exception):
    """Base exception for all stockflow errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(StockflowError):
    """Movement request is structurally invalid."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class ProductNotFoundError(ValidationError):
    """Movement references a product that does not exist."""

    def __init__(self, product_id: str):
        super().__init__(
            field="product_id",
            message=f"Product not found: {product_id}",
            value=product_id,
        )
        self.code = "PRODUCT_NOT_FOUND"
        self.details["product_id"] = product_id


class WarehouseNotFoundError(ValidationError):
    """Movement references a warehouse that does not exist."""

    def __init__(self, warehouse_id: str):
        super().__init__(
            field="warehouse_id",
            message=f"Warehouse not found: {warehouse_id}",
            value=warehouse_id,
        )
        self.code = "WAREHOUSE_NOT_FOUND"
        self.details["warehouse_id"] = warehouse_id


class MovementAlreadyReversedError(ValidationError):
    """A movement already has a compensating movement."""

    def __init__(self, movement_id: str, reversal_id: str):
        super().__init__(
            field="movement_id",
            message=f"Movement {movement_id} was already reversed by {reversal_id}",
            value=movement_id,
        )
        self.code = "MOVEMENT_ALREADY_REVERSED"
        self.details["movement_id"] = movement_id
        self.details["reversal_id"] = reversal_id


# Ledger Exceptions
class InsufficientStockError(StockflowError):
    """Applying a movement would drive a stock row below zero."""

    def __init__(
        self,
        product_id: str,
        warehouse_id: str,
        requested: int,
        available: int,
    ):
        super().__init__(
            f"Insufficient stock for product {product_id} in warehouse "
            f"{warehouse_id}: requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "product_id": product_id,
                "warehouse_id": warehouse_id,
                "requested": requested,
                "available": available,
            },
        )
        self.product_id = product_id
        self.warehouse_id = warehouse_id
        self.requested = requested
        self.available = available


# Storage Exceptions
class StorageError(StockflowError):
    """Base exception for storage operations."""

    pass


class TransientStorageError(StorageError):
    """Lock contention or busy database; safe to retry."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Transient storage failure during {operation}: {error}",
            code="TRANSIENT_STORAGE_ERROR",
            details={"operation": operation, "error": error},
        )


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class MigrationError(DatabaseError):
    """A schema migration failed or an applied migration file was edited."""

    def __init__(self, version: str, error: str):
        super().__init__(f"migration v{version}", error)
        self.code = "MIGRATION_ERROR"
        self.details["version"] = version
        self.version = version


class MovementNotFoundError(StorageError):
    """Inventory movement not found in storage."""

    def __init__(self, movement_id: str):
        super().__init__(
            f"Movement not found: {movement_id}",
            code="MOVEMENT_NOT_FOUND",
            details={"movement_id": movement_id},
        )


# Sync Exceptions
class SyncError(StockflowError):
    """Base exception for outbox replication."""

    pass


class SyncProviderError(SyncError):
    """Remote provider rejected or failed a push."""

    def __init__(self, provider: str, reason: str, retryable: bool):
        super().__init__(
            f"Sync provider '{provider}' failed: {reason}",
            code="SYNC_PROVIDER_RETRYABLE" if retryable else "SYNC_PROVIDER_FATAL",
            details={"provider": provider, "reason": reason, "retryable": retryable},
        )
        self.provider = provider
        self.reason = reason
        self.retryable = retryable


class RetryableSyncError(SyncProviderError):
    """Push failed but may succeed later; the entry stays pending."""

    def __init__(self, provider: str, reason: str):
        super().__init__(provider, reason, retryable=True)


class FatalSyncError(SyncProviderError):
    """Push failed permanently; the run stops."""

    def __init__(self, provider: str, reason: str):
        super().__init__(provider, reason, retryable=False)


class SyncAlreadyRunningError(SyncError):
    """A run is already in progress on this runner."""

    def __init__(self, provider: str):
        super().__init__(
            f"Sync already in progress for provider: {provider}",
            code="SYNC_ALREADY_RUNNING",
            details={"provider": provider},
        )


class SyncProviderNotFoundError(SyncError):
    """No provider is registered under the requested name."""

    def __init__(self, provider: str):
        super().__init__(
            f"Sync provider not found: {provider}",
            code="SYNC_PROVIDER_NOT_FOUND",
            details={"provider": provider},
        )

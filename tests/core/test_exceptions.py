"""Tests for the exception hierarchy."""

from stockflow.core.exceptions import (
    FatalSyncError,
    DatabaseError,
    InsufficientStockError,
    MigrationError,
    MovementAlreadyReversedError,
    ProductNotFoundError,
    RetryableSyncError,
    StockflowError,
    SyncAlreadyRunningError,
    SyncError,
    SyncProviderError,
    TransientStorageError,
    ValidationError,
    WarehouseNotFoundError,
)


class TestValidationErrors:
    def test_validation_error_details(self):
        """ValidationError carries field, message and truncated value."""
        err = ValidationError("items[0].quantity", "quantity must be positive", -3)
        assert err.code == "VALIDATION_ERROR"
        assert err.details == {
            "field": "items[0].quantity",
            "message": "quantity must be positive",
            "value": "-3",
        }
        assert "items[0].quantity" in str(err)

    def test_value_truncated(self):
        err = ValidationError("notes", "too long", "x" * 500)
        assert len(err.details["value"]) == 100

    def test_not_found_errors_are_validation_errors(self):
        """Unknown references are structural rejections."""
        product = ProductNotFoundError("P9")
        warehouse = WarehouseNotFoundError("W9")
        assert isinstance(product, ValidationError)
        assert isinstance(warehouse, ValidationError)
        assert product.code == "PRODUCT_NOT_FOUND"
        assert product.details["product_id"] == "P9"
        assert warehouse.code == "WAREHOUSE_NOT_FOUND"
        assert warehouse.details["warehouse_id"] == "W9"

    def test_already_reversed_names_both_movements(self):
        err = MovementAlreadyReversedError("M1", "M2")
        assert isinstance(err, ValidationError)
        assert err.code == "MOVEMENT_ALREADY_REVERSED"
        assert err.details["movement_id"] == "M1"
        assert err.details["reversal_id"] == "M2"
        assert err.details["field"] == "movement_id"


class TestInsufficientStockError:
    def test_exposes_quantities(self):
        err = InsufficientStockError("P1", "W1", requested=7, available=4)
        assert err.product_id == "P1"
        assert err.warehouse_id == "W1"
        assert err.requested == 7
        assert err.available == 4
        assert not isinstance(err, ValidationError)

    def test_to_dict(self):
        err = InsufficientStockError("P1", "W1", requested=7, available=4)
        payload = err.to_dict()
        assert payload["error"] == "INSUFFICIENT_STOCK"
        assert payload["details"]["requested"] == 7
        assert "requested 7, available 4" in payload["message"]


class TestSyncErrors:
    def test_retryable_and_fatal(self):
        retryable = RetryableSyncError("http", "HTTP 503")
        fatal = FatalSyncError("http", "HTTP 400")
        assert isinstance(retryable, SyncProviderError)
        assert retryable.retryable is True
        assert fatal.retryable is False
        assert retryable.code == "SYNC_PROVIDER_RETRYABLE"
        assert fatal.code == "SYNC_PROVIDER_FATAL"
        assert fatal.reason == "HTTP 400"

    def test_already_running(self):
        err = SyncAlreadyRunningError("http")
        assert isinstance(err, SyncError)
        assert err.details == {"provider": "http"}

    def test_all_rooted_at_stockflow_error(self):
        for err in (
            TransientStorageError("begin", "database is locked"),
            FatalSyncError("file", "bad json"),
            ValidationError("type", "bad"),
        ):
            assert isinstance(err, StockflowError)


class TestStorageErrors:
    def test_migration_error(self):
        err = MigrationError("002", "near THIS: syntax error")
        assert isinstance(err, DatabaseError)
        assert err.code == "MIGRATION_ERROR"
        assert err.version == "002"
        assert err.details["operation"] == "migration v002"
        assert err.details["version"] == "002"

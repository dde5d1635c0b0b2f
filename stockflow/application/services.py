"""
Service factory functions for dependency injection.

This module wires the SQLite stores, the configured sync provider and the
audit sink into the core services. Use cases import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from stockflow.config import Settings, get_settings
from stockflow.core.services import MovementProcessor, SyncRunner

if TYPE_CHECKING:
    from stockflow.core.interfaces import (
        IAuditSink,
        IStockLedger,
        ISyncOutbox,
        ISyncProvider,
    )
    from stockflow.infrastructure.storage.sqlite import ConnectionPool


# Singleton service instances
_movement_processor: MovementProcessor | None = None
_sync_runner: SyncRunner | None = None


async def _resolve_pool(pool: "ConnectionPool | None") -> "ConnectionPool":
    if pool is not None:
        return pool
    from stockflow.infrastructure.storage.sqlite import get_pool

    return await get_pool()


async def get_stock_ledger(pool: "ConnectionPool | None" = None) -> "IStockLedger":
    """Ledger over the given pool, or over the global pool."""
    from stockflow.infrastructure.storage.sqlite import SQLiteStockLedger

    return SQLiteStockLedger(await _resolve_pool(pool))


async def get_sync_outbox(pool: "ConnectionPool | None" = None) -> "ISyncOutbox":
    """Outbox over the given pool, or over the global pool."""
    from stockflow.infrastructure.storage.sqlite import SQLiteSyncOutbox

    return SQLiteSyncOutbox(await _resolve_pool(pool))


def get_audit_sink() -> "IAuditSink":
    """Audit sink used by the core services."""
    from stockflow.infrastructure.audit import LoggingAuditSink

    return LoggingAuditSink()


async def get_movement_processor(
    pool: "ConnectionPool | None" = None,
    audit_sink: "IAuditSink | None" = None,
    settings: Settings | None = None,
) -> MovementProcessor:
    """
    Get or create MovementProcessor instance.

    A processor built for an explicit pool is not cached.

    Args:
        pool: Optional connection pool override
        audit_sink: Optional audit sink override
        settings: Optional settings override

    Returns:
        Configured MovementProcessor
    """
    global _movement_processor

    if _movement_processor is not None and pool is None:
        return _movement_processor

    # Lazy import infrastructure
    from stockflow.infrastructure.storage.sqlite import (
        SQLiteCatalogReader,
        SQLiteMovementStore,
        SQLiteStockLedger,
        SQLiteSyncOutbox,
        SQLiteUnitOfWork,
    )

    settings = settings or get_settings()
    db_pool = await _resolve_pool(pool)

    processor = MovementProcessor(
        unit_of_work=SQLiteUnitOfWork(db_pool),
        ledger=SQLiteStockLedger(db_pool),
        movement_store=SQLiteMovementStore(db_pool),
        outbox=SQLiteSyncOutbox(db_pool),
        catalog=SQLiteCatalogReader(db_pool),
        audit_sink=audit_sink or get_audit_sink(),
        max_retries=settings.ledger.max_retries,
        retry_delay=settings.ledger.retry_delay,
        retry_multiplier=settings.ledger.retry_multiplier,
    )

    if pool is None:
        _movement_processor = processor

    return processor


async def get_sync_runner(
    pool: "ConnectionPool | None" = None,
    provider: "ISyncProvider | None" = None,
    audit_sink: "IAuditSink | None" = None,
    settings: Settings | None = None,
) -> SyncRunner:
    """
    Get or create SyncRunner instance.

    The provider comes from ``settings.sync.provider`` unless given. With
    ``backup_before_sync`` on, every run snapshots the database first.

    Args:
        pool: Optional connection pool override
        provider: Optional sync provider override
        audit_sink: Optional audit sink override
        settings: Optional settings override

    Returns:
        Configured SyncRunner
    """
    global _sync_runner

    if _sync_runner is not None and pool is None and provider is None:
        return _sync_runner

    # Lazy import infrastructure
    from stockflow.infrastructure.storage.sqlite import (
        SQLiteSnapshotter,
        SQLiteSyncLogStore,
        SQLiteSyncOutbox,
    )
    from stockflow.infrastructure.sync import get_sync_provider

    settings = settings or get_settings()
    sync = settings.sync
    db_pool = await _resolve_pool(pool)

    backup_hook = None
    if sync.backup_before_sync:
        snapshotter = SQLiteSnapshotter(db_pool, sync.backup_dir, keep=sync.backup_keep)
        backup_hook = snapshotter.snapshot

    runner = SyncRunner(
        outbox=SQLiteSyncOutbox(db_pool),
        log_store=SQLiteSyncLogStore(db_pool),
        provider=provider or get_sync_provider(settings),
        audit_sink=audit_sink or get_audit_sink(),
        backup_hook=backup_hook,
        batch_size=sync.batch_size,
        max_batches=sync.max_batches,
        push_timeout=sync.push_timeout,
        collapse_snapshots=sync.collapse_snapshots,
    )

    if pool is None and provider is None:
        _sync_runner = runner

    return runner


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _movement_processor, _sync_runner
    _movement_processor = None
    _sync_runner = None

"""Core interfaces (ports) for dependency injection."""

from stockflow.core.interfaces.audit_sink import IAuditSink
from stockflow.core.interfaces.catalog_reader import ICatalogReader
from stockflow.core.interfaces.movement_store import IMovementStore
from stockflow.core.interfaces.stock_ledger import IStockLedger
from stockflow.core.interfaces.sync_provider import ISyncProvider
from stockflow.core.interfaces.sync_store import ISyncLogStore, ISyncOutbox
from stockflow.core.interfaces.unit_of_work import IUnitOfWork, Transaction

__all__ = [
    "IAuditSink",
    "ICatalogReader",
    "IMovementStore",
    "IStockLedger",
    "ISyncLogStore",
    "ISyncOutbox",
    "ISyncProvider",
    "IUnitOfWork",
    "Transaction",
]

"""Remote sync provider implementations."""

from stockflow.infrastructure.sync.factory import get_sync_provider
from stockflow.infrastructure.sync.file_provider import FileExportSyncProvider
from stockflow.infrastructure.sync.http_provider import HttpSyncProvider

__all__ = [
    "FileExportSyncProvider",
    "HttpSyncProvider",
    "get_sync_provider",
]

"""Build the configured sync provider."""

from stockflow.config import Settings, get_settings
from stockflow.core.exceptions import SyncProviderNotFoundError
from stockflow.core.interfaces import ISyncProvider
from stockflow.infrastructure.sync.file_provider import FileExportSyncProvider
from stockflow.infrastructure.sync.http_provider import HttpSyncProvider


def get_sync_provider(settings: Settings | None = None) -> ISyncProvider:
    """
    Create the provider named by ``settings.sync.provider``.

    Raises:
        SyncProviderNotFoundError: For an unknown provider kind
    """
    settings = settings or get_settings()
    sync = settings.sync

    if sync.provider == "http":
        return HttpSyncProvider(
            base_url=sync.http_base_url,
            token=sync.http_token,
            name=sync.provider_name,
            timeout=sync.push_timeout,
        )
    if sync.provider == "file":
        return FileExportSyncProvider(export_path=sync.export_path, name=sync.provider_name)

    raise SyncProviderNotFoundError(sync.provider)

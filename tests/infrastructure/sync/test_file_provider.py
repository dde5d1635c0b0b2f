"""Tests for FileExportSyncProvider and the provider factory."""

from pathlib import Path

import pytest

from stockflow.config import get_settings, reset_settings
from stockflow.core.entities import SyncOperation
from stockflow.core.exceptions import FatalSyncError, RetryableSyncError
from stockflow.infrastructure.sync import (
    FileExportSyncProvider,
    HttpSyncProvider,
    get_sync_provider,
)


class TestFileExportSyncProvider:
    async def test_appends_json_lines(self, tmp_path: Path):
        provider = FileExportSyncProvider(tmp_path / "out" / "outbox.jsonl", name="usb")

        await provider.push("Stock", "s1", SyncOperation.CREATE, '{"quantity": 10}')
        await provider.push("InventoryMovement", "m1", SyncOperation.CREATE, '{"type": "IN"}')

        exported = provider.read_exported()
        assert [(e["entity_type"], e["entity_id"]) for e in exported] == [
            ("Stock", "s1"),
            ("InventoryMovement", "m1"),
        ]
        assert exported[0]["operation"] == "create"
        assert exported[0]["data"] == {"quantity": 10}
        assert provider.name == "usb"

    async def test_invalid_snapshot_is_fatal(self, tmp_path: Path):
        provider = FileExportSyncProvider(tmp_path / "outbox.jsonl")
        with pytest.raises(FatalSyncError):
            await provider.push("Stock", "s1", SyncOperation.UPDATE, "not json")

    async def test_unwritable_target_is_retryable(self, tmp_path: Path):
        # A directory where the export file should be
        target = tmp_path / "outbox.jsonl"
        target.mkdir()
        provider = FileExportSyncProvider(target)
        with pytest.raises(RetryableSyncError):
            await provider.push("Stock", "s1", SyncOperation.UPDATE, "{}")

    def test_read_exported_missing_file(self, tmp_path: Path):
        assert FileExportSyncProvider(tmp_path / "none.jsonl").read_exported() == []


class TestGetSyncProvider:
    def test_file_is_default(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("SYNC_EXPORT_PATH", str(tmp_path / "x.jsonl"))
        monkeypatch.setenv("SYNC_PROVIDER_NAME", "offline")
        reset_settings()
        provider = get_sync_provider()
        assert isinstance(provider, FileExportSyncProvider)
        assert provider.export_path == tmp_path / "x.jsonl"
        assert provider.name == "offline"

    async def test_http_from_settings(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SYNC_PROVIDER", "http")
        monkeypatch.setenv("SYNC_HTTP_BASE_URL", "https://remote.test/api/")
        reset_settings()
        provider = get_sync_provider(get_settings())
        assert isinstance(provider, HttpSyncProvider)
        assert provider.base_url == "https://remote.test/api"
        await provider.close()

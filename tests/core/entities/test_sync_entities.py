"""Tests for outbox and sync log entities."""

from datetime import UTC, datetime, timedelta

from stockflow.core.entities import (
    SyncLogEntry,
    SyncOperation,
    SyncQueueEntry,
    SyncRunReport,
    SyncRunStatus,
)


class TestSyncQueueEntry:
    def test_pending_until_synced(self):
        entry = SyncQueueEntry(
            id=1,
            entity_type="Stock",
            entity_id="s1",
            operation=SyncOperation.UPDATE,
            data="{}",
        )
        assert entry.is_pending
        entry.synced_at = datetime.now(UTC)
        assert not entry.is_pending

    def test_dedup_key(self):
        entry = SyncQueueEntry(
            entity_type="Stock", entity_id="s1", operation=SyncOperation.CREATE, data="{}"
        )
        assert entry.dedup_key == ("Stock", "s1", "create")


class TestSyncLogEntry:
    def test_defaults_to_running(self):
        log = SyncLogEntry(provider="file")
        assert log.status == SyncRunStatus.RUNNING
        assert log.items_count == 0
        assert log.duration_seconds is None

    def test_duration(self):
        started = datetime(2024, 1, 1, tzinfo=UTC)
        log = SyncLogEntry(
            provider="file",
            started_at=started,
            completed_at=started + timedelta(seconds=3),
        )
        assert log.duration_seconds == 3.0

    def test_report_status_follows_log(self):
        report = SyncRunReport(log=SyncLogEntry(provider="file", status=SyncRunStatus.PARTIAL))
        assert report.status == SyncRunStatus.PARTIAL

"""Tests for RunSyncUseCase."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

from stockflow.application.use_cases import RunSyncUseCase
from stockflow.core.entities import SyncLogEntry, SyncRunReport, SyncRunStatus


def _report() -> SyncRunReport:
    started = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
    log = SyncLogEntry(
        id=9,
        provider="remote",
        status=SyncRunStatus.PARTIAL,
        started_at=started,
        completed_at=started + timedelta(seconds=3),
        items_count=5,
        error_message=None,
    )
    return SyncRunReport(log=log, synced_ids=[1, 2, 3, 4, 5], pending_ids=[6, 7], batches=1)


class TestRunSyncUseCase:
    async def test_execute_runs_once(self):
        runner = MagicMock()
        runner.provider_name = "remote"
        runner.run = AsyncMock(return_value=_report())

        report = await RunSyncUseCase(runner).execute()

        runner.run.assert_awaited_once()
        assert report.log.id == 9

    def test_to_response(self):
        response = RunSyncUseCase(MagicMock()).to_response(_report())

        assert response.id == 9
        assert response.status == "PARTIAL"
        assert response.items_count == 5
        assert response.pending_count == 2
        assert response.duration_seconds == 3.0
        assert response.cancelled is False

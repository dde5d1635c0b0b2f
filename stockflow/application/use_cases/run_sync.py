"""
Run Sync Use Case.

One on-demand drain of the outbox.
"""

from stockflow.application.dto.responses import SyncRunResponse
from stockflow.config import get_logger
from stockflow.core.entities.sync import SyncRunReport
from stockflow.core.services import SyncRunner

logger = get_logger(__name__)


class RunSyncUseCase:
    """Run the sync runner once and summarize the outcome."""

    def __init__(self, runner: SyncRunner | None = None):
        self._runner = runner

    async def _get_runner(self) -> SyncRunner:
        if self._runner is None:
            from stockflow.application.services import get_sync_runner

            self._runner = await get_sync_runner()
        return self._runner

    async def execute(self) -> SyncRunReport:
        """
        Execute one sync run.

        Raises:
            SyncAlreadyRunningError: If the runner is already draining
        """
        runner = await self._get_runner()
        logger.info("run_sync_requested", provider=runner.provider_name)
        return await runner.run()

    def to_response(self, report: SyncRunReport) -> SyncRunResponse:
        """Convert report to response DTO."""
        log = report.log
        return SyncRunResponse(
            id=log.id,
            provider=log.provider,
            status=log.status.value,
            started_at=log.started_at,
            completed_at=log.completed_at,
            duration_seconds=log.duration_seconds,
            items_count=log.items_count,
            pending_count=len(report.pending_ids),
            batches=report.batches,
            cancelled=report.cancelled,
            error_message=log.error_message,
            backup_path=log.backup_path,
        )

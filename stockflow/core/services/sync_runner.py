"""
Sync runner.

Drains the outbox to a remote provider in FIFO batches and records one
sync log row per run: STARTED -> SUCCEEDED | PARTIAL | FAILED.

Delivery is at-least-once: an entry pushed successfully is marked synced
right after the push, so a crash in between resends it on the next run.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from pathlib import Path

from structlog.contextvars import bound_contextvars

from stockflow.config import get_logger
from stockflow.core.entities.audit import AuditEvent
from stockflow.core.entities.sync import (
    SyncLogEntry,
    SyncQueueEntry,
    SyncRunReport,
    SyncRunStatus,
)
from stockflow.core.exceptions import (
    FatalSyncError,
    RetryableSyncError,
    SyncAlreadyRunningError,
)
from stockflow.core.interfaces import IAuditSink, ISyncLogStore, ISyncOutbox, ISyncProvider
from stockflow.core.services.audit import emit_audit

logger = get_logger(__name__)

BackupHook = Callable[[], Awaitable[Path]]

# An outbox entry to push plus every entry id it stands for
PushUnit = tuple[SyncQueueEntry, list[int]]


def collapse_batch(batch: list[SyncQueueEntry]) -> list[PushUnit]:
    """
    Merge entries sharing (entity_type, entity_id, operation).

    Each group is represented by its newest entry and ordered by it.
    """
    groups: dict[tuple[str, str, str], list[SyncQueueEntry]] = {}
    for entry in batch:
        groups.setdefault(entry.dedup_key, []).append(entry)
    units = [(entries[-1], [e.id for e in entries]) for entries in groups.values()]
    return sorted(units, key=lambda unit: unit[0].id)


class SyncRunner:
    """
    Pushes pending outbox entries to one provider.

    Only one run per runner at a time; cross-process exclusion is the
    scheduler's job.
    """

    def __init__(
        self,
        outbox: ISyncOutbox,
        log_store: ISyncLogStore,
        provider: ISyncProvider,
        audit_sink: IAuditSink | None = None,
        backup_hook: BackupHook | None = None,
        batch_size: int = 100,
        max_batches: int | None = None,
        push_timeout: float = 10.0,
        collapse_snapshots: bool = False,
    ):
        self._outbox = outbox
        self._log_store = log_store
        self._provider = provider
        self._audit = audit_sink
        self._backup_hook = backup_hook
        self.batch_size = batch_size
        self.max_batches = max_batches
        self.push_timeout = push_timeout
        self.collapse_snapshots = collapse_snapshots

        self._lock = asyncio.Lock()
        self._cancel = asyncio.Event()

    @property
    def provider_name(self) -> str:
        return self._provider.name

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def request_cancel(self) -> None:
        """Stop the current run before its next batch."""
        self._cancel.set()

    async def close(self) -> None:
        """Release the provider's resources."""
        await self._provider.close()

    async def run(self) -> SyncRunReport:
        """
        Run one sync pass.

        Raises:
            SyncAlreadyRunningError: If a run is in progress on this runner
        """
        if self._lock.locked():
            raise SyncAlreadyRunningError(self.provider_name)

        async with self._lock:
            self._cancel.clear()
            log = await self._log_store.start_run(SyncLogEntry(provider=self.provider_name))
            report = SyncRunReport(log=log)

            with bound_contextvars(sync_run_id=log.id, provider=self.provider_name):
                logger.info("sync_run_started")
                try:
                    if self._backup_hook is not None:
                        backup = await self._backup_hook()
                        log.backup_path = str(backup)

                    error = await self._drain(report)
                    log.status = await self._final_status(report, error)
                    log.error_message = error
                except asyncio.CancelledError:
                    report.cancelled = True
                    log.status = SyncRunStatus.PARTIAL
                    log.error_message = "run cancelled"
                    await self._finish(report)
                    raise
                except Exception as e:
                    log.status = SyncRunStatus.FAILED
                    log.error_message = f"{type(e).__name__}: {e}"
                    await self._finish(report)
                    raise

                await self._finish(report)
                return report

    async def run_periodically(
        self, interval_seconds: float, stop_event: asyncio.Event
    ) -> int:
        """
        Run every ``interval_seconds`` until ``stop_event`` is set.

        A failing run is logged and the loop continues. Returns the number
        of runs started.
        """
        runs = 0
        while not stop_event.is_set():
            runs += 1
            try:
                await self.run()
            except SyncAlreadyRunningError:
                logger.info("sync_run_skipped_busy", provider=self.provider_name)
            except Exception:
                logger.exception("sync_run_crashed", provider=self.provider_name)

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
            except TimeoutError:
                pass
        return runs

    async def _drain(self, report: SyncRunReport) -> str | None:
        """Push batches until empty, cancelled, capped, or a fatal error."""
        after_id: int | None = None
        # Entities with a retryable failure this run; later changes wait too
        blocked: set[tuple[str, str]] = set()

        while True:
            if self._cancel.is_set():
                report.cancelled = True
                logger.info("sync_run_cancel_requested", batches=report.batches)
                return None
            if self.max_batches is not None and report.batches >= self.max_batches:
                return None

            batch = await self._outbox.peek_pending(self.batch_size, after_id=after_id)
            if not batch:
                return None

            report.batches += 1
            after_id = batch[-1].id
            error = await self._push_batch(batch, report, blocked)
            if error is not None:
                return error

    async def _push_batch(
        self,
        batch: list[SyncQueueEntry],
        report: SyncRunReport,
        blocked: set[tuple[str, str]],
    ) -> str | None:
        if self.collapse_snapshots:
            units = collapse_batch(batch)
        else:
            units = [(entry, [entry.id]) for entry in batch]

        for position, (entry, ids) in enumerate(units):
            entity = (entry.entity_type, entry.entity_id)
            if entity in blocked:
                report.pending_ids.extend(ids)
                continue

            try:
                await self._push(entry)
            except RetryableSyncError as e:
                blocked.add(entity)
                report.pending_ids.extend(ids)
                logger.warning(
                    "sync_push_retryable",
                    entry_id=entry.id,
                    entity_type=entry.entity_type,
                    entity_id=entry.entity_id,
                    reason=e.reason,
                )
                continue
            except FatalSyncError as e:
                for _, rest in units[position:]:
                    report.pending_ids.extend(rest)
                logger.error(
                    "sync_push_fatal",
                    entry_id=entry.id,
                    entity_type=entry.entity_type,
                    entity_id=entry.entity_id,
                    reason=e.reason,
                )
                return e.message

            await self._outbox.mark_synced(ids)
            report.synced_ids.extend(ids)
            report.log.items_count += len(ids)

        return None

    async def _push(self, entry: SyncQueueEntry) -> None:
        """Push one entry, mapping timeouts and unexpected errors."""
        try:
            await asyncio.wait_for(
                self._provider.push(
                    entry.entity_type,
                    entry.entity_id,
                    entry.operation,
                    entry.data,
                ),
                timeout=self.push_timeout,
            )
        except TimeoutError as e:
            raise RetryableSyncError(
                self.provider_name, f"push timed out after {self.push_timeout}s"
            ) from e
        except (RetryableSyncError, FatalSyncError):
            raise
        except Exception as e:
            raise FatalSyncError(self.provider_name, f"{type(e).__name__}: {e}") from e

    async def _final_status(self, report: SyncRunReport, error: str | None) -> SyncRunStatus:
        if error is not None:
            return SyncRunStatus.FAILED
        if report.cancelled or report.pending_ids:
            return SyncRunStatus.PARTIAL
        if self.max_batches is not None and report.batches >= self.max_batches:
            # Capped: anything left beyond the last batch makes this partial
            last_id = max(report.synced_ids, default=0)
            remaining = await self._outbox.peek_pending(1, after_id=last_id)
            if remaining:
                return SyncRunStatus.PARTIAL
        return SyncRunStatus.SUCCEEDED

    async def _finish(self, report: SyncRunReport) -> None:
        log = report.log
        log.completed_at = datetime.now(UTC)
        await self._log_store.finish_run(log)

        logger.info(
            "sync_run_finished",
            status=log.status.value,
            items_count=log.items_count,
            pending=len(report.pending_ids),
            batches=report.batches,
            error=log.error_message,
        )
        await emit_audit(
            self._audit,
            AuditEvent(
                action="sync.run",
                entity_type="SyncLog",
                entity_id=str(log.id),
                details={
                    "provider": log.provider,
                    "status": log.status.value,
                    "items_count": log.items_count,
                    "error_message": log.error_message,
                    "backup_path": log.backup_path,
                },
            ),
        )

#!/usr/bin/env python3
"""
Stockflow management CLI.

Usage:
    python manage.py migrate          Apply pending schema migrations
    python manage.py status           Show applied and pending migrations
    python manage.py sync             Drain the outbox once
    python manage.py sync --watch     Drain the outbox periodically
    python manage.py stock            Print stock levels and low stock
    python manage.py pending          Count outbox entries awaiting sync
"""

import argparse
import asyncio
import signal
import sys

from pydantic import ValidationError as RequestValidationError

from stockflow.application.dto import ErrorResponse
from stockflow.config import configure_logging, get_settings
from stockflow.core.exceptions import StockflowError, ValidationError

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_PARTIAL = 2


def _print_error(error: StockflowError) -> int:
    """Print an error as a JSON ErrorResponse line."""
    print(ErrorResponse(**error.to_dict()).model_dump_json())
    return EXIT_FAILED


def _invalid_request(error: RequestValidationError) -> int:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "request"
    return _print_error(ValidationError(field, first["msg"], first.get("input")))


async def _migrate() -> int:
    from stockflow.infrastructure.storage.sqlite.migrations import initialize_database

    try:
        results = await initialize_database()
    except StockflowError as e:
        return _print_error(e)

    if not results:
        print("Database is up to date.")
    for result in results:
        print(f"  v{result.version} {result.name}: ok ({result.execution_time_ms} ms)")
    return EXIT_OK


async def _status() -> int:
    from stockflow.infrastructure.storage.sqlite.migrations import get_migration_status

    status = await get_migration_status()
    pending = ", ".join(status.pending) or "-"
    if not status.exists:
        print(f"Database not created yet. Pending: {pending}")
        return EXIT_OK
    print(f"Current version: {status.current_version}")
    print(f"Applied: {', '.join(status.applied) or '-'}")
    print(f"Pending: {pending}")
    return EXIT_OK


async def _sync(watch: bool, interval: int | None) -> int:
    from stockflow.application.services import get_sync_runner
    from stockflow.application.use_cases import RunSyncUseCase
    from stockflow.core.entities.sync import SyncRunStatus
    from stockflow.infrastructure.storage.sqlite import close_pool

    try:
        runner = await get_sync_runner()
    except StockflowError as e:
        await close_pool()
        return _print_error(e)

    try:
        if watch:
            stop_event = asyncio.Event()
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.add_signal_handler(sig, stop_event.set)
                except NotImplementedError:
                    # Windows event loops have no signal handlers
                    pass

            seconds = interval or get_settings().sync.interval_seconds
            print(f"Syncing every {seconds}s with '{runner.provider_name}'. Ctrl+C to stop.")
            runs = await runner.run_periodically(seconds, stop_event)
            print(f"Stopped after {runs} run(s).")
            return EXIT_OK

        use_case = RunSyncUseCase(runner)
        response = use_case.to_response(await use_case.execute())
        print(
            f"Sync #{response.id} [{response.provider}] {response.status}: "
            f"{response.items_count} synced, {response.pending_count} pending, "
            f"{response.batches} batch(es)"
        )
        if response.backup_path:
            print(f"  backup: {response.backup_path}")
        if response.error_message:
            print(f"  error: {response.error_message}")

        if response.status == SyncRunStatus.FAILED.value:
            return EXIT_FAILED
        if response.status == SyncRunStatus.PARTIAL.value:
            return EXIT_PARTIAL
        return EXIT_OK
    except StockflowError as e:
        return _print_error(e)
    finally:
        await runner.close()
        await close_pool()


async def _stock(warehouse_id: str | None, product_id: str | None, limit: int) -> int:
    from stockflow.application.dto.requests import StockReportRequest
    from stockflow.application.use_cases import StockReportUseCase
    from stockflow.infrastructure.storage.sqlite import close_pool

    try:
        request = StockReportRequest(
            warehouse_id=warehouse_id, product_id=product_id, limit=limit
        )
        use_case = StockReportUseCase()
        report = use_case.to_response(await use_case.execute(request))
    except RequestValidationError as e:
        return _invalid_request(e)
    except StockflowError as e:
        return _print_error(e)
    finally:
        await close_pool()

    if not report.levels:
        print("No stock rows.")
    for level in report.levels:
        print(
            f"  {level.product_code:<16} {level.warehouse_name:<20} "
            f"{level.quantity:>8}  {level.status:<8} {level.value:>12.2f}"
        )
    if report.low_stock:
        print("\nBelow minimum:")
        for item in report.low_stock:
            print(
                f"  {item.product_code:<16} {item.total_quantity:>8} / {item.min_stock:<8} "
                f"short {item.shortfall}"
            )
    print(f"\nTotal value: {report.total_value:.2f}")
    print(f"Pending sync entries: {report.pending_sync}")
    return EXIT_OK


async def _pending() -> int:
    from stockflow.application.services import get_sync_outbox
    from stockflow.infrastructure.storage.sqlite import close_pool

    try:
        outbox = await get_sync_outbox()
        print(await outbox.count_pending())
    except StockflowError as e:
        return _print_error(e)
    finally:
        await close_pool()
    return EXIT_OK


def cmd_migrate(args: argparse.Namespace) -> int:
    """Apply pending migrations."""
    return asyncio.run(_migrate())


def cmd_status(args: argparse.Namespace) -> int:
    """Show migration status."""
    return asyncio.run(_status())


def cmd_sync(args: argparse.Namespace) -> int:
    """Run the sync runner once, or periodically with --watch."""
    return asyncio.run(_sync(args.watch, args.interval))


def cmd_stock(args: argparse.Namespace) -> int:
    """Print stock levels."""
    return asyncio.run(_stock(args.warehouse, args.product, args.limit))


def cmd_pending(args: argparse.Namespace) -> int:
    """Print the number of outbox entries awaiting sync."""
    return asyncio.run(_pending())


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Stockflow management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override LOG_LEVEL for this command",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending schema migrations")
    p_migrate.set_defaults(func=cmd_migrate)

    # status
    p_status = sub.add_parser("status", help="Show migration status")
    p_status.set_defaults(func=cmd_status)

    # sync
    p_sync = sub.add_parser("sync", help="Push pending outbox entries to the remote")
    p_sync.add_argument("--watch", action="store_true", help="Keep syncing periodically")
    p_sync.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Seconds between runs with --watch (default: SYNC_INTERVAL_SECONDS)",
    )
    p_sync.set_defaults(func=cmd_sync)

    # stock
    p_stock = sub.add_parser("stock", help="Print stock levels")
    p_stock.add_argument("--warehouse", default=None, help="Only this warehouse ID")
    p_stock.add_argument("--product", default=None, help="Only this product ID")
    p_stock.add_argument("--limit", type=int, default=100, help="Max rows (default: 100)")
    p_stock.set_defaults(func=cmd_stock)

    # pending
    p_pending = sub.add_parser("pending", help="Count outbox entries awaiting sync")
    p_pending.set_defaults(func=cmd_pending)

    args = parser.parse_args()
    configure_logging(args.log_level)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()

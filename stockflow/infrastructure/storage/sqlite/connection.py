"""
Async SQLite connection pool with aiosqlite.

Connections run in autocommit mode. Write transactions are opened with
``BEGIN IMMEDIATE`` so the write lock is taken before any row is read;
two transactions adjusting the same stock row are therefore serialized
and the second one sees the first one's committed quantity.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from stockflow.config import get_logger, get_settings
from stockflow.core.exceptions import TransientStorageError
from stockflow.core.interfaces import IUnitOfWork, Transaction

logger = get_logger(__name__)

_TRANSIENT_MARKERS = (
    "database is locked",
    "database table is locked",
    "database is busy",
)


def is_transient(error: BaseException) -> bool:
    """True for SQLite lock/busy conditions that are safe to retry."""
    if not isinstance(error, aiosqlite.OperationalError):
        return False
    message = str(error).lower()
    return any(marker in message for marker in _TRANSIENT_MARKERS)


class ConnectionPool:
    """
    Fixed set of autocommit aiosqlite connections to one database file.

    ``acquire_timeout`` bounds the wait for a free connection; running out
    is reported as a transient failure so callers retry it like a lock.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
        acquire_timeout: float | None = None,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout
        self.acquire_timeout = acquire_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._connections: list[aiosqlite.Connection] = []
        self._lock = asyncio.Lock()

    @property
    def pragmas(self) -> dict[str, str | int]:
        return {
            "journal_mode": "WAL",
            "synchronous": "NORMAL",
            "busy_timeout": self.busy_timeout,
            "foreign_keys": "ON",
        }

    @property
    def initialized(self) -> bool:
        return bool(self._connections)

    @property
    def available(self) -> int:
        """Connections not currently borrowed."""
        return self._idle.qsize()

    async def initialize(self) -> None:
        """Open ``pool_size`` connections; a no-op when already open."""
        async with self._lock:
            if self._connections:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            for _ in range(self.pool_size):
                conn = await self._open()
                self._connections.append(conn)
                self._idle.put_nowait(conn)

            logger.info(
                "connection_pool_initialized",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
            )

    async def _open(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path, isolation_level=None)
        for name, value in self.pragmas.items():
            await conn.execute(f"PRAGMA {name}={value}")
        conn.row_factory = aiosqlite.Row
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection for reads or single statements."""
        if not self._connections:
            await self.initialize()

        try:
            conn = await asyncio.wait_for(self._idle.get(), timeout=self.acquire_timeout)
        except TimeoutError as e:
            raise TransientStorageError(
                "acquire", f"no free connection within {self.acquire_timeout}s"
            ) from e
        try:
            yield conn
        finally:
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection inside a ``BEGIN IMMEDIATE`` transaction.

        Commits on success, rolls back on any exception including task
        cancellation. Lock/busy failures surface as TransientStorageError.
        """
        async with self.acquire() as conn:
            try:
                await conn.execute("BEGIN IMMEDIATE")
            except aiosqlite.OperationalError as e:
                if is_transient(e):
                    raise TransientStorageError("begin", str(e)) from e
                raise

            try:
                yield conn
                await conn.commit()
            except aiosqlite.OperationalError as e:
                await self._rollback(conn)
                if is_transient(e):
                    raise TransientStorageError("transaction", str(e)) from e
                raise
            except BaseException:
                await self._rollback(conn)
                raise

    @staticmethod
    async def _rollback(conn: aiosqlite.Connection) -> None:
        if conn.in_transaction:
            await conn.rollback()

    async def close(self) -> None:
        """Close every connection; the pool reopens on next use."""
        async with self._lock:
            while self._connections:
                await self._connections.pop().close()
            self._idle = asyncio.Queue()
            logger.info("connection_pool_closed", db_path=str(self.db_path))


class SQLiteUnitOfWork(IUnitOfWork):
    """Write transactions over a connection pool."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    def begin(self):
        return self._pool.transaction()


@asynccontextmanager
async def use_connection(
    pool: ConnectionPool,
    tx: Transaction | None = None,
    write: bool = False,
) -> AsyncIterator[aiosqlite.Connection]:
    """
    Join the caller's transaction if given, otherwise borrow a connection.

    With ``write=True`` and no caller transaction, a transaction of its own
    is opened.
    """
    if tx is not None:
        yield tx
    elif write:
        async with pool.transaction() as conn:
            yield conn
    else:
        async with pool.acquire() as conn:
            yield conn


# Global connection pool (composition root only; stores receive a pool)
_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Get or create the global connection pool."""
    global _pool
    if _pool is None:
        settings = get_settings()
        _pool = ConnectionPool(
            db_path=settings.storage.db_path,
            pool_size=settings.storage.pool_size,
            busy_timeout=settings.storage.busy_timeout,
            acquire_timeout=settings.storage.acquire_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    """Close the global connection pool."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None

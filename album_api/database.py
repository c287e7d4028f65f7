"""
Album API — Database Engine Management
=======================================

What:  The single async SQLAlchemy engine of the process, plus the pool
       bookkeeping reported by the health endpoint.
How:   `Database` wraps `create_async_engine` (asyncpg driver in production).
       It is constructed once by the application lifespan, handed to the
       album service, and disposed once at shutdown.
Who:   Used by AlbumService; never imported by route handlers.

Pool statistics:
    open_connections / in_use / idle  → read from the queue pool
    wait_count / wait_duration        → checkouts requested while every
                                        connection was already in use
    max_idle_closed                   → connections closed before reaching
                                        the recycle age (overflow returns)
    max_lifetime_closed               → connections closed at or past the
                                        recycle age
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Union

from sqlalchemy import event, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool, QueuePool

from album_api.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolStatistics:
    """Point-in-time snapshot of the connection pool counters."""
    open_connections: int = 0
    in_use: int = 0
    idle: int = 0
    wait_count: int = 0
    wait_duration: float = 0.0  # seconds
    max_idle_closed: int = 0
    max_lifetime_closed: int = 0


class Database:
    """
    Owner of the process-wide async engine.

    Every statement runs inside `transaction()`, which checks a connection
    out of the pool, commits on success, rolls back on error and returns the
    connection, so each data-access call is one autocommitted statement.
    """

    def __init__(
        self,
        url: Union[str, URL],
        *,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_recycle: int = 1800,
        echo: bool = False,
    ):
        self.url = make_url(url)
        self._capacity = pool_size + max_overflow
        self._pool_recycle = pool_recycle

        self.engine: AsyncEngine = create_async_engine(
            self.url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_recycle=pool_recycle,
            echo=echo,
        )

        # Unpooled; health probes never queue behind request traffic
        self._probe_engine: AsyncEngine = create_async_engine(self.url, poolclass=NullPool)

        self._wait_count = 0
        self._wait_duration = 0.0
        self._idle_closed = 0
        self._lifetime_closed = 0
        self._opened_at: Dict[int, float] = {}
        self._disposing = False

        event.listen(self.engine.sync_engine, "connect", self._on_connect)
        event.listen(self.engine.sync_engine, "close", self._on_close)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=settings.db_pool_recycle,
            echo=settings.log_level == "DEBUG",
        )

    @property
    def name(self) -> str:
        return self.url.database or ""

    # ── Pool Events ───────────────────────────────────────────────────────
    def _on_connect(self, dbapi_connection: Any, connection_record: Any) -> None:
        self._opened_at[id(dbapi_connection)] = time.monotonic()

    def _on_close(self, dbapi_connection: Any, connection_record: Any) -> None:
        opened_at = self._opened_at.pop(id(dbapi_connection), None)
        if self._disposing or opened_at is None:
            return
        if time.monotonic() - opened_at >= self._pool_recycle:
            self._lifetime_closed += 1
        else:
            self._idle_closed += 1

    # ── Connections ───────────────────────────────────────────────────────
    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncConnection]:
        """
        Yield a pooled connection inside a transaction.

        A checkout requested while all `pool_size + max_overflow`
        connections are busy is counted as a wait, together with the time
        spent until a connection became available.
        """
        pool = self.engine.sync_engine.pool
        must_wait = isinstance(pool, QueuePool) and pool.checkedout() >= self._capacity
        requested_at = time.perf_counter()

        async with self.engine.begin() as conn:
            if must_wait:
                self._wait_count += 1
                self._wait_duration += time.perf_counter() - requested_at
            yield conn

    async def ping(self, timeout: float) -> None:
        """
        Run `SELECT 1` on a fresh, unpooled connection.

        Raises if connecting or the query fails, or if both together exceed
        `timeout` seconds. Never waits for a pooled connection.
        """

        async def _probe() -> None:
            async with self._probe_engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

        await asyncio.wait_for(_probe(), timeout=timeout)

    def pool_statistics(self) -> PoolStatistics:
        pool = self.engine.sync_engine.pool
        in_use = idle = 0
        if isinstance(pool, QueuePool):
            in_use = pool.checkedout()
            idle = pool.checkedin()

        return PoolStatistics(
            open_connections=in_use + idle,
            in_use=in_use,
            idle=idle,
            wait_count=self._wait_count,
            wait_duration=self._wait_duration,
            max_idle_closed=self._idle_closed,
            max_lifetime_closed=self._lifetime_closed,
        )

    # ── Lifecycle ─────────────────────────────────────────────────────────
    async def dispose(self) -> None:
        """Close every pooled connection. Called once at shutdown."""
        self._disposing = True
        try:
            await self.engine.dispose()
            await self._probe_engine.dispose()
        finally:
            self._disposing = False

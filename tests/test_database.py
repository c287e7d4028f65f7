"""
Album API — Database Pool Accounting Tests
===========================================

What:  Tests for the counters behind the health report.
How:   Pool events are driven directly for the close classification; wait
       accounting uses a one-connection SQLite pool and two concurrent tasks.
"""

import asyncio
from unittest.mock import patch

import pytest

from album_api.database import Database


@pytest.fixture
def db(tmp_path):
    return Database(f"sqlite+aiosqlite:///{tmp_path / 'pool.db'}", pool_recycle=60)


class TestCloseClassification:

    def test_young_connection_counts_as_idle_close(self, db):
        conn = object()
        with patch("album_api.database.time.monotonic", return_value=100.0):
            db._on_connect(conn, None)
        with patch("album_api.database.time.monotonic", return_value=110.0):
            db._on_close(conn, None)

        stats = db.pool_statistics()
        assert stats.max_idle_closed == 1
        assert stats.max_lifetime_closed == 0

    def test_expired_connection_counts_as_lifetime_close(self, db):
        conn = object()
        with patch("album_api.database.time.monotonic", return_value=100.0):
            db._on_connect(conn, None)
        with patch("album_api.database.time.monotonic", return_value=160.0):
            db._on_close(conn, None)

        stats = db.pool_statistics()
        assert stats.max_idle_closed == 0
        assert stats.max_lifetime_closed == 1

    def test_unknown_connection_is_ignored(self, db):
        db._on_close(object(), None)

        assert db.pool_statistics().max_idle_closed == 0

    @pytest.mark.asyncio
    async def test_dispose_is_not_counted(self, db):
        async with db.transaction():
            pass

        await db.dispose()

        stats = db.pool_statistics()
        assert stats.max_idle_closed == 0
        assert stats.max_lifetime_closed == 0


class TestConnectionCounts:

    @pytest.mark.asyncio
    async def test_in_use_while_transaction_open(self, db):
        try:
            async with db.transaction():
                stats = db.pool_statistics()
                assert stats.in_use == 1
                assert stats.open_connections == stats.in_use + stats.idle

            stats = db.pool_statistics()
            assert stats.in_use == 0
            assert stats.idle == 1
        finally:
            await db.dispose()


class TestWaitAccounting:

    @pytest.mark.asyncio
    async def test_checkout_on_exhausted_pool_is_a_wait(self, tmp_path):
        db = Database(f"sqlite+aiosqlite:///{tmp_path / 'wait.db'}", pool_size=1, max_overflow=0)
        holding = asyncio.Event()
        release = asyncio.Event()

        async def hold_connection():
            async with db.transaction():
                holding.set()
                await release.wait()

        async def second_checkout():
            async with db.transaction():
                pass

        try:
            holder = asyncio.create_task(hold_connection())
            await holding.wait()

            waiter = asyncio.create_task(second_checkout())
            await asyncio.sleep(0.05)
            release.set()
            await asyncio.gather(holder, waiter)

            stats = db.pool_statistics()
            assert stats.wait_count == 1
            assert stats.wait_duration > 0
        finally:
            await db.dispose()

    @pytest.mark.asyncio
    async def test_sequential_checkouts_never_wait(self, db):
        try:
            for _ in range(3):
                async with db.transaction():
                    pass

            assert db.pool_statistics().wait_count == 0
        finally:
            await db.dispose()


class TestPing:

    @pytest.mark.asyncio
    async def test_does_not_wait_for_a_saturated_pool(self, tmp_path):
        db = Database(f"sqlite+aiosqlite:///{tmp_path / 'busy.db'}", pool_size=1, max_overflow=0)
        try:
            async with db.transaction():
                await db.ping(timeout=1.0)

                assert db.pool_statistics().in_use == 1
            assert db.pool_statistics().wait_count == 0
        finally:
            await db.dispose()

    @pytest.mark.asyncio
    async def test_leaves_pool_untouched(self, db):
        try:
            await db.ping(timeout=1.0)

            assert db.pool_statistics().open_connections == 0
        finally:
            await db.dispose()

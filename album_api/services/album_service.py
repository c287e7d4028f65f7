"""
Album API — Album Service (Data Access)
========================================

What:  The only component that turns album operations into SQL and back.
How:   Each method runs exactly one parameterized statement through
       Database.transaction() and maps the rows onto the Album schema.
Who:   Installed on app.state by the lifespan; called by route handlers
       through the AlbumStore protocol.

Error Handling Strategy:
    Driver and mapping failures are wrapped in DatabaseError whose message
    names the operation ("[get_album] ..."). A select-by-id that matches no
    row raises AlbumNotFoundError instead, so routes can tell 404 from 500.
    A failed health probe raises DatabaseUnavailableError, which is fatal.
"""

import logging
from typing import Dict, List

from sqlalchemy import text

from album_api.database import Database, PoolStatistics
from album_api.exceptions import (
    AlbumNotFoundError,
    DatabaseError,
    DatabaseUnavailableError,
)
from album_api.schemas.album import Album, AlbumCreate

logger = logging.getLogger(__name__)

# ── Statements ────────────────────────────────────────────────────────────
SELECT_ALL_ALBUMS = text("SELECT id, title, artist, price FROM album")
SELECT_ALBUM_BY_ID = text("SELECT id, title, artist, price FROM album WHERE id = :id")
INSERT_ALBUM = text("INSERT INTO album (title, artist, price) VALUES (:title, :artist, :price)")
DELETE_ALBUM_BY_ID = text("DELETE FROM album WHERE id = :id")

# ── Health Thresholds ─────────────────────────────────────────────────────
PING_TIMEOUT_SECONDS = 1.0
HEAVY_LOAD_OPEN_CONNECTIONS = 40
BOTTLENECK_WAIT_COUNT = 1000

HEALTHY_MESSAGE = "It's healthy"
HEAVY_LOAD_MESSAGE = "The database is experiencing heavy load."
BOTTLENECK_MESSAGE = (
    "The database has a high number of wait events, indicating potential bottlenecks."
)
IDLE_CLOSED_MESSAGE = (
    "Many idle connections are being closed, consider revising the connection pool settings."
)
LIFETIME_CLOSED_MESSAGE = (
    "Many connections are being closed due to max lifetime, consider increasing "
    "max lifetime or revising the connection usage pattern."
)


def format_duration(seconds: float) -> str:
    """Render a wait duration compactly: 0s, 250µs, 12.5ms, 3.2s."""
    if seconds <= 0:
        return "0s"
    if seconds < 1e-3:
        return f"{seconds * 1e6:g}µs"
    if seconds < 1:
        return f"{seconds * 1e3:g}ms"
    return f"{seconds:g}s"


def health_message(stats: PoolStatistics) -> str:
    """
    Pick the advisory message for a pool snapshot.

    Conditions are checked in a fixed order and the last one that holds
    wins, so lifetime churn outranks idle churn, which outranks waits,
    which outrank raw load.
    """
    message = HEALTHY_MESSAGE
    half_open = stats.open_connections // 2

    if stats.open_connections > HEAVY_LOAD_OPEN_CONNECTIONS:
        message = HEAVY_LOAD_MESSAGE
    if stats.wait_count > BOTTLENECK_WAIT_COUNT:
        message = BOTTLENECK_MESSAGE
    if stats.max_idle_closed > half_open:
        message = IDLE_CLOSED_MESSAGE
    if stats.max_lifetime_closed > half_open:
        message = LIFETIME_CLOSED_MESSAGE
    return message


class AlbumService:
    """
    SQL-backed implementation of the AlbumStore protocol.

    Stateless apart from the Database it was given; safe to share across
    concurrent requests because the pool hands each call its own connection.
    """

    def __init__(self, db: Database):
        self._db = db

    async def list_albums(self) -> List[Album]:
        """Return every album in database order (possibly none)."""
        try:
            async with self._db.transaction() as conn:
                result = await conn.execute(SELECT_ALL_ALBUMS)
                rows = result.mappings().all()
            return [Album.model_validate(dict(row)) for row in rows]
        except Exception as e:
            raise DatabaseError("list_albums", str(e)) from e

    async def get_album(self, album_id: int) -> Album:
        """
        Fetch one album by primary key.

        Raises:
            AlbumNotFoundError: No row has this id
            DatabaseError: Query execution or row mapping failed
        """
        try:
            async with self._db.transaction() as conn:
                result = await conn.execute(SELECT_ALBUM_BY_ID, {"id": album_id})
                row = result.mappings().first()

            if row is None:
                raise AlbumNotFoundError(album_id)

            return Album.model_validate(dict(row))

        except AlbumNotFoundError:
            raise
        except Exception as e:
            raise DatabaseError(
                "get_album", str(e), context={"album_id": album_id}
            ) from e

    async def add_album(self, album: AlbumCreate) -> int:
        """
        Insert an album and return the number of rows affected.

        The id is generated by the database. A return value of 0 is not an
        error here; the caller decides what it means.
        """
        try:
            async with self._db.transaction() as conn:
                result = await conn.execute(
                    INSERT_ALBUM,
                    {"title": album.title, "artist": album.artist, "price": album.price},
                )
            return result.rowcount
        except Exception as e:
            raise DatabaseError("add_album", str(e)) from e

    async def delete_album(self, album_id: int) -> int:
        """Delete by id and echo the id back, whether or not a row existed."""
        try:
            async with self._db.transaction() as conn:
                await conn.execute(DELETE_ALBUM_BY_ID, {"id": album_id})
        except Exception as e:
            raise DatabaseError(
                "delete_album", str(e), context={"album_id": album_id}
            ) from e
        return album_id

    async def health(self) -> Dict[str, str]:
        """
        Probe the database and describe the pool.

        Raises:
            DatabaseUnavailableError: The probe failed or took longer than
                PING_TIMEOUT_SECONDS. Callers must treat this as fatal.
        """
        try:
            await self._db.ping(timeout=PING_TIMEOUT_SECONDS)
        except Exception as e:
            detail = str(e) or type(e).__name__
            raise DatabaseUnavailableError(
                message=f"db down: {detail}",
                context={"database": self._db.name},
            ) from e

        stats = self._db.pool_statistics()
        return {
            "status": "up",
            "message": health_message(stats),
            "open_connections": str(stats.open_connections),
            "in_use": str(stats.in_use),
            "idle": str(stats.idle),
            "wait_count": str(stats.wait_count),
            "wait_duration": format_duration(stats.wait_duration),
            "max_idle_closed": str(stats.max_idle_closed),
            "max_lifetime_closed": str(stats.max_lifetime_closed),
        }

    async def close(self) -> None:
        logger.info("Disconnected from database: %s", self._db.name)
        await self._db.dispose()

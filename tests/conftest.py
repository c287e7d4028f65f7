"""
Album API — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── album_store:      In-memory AlbumStore fake (no database needed)
    ├── app:              FastAPI app serving album_store, shutdown hook mocked
    ├── test_client:      HTTPX AsyncClient talking to `app` in-process
    ├── sqlite_database:  Real Database over a temporary SQLite file
    └── album_service:    AlbumService over sqlite_database
"""

import os
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

# Keep test runs quiet and independent of any local .env
os.environ["LOG_LEVEL"] = "WARNING"

from album_api.database import Database  # noqa: E402
from album_api.exceptions import AlbumNotFoundError, DatabaseUnavailableError  # noqa: E402
from album_api.main import create_app  # noqa: E402
from album_api.schemas.album import Album, AlbumCreate  # noqa: E402
from album_api.services.album_service import AlbumService  # noqa: E402

SQLITE_ALBUM_TABLE = """
CREATE TABLE album (
    id      INTEGER PRIMARY KEY AUTOINCREMENT,
    title   TEXT NOT NULL,
    artist  TEXT NOT NULL,
    price   REAL NOT NULL
)
"""


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Store
# ══════════════════════════════════════════════════════════════════════════

class InMemoryAlbumStore:
    """
    AlbumStore fake for route tests.

    Set `fail_with` to make every data operation raise that exception,
    `rows_affected` to override what add_album reports, and `unreachable`
    to make health() fail like a lost database.
    """

    def __init__(self):
        self.albums: Dict[int, Album] = {}
        self.fail_with: Optional[Exception] = None
        self.rows_affected: Optional[int] = None
        self.unreachable = False
        self.closed = False
        self._next_id = 1

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def list_albums(self) -> List[Album]:
        self._maybe_fail()
        return list(self.albums.values())

    async def get_album(self, album_id: int) -> Album:
        self._maybe_fail()
        if album_id not in self.albums:
            raise AlbumNotFoundError(album_id)
        return self.albums[album_id]

    async def add_album(self, album: AlbumCreate) -> int:
        self._maybe_fail()
        if self.rows_affected is not None:
            return self.rows_affected
        album_id = self._next_id
        self._next_id += 1
        self.albums[album_id] = Album(id=album_id, **album.model_dump())
        return 1

    async def delete_album(self, album_id: int) -> int:
        self._maybe_fail()
        self.albums.pop(album_id, None)
        return album_id

    async def health(self) -> Dict[str, str]:
        if self.unreachable:
            raise DatabaseUnavailableError(message="db down: connection refused")
        return {"status": "up", "message": "It's healthy", "open_connections": "1"}

    async def close(self) -> None:
        self.closed = True


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def album_store():
    """A fresh, empty in-memory store."""
    return InMemoryAlbumStore()


@pytest.fixture
def app(album_store):
    """
    FastAPI app serving `album_store`.

    The shutdown hook is replaced with a MagicMock so a fatal health check
    is observable without signalling the test process.
    """
    application = create_app(album_store=album_store)
    application.state.request_shutdown = MagicMock()
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed directly to the app via ASGITransport.

    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def sqlite_database(tmp_path):
    """
    A Database backed by a temporary SQLite file with the album table.

    The same SQL the service sends to PostgreSQL runs here, through the
    aiosqlite driver and SQLAlchemy's async queue pool.
    """
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'albums.db'}", pool_size=2, max_overflow=0)
    async with db.transaction() as conn:
        await conn.execute(text(SQLITE_ALBUM_TABLE))
    yield db
    await db.dispose()


@pytest.fixture
def album_service(sqlite_database):
    return AlbumService(sqlite_database)


@pytest.fixture
def sample_album():
    return AlbumCreate(title="Blue Train", artist="John Coltrane", price=56.99)

"""Boundary protocol: the data-access capabilities the routes depend on.

Invariants:
    - Route handlers only ever see an AlbumStore, never an engine or session
    - Not-found is signalled with AlbumNotFoundError, every other failure
      with DatabaseError, a lost database with DatabaseUnavailableError
"""

from typing import Dict, List, Protocol

from album_api.schemas.album import Album, AlbumCreate


class AlbumStore(Protocol):
    """Contract for album persistence: AlbumService in production, fakes in tests."""
    async def list_albums(self) -> List[Album]: ...
    async def get_album(self, album_id: int) -> Album: ...
    async def add_album(self, album: AlbumCreate) -> int: ...
    async def delete_album(self, album_id: int) -> int: ...
    async def health(self) -> Dict[str, str]: ...
    async def close(self) -> None: ...

"""FastAPI dependencies shared by the route modules."""

from fastapi import Request

from album_api.services.protocols import AlbumStore


def get_album_store(request: Request) -> AlbumStore:
    """
    Return the AlbumStore installed on the application.

    The store is created once per process (by the lifespan, or by the caller
    of create_app) and shared by every request.
    """
    return request.app.state.album_store

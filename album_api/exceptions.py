"""
Album API — Custom Exception Hierarchy
=======================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return `{"error": ...}` JSON envelopes with the right status code.
Who:   Raised by the data-access service and route handlers.

Exception Hierarchy:
    AlbumAPIError (base)
    ├── InvalidAlbumIDError       → 400 Bad Request
    ├── InvalidAlbumPayloadError  → 400 Bad Request
    ├── AlbumNotFoundError        → 404 Not Found
    ├── DatabaseError             → 500 Internal Server Error
    └── DatabaseUnavailableError  → 503, then the process shuts down
"""

from typing import Any, Dict, Optional


class AlbumAPIError(Exception):
    """
    Base exception for all Album API errors.

    Attributes:
        message:  Error description (the data-access variants keep driver
                  detail here, so handlers never echo it to the client)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidAlbumIDError(AlbumAPIError):
    """
    Raised when an `{id}` path segment is not an integer.

    The message is chosen by the route and echoes the raw segment, e.g.
    "Invalid ID Format: abc".
    """

    def __init__(
        self,
        raw_id: str,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["raw_id"] = raw_id
        super().__init__(message=message or f"Invalid ID Format: {raw_id}", context=ctx)
        self.raw_id = raw_id


class InvalidAlbumPayloadError(AlbumAPIError):
    """Raised when a request body cannot be decoded into an Album."""

    def __init__(
        self,
        message: str = "Could not parse the Album data",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AlbumNotFoundError(AlbumAPIError):
    """
    Raised when no album row matches the requested id.

    Kept distinct from DatabaseError so routes can answer 404 instead of 500.
    """

    def __init__(
        self,
        album_id: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["album_id"] = album_id
        super().__init__(message=f"Album with ID '{album_id}' was not found", context=ctx)
        self.album_id = album_id


class DatabaseError(AlbumAPIError):
    """
    Raised when a SQL statement fails for any reason other than "no rows".

    The message starts with the failing operation, e.g.
    ``[list_albums] connection was closed in the middle of operation``.
    It is logged server-side only.
    """

    def __init__(
        self,
        operation: str,
        detail: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["operation"] = operation
        super().__init__(message=f"[{operation}] {detail}", context=ctx)
        self.operation = operation


class DatabaseUnavailableError(AlbumAPIError):
    """
    Raised when the health probe cannot reach the database.

    This is fatal: the handler for it stops the server, and the process
    entry point exits with a non-zero status once shutdown completes.
    """

    def __init__(
        self,
        message: str = "db down",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

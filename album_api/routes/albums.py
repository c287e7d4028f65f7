"""
Album API — Album Route Handlers
=================================

What:  CRUD endpoints for album records.
How:   Each handler parses the path/body, makes one AlbumStore call and
       returns the result. Failures are raised as exceptions and rendered
       by the handlers in main.py as {"error": "..."} envelopes.

Route Inventory (each also registered with a trailing slash):
    GET    /albums        → 200 [album, ...]
    GET    /albums/{id}   → 200 album | 400 bad id | 404 unknown id
    POST   /albums        → 201 {"message": ...} | 400 bad body
    DELETE /albums/{id}   → 200 {"message": ...} | 400 bad id
    Any data-access failure → 500
"""

import logging
import re
from typing import Dict, List

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError

from album_api.dependencies import get_album_store
from album_api.exceptions import DatabaseError, InvalidAlbumIDError, InvalidAlbumPayloadError
from album_api.schemas.album import Album, AlbumCreate
from album_api.services.protocols import AlbumStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Albums"])

# Optional sign followed by ASCII digits; int() alone would also accept
# whitespace, underscores and non-ASCII digits.
ALBUM_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
ALBUM_ID_MIN = -(2**63)
ALBUM_ID_MAX = 2**63 - 1


def parse_album_id(raw_id: str, message: str) -> int:
    """
    Convert an `{id}` path segment to an int.

    Raises:
        InvalidAlbumIDError: The segment is not a 64-bit signed integer.
            `message` becomes the client-facing error text.
    """
    if ALBUM_ID_PATTERN.fullmatch(raw_id) is None:
        raise InvalidAlbumIDError(raw_id, message=message)
    album_id = int(raw_id)
    if not ALBUM_ID_MIN <= album_id <= ALBUM_ID_MAX:
        raise InvalidAlbumIDError(raw_id, message=message)
    return album_id


@router.get("/albums", response_model=List[Album], summary="List all albums")
@router.get("/albums/", response_model=List[Album], include_in_schema=False)
async def list_albums(
    store: AlbumStore = Depends(get_album_store),
) -> List[Album]:
    return await store.list_albums()


@router.get(
    "/albums/{album_id}",
    response_model=Album,
    summary="Get an album by ID",
    responses={400: {"description": "ID is not an integer"}, 404: {"description": "Unknown ID"}},
)
@router.get("/albums/{album_id}/", response_model=Album, include_in_schema=False)
async def get_album(
    album_id: str,
    store: AlbumStore = Depends(get_album_store),
) -> Album:
    parsed_id = parse_album_id(album_id, f"Invalid ID Format: {album_id}")
    return await store.get_album(parsed_id)


@router.post(
    "/albums",
    status_code=201,
    summary="Add an album",
    description=(
        "Accepts {title, artist, price}. The ID is generated by the database; "
        "an ID sent by the client is ignored."
    ),
    responses={400: {"description": "Body is not a JSON album"}},
)
@router.post("/albums/", status_code=201, include_in_schema=False)
async def add_album(
    request: Request,
    store: AlbumStore = Depends(get_album_store),
) -> Dict[str, str]:
    body = await request.body()
    try:
        album = AlbumCreate.model_validate_json(body)
    except PydanticValidationError as e:
        raise InvalidAlbumPayloadError(
            context={"errors": e.errors(include_url=False, include_context=False)},
        ) from e

    rows_affected = await store.add_album(album)
    if rows_affected < 1:
        raise DatabaseError("add_album", "insert affected no rows")

    logger.info("Added album %r by %r", album.title, album.artist)
    return {"message": "Successfuly Added Album"}


@router.delete(
    "/albums/{album_id}",
    summary="Delete an album by ID",
    description="Deleting an ID that does not exist still succeeds.",
    responses={400: {"description": "ID is not an integer"}},
)
@router.delete("/albums/{album_id}/", include_in_schema=False)
async def delete_album(
    album_id: str,
    store: AlbumStore = Depends(get_album_store),
) -> Dict[str, str]:
    parsed_id = parse_album_id(album_id, f"Invalid format of ID {album_id}")
    deleted_id = await store.delete_album(parsed_id)
    return {"message": f"Successfuly Deleted Album {deleted_id}"}

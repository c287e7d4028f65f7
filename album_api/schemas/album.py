"""
Album API — Pydantic Album Schemas
===================================

What:  The Album record and the body accepted when creating one.
How:   `Album` is both the row shape returned by the data-access layer and the
       JSON object returned to clients. `AlbumCreate` decodes POST bodies with
       plain type coercion only; it never carries an id.

Wire format:
    {"ID": 1, "Title": "Blue Train", "Artist": "John Coltrane", "Price": 56.99}

    Responses always use the capitalized keys existing clients read.
    Request body keys match without regard to case, so `title`, `Title`
    and `TITLE` all set the same field.
"""

from typing import Any

from pydantic import BaseModel, Field, model_validator


class Album(BaseModel):
    """
    What:  A persisted album row.
    Who:   Returned by AlbumStore.list_albums / get_album and by
           GET /albums and GET /albums/{id}.
    How:   Built from rows by field name; serialized by alias, which FastAPI
           does for response models by default.
    """
    id: int = Field(serialization_alias="ID", description="Database-generated primary key")
    title: str = Field(serialization_alias="Title", description="Album title")
    artist: str = Field(serialization_alias="Artist", description="Performing artist")
    price: float = Field(
        serialization_alias="Price",
        description="Price; non-negative by convention, not enforced",
    )

    model_config = {"from_attributes": True}


class AlbumCreate(BaseModel):
    """
    What:  Body of POST /albums.
    How:   Keys are lower-cased before validation. Missing fields take zero
           values; unknown fields (including any client-supplied id) are
           ignored; mistyped fields fail decoding.
    """
    title: str = ""
    artist: str = ""
    price: float = 0.0

    model_config = {"extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def fold_key_case(cls, data: Any) -> Any:
        # When two spellings of one key are sent, the later one wins
        if isinstance(data, dict):
            return {
                key.lower() if isinstance(key, str) else key: value
                for key, value in data.items()
            }
        return data

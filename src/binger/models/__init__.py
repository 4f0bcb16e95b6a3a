"""Domain models for the Binger application."""

from binger.models.media import (
    Category,
    Media,
    MediaListAdapter,
    MediaRecord,
    MediaType,
    MediaUpdate,
    Movie,
    NewMediaFields,
    Show,
    make_record_id,
)

__all__ = [
    "Category",
    "Media",
    "MediaListAdapter",
    "MediaRecord",
    "MediaType",
    "MediaUpdate",
    "Movie",
    "NewMediaFields",
    "Show",
    "make_record_id",
]

"""Metadata lookups against The Movie Database."""

from binger.metadata.base import MetadataClient
from binger.metadata.models import (
    TMDBDetails,
    TMDBSearchResult,
    image_url,
    poster_url,
)
from binger.metadata.settings import MissingAPIKeyError, Settings

__all__ = [
    "MetadataClient",
    "MissingAPIKeyError",
    "Settings",
    "TMDBDetails",
    "TMDBSearchResult",
    "image_url",
    "poster_url",
]

# WARNING: API key loading from .env is for LOCAL DEVELOPMENT ONLY.
# Never commit your .env file or distribute your API keys.

"""TMDB metadata provider client.

Implements the MetadataClient interface for The Movie Database (TMDB) API.
"""

import logging

import httpx

from binger.metadata.base import MetadataClient
from binger.metadata.models import TMDBDetails, TMDBSearchResult
from binger.metadata.settings import Settings
from binger.models.media import MediaType

logger = logging.getLogger(__name__)

TMDB_API_BASE = "https://api.themoviedb.org/3"
REQUEST_TIMEOUT = 20.0


class TMDBClient(MetadataClient):
    """Client for The Movie Database (TMDB) API.

    Loads the API key from Settings. Implements multi-search and details
    lookups for movies and TV shows.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize TMDBClient and load the API key from settings.

        Raises:
            MissingAPIKeyError: If TMDB_API_KEY is not configured.
        """
        self.settings = settings or Settings()
        self.settings.require_keys()
        self.api_key = self.settings.TMDB_API_KEY

    async def search(self, query: str) -> list[TMDBSearchResult]:
        """Search TMDB for movies and TV shows matching a title.

        People and other non-title results are dropped.

        Args:
            query: The title to search for.

        Returns:
            List of TMDBSearchResult objects for matching movies and TV shows.
        """
        url = f"{TMDB_API_BASE}/search/multi"
        params = {"query": query, "api_key": self.api_key, "include_adult": "false"}
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
            resp = await client.get(url, params=params)
            resp.raise_for_status()
            data = resp.json()
        results: list[TMDBSearchResult] = []
        for item in data.get("results", []):
            if item.get("media_type") not in {MediaType.MOVIE.value, MediaType.TV.value}:
                continue
            results.append(TMDBSearchResult.model_validate(item))
        logger.debug(f"TMDB search {query!r}: {len(results)} result(s)")
        return results

    async def details(self, tmdb_id: int, media_type: MediaType) -> TMDBDetails:
        """Fetch full details for a TMDB movie or TV show.

        Args:
            tmdb_id: The TMDB id for the movie or TV show.
            media_type: The type of media (movie or tv).

        Returns:
            TMDBDetails with runtime or season information filled in.

        Raises:
            ValueError: If media_type is not supported.
            httpx.HTTPStatusError: If TMDB answers with an error status.
        """
        media_type = MediaType(media_type)
        if media_type == MediaType.MOVIE:
            url = f"{TMDB_API_BASE}/movie/{tmdb_id}"
        elif media_type == MediaType.TV:
            url = f"{TMDB_API_BASE}/tv/{tmdb_id}"
        else:
            raise ValueError(f"Unsupported media_type: {media_type}")
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
            resp = await client.get(url, params={"api_key": self.api_key})
            resp.raise_for_status()
            data = resp.json()
        logger.debug(f"TMDB details: id={data.get('id')} type={media_type.value}")
        return TMDBDetails.model_validate({**data, "media_type": media_type})

"""Base abstraction for metadata provider clients.

Defines the interface the media store uses to look up catalog entries. The TMDB
client implements it; tests substitute an in-memory fake.
"""

from abc import ABC, abstractmethod

from binger.metadata.models import TMDBDetails, TMDBSearchResult
from binger.models.media import MediaType


class MetadataClient(ABC):
    """Abstract base class for metadata provider clients.

    Used for dependency injection and testability.
    """

    @abstractmethod
    async def search(self, query: str) -> list[TMDBSearchResult]:
        """Search for movies and TV shows by title.

        Args:
            query: The title to search for.

        Returns:
            A list of movie and TV results, in provider order.

        Raises:
            NotImplementedError: If not implemented by subclass.
        """
        raise NotImplementedError

    @abstractmethod
    async def details(self, tmdb_id: int, media_type: MediaType) -> TMDBDetails:
        """Fetch full details for a catalog entry.

        Args:
            tmdb_id: The entry's id in the provider's system.
            media_type: Whether the id refers to a movie or a TV show.

        Returns:
            The entry's details.

        Raises:
            NotImplementedError: If not implemented by subclass.
        """
        raise NotImplementedError

"""Client implementations for metadata providers."""

from binger.metadata.clients.tmdb import TMDBClient

__all__ = ["TMDBClient"]

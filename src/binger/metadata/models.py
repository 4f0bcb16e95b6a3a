"""Data models for TMDB search results and details.

These mirror the subset of the TMDB v3 payloads Binger consumes. Unknown keys
are ignored so the models survive additions to the upstream API.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from binger.models.media import MediaType

YEAR_LENGTH = 4  # Minimum length for a valid year string
IMAGE_BASE = "https://image.tmdb.org/t/p/"


def extract_year(date_str: str | None) -> int | None:
    """Extracts the year as int from a YYYY-MM-DD string, or returns None."""
    if date_str and len(date_str) >= YEAR_LENGTH and date_str[:YEAR_LENGTH].isdigit():
        return int(date_str[:YEAR_LENGTH])
    return None


def image_url(path: str | None, size: str = "w500") -> str | None:
    """Build a TMDB image URL for a poster or backdrop path.

    Args:
        path: The image path as returned by TMDB (e.g. ``"/poster.jpg"``).
        size: The TMDB size bucket (``w342``, ``w500``, ``w780``, ``original``).

    Returns:
        The absolute image URL, or None when there is no image.
    """
    if not path:
        return None
    return f"{IMAGE_BASE}{size}{path}"


class TMDBSearchResult(BaseModel):
    """One movie or TV entry from a TMDB search."""

    id: int
    media_type: MediaType
    title: Optional[str] = None
    name: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: float = 0.0
    overview: str = ""
    release_date: Optional[str] = None
    first_air_date: Optional[str] = None

    @field_validator("vote_average", mode="before")
    @classmethod
    def _missing_vote_is_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("overview", mode="before")
    @classmethod
    def _missing_overview_is_empty(cls, value: Any) -> Any:
        return value or ""

    @property
    def display_title(self) -> str:
        """Movie title or show name, whichever the payload carries."""
        return self.title or self.name or "Unknown"

    @property
    def date(self) -> str | None:
        """Release date for movies, first-air date for shows."""
        if self.media_type == MediaType.MOVIE:
            return self.release_date or None
        return self.first_air_date or None

    @property
    def year(self) -> int | None:
        """Release year, when known."""
        return extract_year(self.date)


class TMDBDetails(TMDBSearchResult):
    """Full TMDB details for a movie or TV show."""

    runtime: Optional[int] = None
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None
    episode_run_time: list[int] = Field(default_factory=list)

    @field_validator("episode_run_time", mode="before")
    @classmethod
    def _missing_run_time_is_empty(cls, value: Any) -> Any:
        return value or []

    @property
    def episode_runtime(self) -> int:
        """The first listed episode runtime, or 0 when TMDB has none."""
        return self.episode_run_time[0] if self.episode_run_time else 0

    @property
    def episodes_per_season(self) -> int:
        """Average episodes per season, rounded up."""
        episodes = self.number_of_episodes or 0
        seasons = self.number_of_seasons or 1
        return -(-episodes // seasons)


def poster_url(path: str | None, size: str = "w500") -> str | None:
    """Build the poster URL for a record; see :func:`image_url`."""
    return image_url(path, size)

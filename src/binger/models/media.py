"""Media record models for Binger.

This module defines the records that make up a user's collection.
- MediaRecord carries the fields shared by movies and TV shows.
- Movie and Show are the two variants, discriminated by ``type``.
- Media is the tagged union used wherever a record of either kind is accepted.
- NewMediaFields and MediaUpdate carry the user-editable fields for add/update.

Design:
- The wire format is camelCase (``tmdbId``, ``addedOn``, ``watchedSeasons``) so
  exported documents and remote rows keep the shape of earlier Binger exports.
  Snake_case names are accepted on input as well.
- Record ids are derived from the catalog id (``"movie-27205"``), which makes
  the (tmdb_id, type) uniqueness rule the same as id uniqueness.
- ``added_on`` is a timezone-aware datetime in memory and an ISO-8601 string on
  the wire; pydantic re-hydrates it on read.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class MediaType(str, Enum):
    """Kind of media in the collection."""

    MOVIE = "movie"
    TV = "tv"


class Category(str, Enum):
    """Shelf a record is filed under."""

    WATCHED = "Watched"
    WISHLIST = "Wishlist"
    STREAMING = "Streaming"


def make_record_id(media_type: MediaType | str, tmdb_id: int) -> str:
    """Build the stable record id for a catalog item.

    Args:
        media_type: The media type of the catalog item.
        tmdb_id: The TMDB id of the catalog item.

    Returns:
        The record id, e.g. ``"tv-1396"``.
    """
    return f"{MediaType(media_type).value}-{tmdb_id}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MediaRecord(BaseModel):
    """Fields common to every record in the collection."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    """Stable record id derived from the catalog id."""

    tmdb_id: int
    """The record's id in The Movie Database."""

    title: str
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None

    rating: float = Field(default=0.0, ge=0, le=10)
    """The user's own rating (0-10)."""

    tmdb_rating: float = Field(default=0.0, ge=0, le=10)
    """TMDB vote average at the time of the last fetch (0-10)."""

    added_on: datetime = Field(
        default_factory=_utcnow,
        validation_alias=AliasChoices("addedOn", "added_on", "watchedAt"),
    )
    """When the record was added to the collection."""

    release_date: Optional[date] = Field(
        default=None,
        validation_alias=AliasChoices(
            "releaseDate", "release_date", "first_air_date", "firstAirDate"
        ),
    )
    """Release date for movies, first-air date for shows."""

    note: Optional[str] = None
    overview: Optional[str] = None
    category: Category = Category.WATCHED

    order: Optional[int] = None
    """Manual sort position, set by reorder."""

    custom_duration: Optional[int] = Field(default=None, ge=0)
    """Manual duration override in minutes."""

    @model_validator(mode="before")
    @classmethod
    def _fill_legacy_ids(cls, data: Any) -> Any:
        # Early exports used the numeric TMDB id as the record id.
        if isinstance(data, dict):
            data = dict(data)
            raw_id = data.get("id")
            if "tmdbId" not in data and "tmdb_id" not in data:
                if isinstance(raw_id, int) or (
                    isinstance(raw_id, str) and raw_id.isdigit()
                ):
                    data["tmdbId"] = int(raw_id)
            if isinstance(raw_id, int):
                data["id"] = str(raw_id)
        return data

    @field_validator("release_date", mode="before")
    @classmethod
    def _blank_date_is_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            # Accept full timestamps as well as plain dates.
            return value[:10]
        return value

    @field_validator("rating", "tmdb_rating", mode="before")
    @classmethod
    def _missing_rating_is_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @property
    def is_movie(self) -> bool:
        """Return True for movie records."""
        return self.type == MediaType.MOVIE  # type: ignore[attr-defined]

    @property
    def is_show(self) -> bool:
        """Return True for TV show records."""
        return self.type == MediaType.TV  # type: ignore[attr-defined]


class Movie(MediaRecord):
    """A movie in the collection."""

    type: Literal["movie"] = "movie"
    runtime: int = Field(default=0, ge=0)
    """Runtime in minutes as reported by the catalog."""

    @field_validator("runtime", mode="before")
    @classmethod
    def _missing_runtime_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


class Show(MediaRecord):
    """A TV show in the collection."""

    type: Literal["tv"] = "tv"
    num_of_seasons: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("numOfSeasons", "num_of_seasons", "seasons"),
    )
    episodes_per_season: int = Field(default=0, ge=0)
    episode_runtime: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices(
            "episodeRuntime", "episode_runtime", "episodeDuration"
        ),
    )
    watched_seasons: Optional[int] = Field(default=None, ge=0)
    """Completed seasons; only tracked while the show is Streaming."""

    @field_validator(
        "num_of_seasons", "episodes_per_season", "episode_runtime", mode="before"
    )
    @classmethod
    def _missing_count_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


Media = Annotated[Union[Movie, Show], Field(discriminator="type")]
"""A record of either kind, selected by its ``type`` field."""

MediaListAdapter: TypeAdapter[list[Media]] = TypeAdapter(list[Media])
"""Validates and serializes whole collections."""


class NewMediaFields(BaseModel):
    """User-supplied fields for a record being added.

    Season fields only apply to shows and override the catalog values.
    """

    rating: float = Field(default=0.0, ge=0, le=10)
    category: Category = Category.WATCHED
    note: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    watched_seasons: Optional[int] = Field(default=None, ge=0)
    num_of_seasons: Optional[int] = Field(default=None, ge=0)
    episodes_per_season: Optional[int] = Field(default=None, ge=0)
    episode_runtime: Optional[int] = Field(default=None, ge=0)


class MediaUpdate(BaseModel):
    """Field-level changes for an existing record.

    Only fields that were explicitly set are applied; see ``model_fields_set``.
    """

    note: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=10)
    category: Optional[Category] = None
    duration: Optional[int] = Field(default=None, ge=0)
    watched_seasons: Optional[int] = Field(default=None, ge=0)
    num_of_seasons: Optional[int] = Field(default=None, ge=0)
    episodes_per_season: Optional[int] = Field(default=None, ge=0)
    episode_runtime: Optional[int] = Field(default=None, ge=0)

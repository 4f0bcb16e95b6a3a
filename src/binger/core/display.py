"""Duration and display derivation for media records.

Pure functions that compute a record's effective runtime and the labels shown
next to it (year, duration, season progress, rating badge). Nothing here
performs I/O or mutates a record.

Missing data never raises: unknown dates render as ``"Unknown"`` and
zero-season shows render their season count as ``"?"``.
"""

from dataclasses import dataclass

from binger.models.media import Category, Media, Movie, Show

UNKNOWN = "Unknown"
MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24


@dataclass(frozen=True)
class RatingBadge:
    """The rating shown on a record's card."""

    value: float
    source: str  # "tmdb" or "user"

    @property
    def label(self) -> str:
        """The rating formatted to one decimal place."""
        return f"{self.value:.1f}"


def counted_seasons(show: Show) -> int:
    """Return the number of seasons that count towards a show's duration.

    Streaming shows count the seasons already watched; any other show counts
    all of its seasons.
    """
    if show.category == Category.STREAMING:
        return show.watched_seasons or 0
    return show.num_of_seasons


def effective_duration(record: Media) -> int:
    """Return the minutes a record contributes to watch time.

    Movies use the manual override if present, else the catalog runtime.
    Shows use the manual override if present, else
    ``seasons x episodes_per_season x episode_runtime`` (see
    :func:`counted_seasons`). This approximates whole seasons; it is not
    wall-clock accurate.

    Args:
        record: The movie or show.

    Returns:
        Duration in minutes, never negative.
    """
    if record.custom_duration is not None:
        return max(0, record.custom_duration)
    if isinstance(record, Movie):
        return max(0, record.runtime)
    minutes = (
        counted_seasons(record) * record.episodes_per_season * record.episode_runtime
    )
    return max(0, minutes)


def display_year(record: Media) -> int | str:
    """Return the release (or first-air) year, or ``"Unknown"``."""
    if record.release_date is None:
        return UNKNOWN
    return record.release_date.year


def _plural(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"


def duration_label(record: Media) -> str:
    """Return the short duration badge for a record.

    Movies show minutes (``"148 min"``); shows show their season count
    (``"5 seasons"``). Unknown values render as ``"?"``.
    """
    if isinstance(record, Movie):
        minutes = effective_duration(record)
        return f"{minutes or '?'} min"
    seasons = record.num_of_seasons
    return f"{seasons or '?'} {_plural(seasons, 'season')}"


def format_minutes(minutes: int) -> str:
    """Format a minute count as a compact ``"1d 2h 5m"`` label.

    Args:
        minutes: Total minutes. Negative values are treated as zero.

    Returns:
        The label; ``"0m"`` for zero.
    """
    minutes = max(0, minutes)
    days, rest = divmod(minutes, MINUTES_PER_HOUR * HOURS_PER_DAY)
    hours, mins = divmod(rest, MINUTES_PER_HOUR)
    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if mins or not parts:
        parts.append(f"{mins}m")
    return " ".join(parts)


def tracks_progress(record: Media) -> bool:
    """Return True when season progress applies (a Streaming show)."""
    return isinstance(record, Show) and record.category == Category.STREAMING


def season_progress(record: Media) -> float | None:
    """Return watched/total seasons as a fraction in ``[0, 1]``.

    Returns None for movies, for shows that are not Streaming, and for shows
    whose season count is unknown (zero).
    """
    if not isinstance(record, Show) or not tracks_progress(record):
        return None
    if record.num_of_seasons <= 0:
        return None
    watched = record.watched_seasons or 0
    return min(1.0, max(0.0, watched / record.num_of_seasons))


def season_progress_label(record: Media) -> str | None:
    """Return ``"2 / 5 seasons"`` for Streaming shows, None otherwise."""
    if not isinstance(record, Show) or not tracks_progress(record):
        return None
    total = record.num_of_seasons or "?"
    return f"{record.watched_seasons or 0} / {total} seasons"


def rating_badge(record: Media) -> RatingBadge:
    """Return the rating to show on a record's card.

    Streaming and Wishlist records have not been rated by the user yet, so they
    show the TMDB rating; Watched records show the user's rating.
    """
    if record.category in (Category.STREAMING, Category.WISHLIST):
        return RatingBadge(value=record.tmdb_rating, source="tmdb")
    return RatingBadge(value=record.rating, source="user")


def type_label(record: Media) -> str:
    """Return ``"Movie"`` or ``"TV Show"``."""
    return "Movie" if isinstance(record, Movie) else "TV Show"

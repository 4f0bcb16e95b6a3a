"""Collection statistics.

Aggregates the numbers shown above the collection: total watch time across
Watched and Streaming records, and how many shows and movies have been (or are
being) watched. Wishlist records never count.
"""

from collections.abc import Iterable

from pydantic import BaseModel, Field

from binger.core.display import HOURS_PER_DAY, MINUTES_PER_HOUR, effective_duration
from binger.models.media import Category, Media, Movie, Show


class CollectionStats(BaseModel):
    """Summary numbers for a collection."""

    total_minutes: int = 0
    total_shows: int = 0
    total_movies: int = 0
    by_category: dict[Category, int] = Field(
        default_factory=lambda: {category: 0 for category in Category}
    )

    @property
    def total_hours(self) -> int:
        """Whole hours of watch time."""
        return self.total_minutes // MINUTES_PER_HOUR

    @property
    def total_days(self) -> int:
        """Whole days of watch time."""
        return self.total_hours // HOURS_PER_DAY


def collection_stats(records: Iterable[Media]) -> CollectionStats:
    """Compute summary statistics for a collection.

    Args:
        records: The records to summarise.

    Returns:
        CollectionStats: Watch time counts Watched and Streaming records; show
        and movie counts exclude the Wishlist.
    """
    stats = CollectionStats()
    for record in records:
        stats.by_category[record.category] += 1
        if record.category == Category.WISHLIST:
            continue
        stats.total_minutes += effective_duration(record)
        if isinstance(record, Show):
            stats.total_shows += 1
        elif isinstance(record, Movie):
            stats.total_movies += 1
    return stats

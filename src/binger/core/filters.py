"""Collection views: sorting, category filtering and title search.

These back the ``binger list`` options. They never mutate the collection; each
function returns a new list.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from enum import Enum

from binger.models.media import Category, Media


class SortKey(str, Enum):
    """Orderings offered by the collection view."""

    TMDB_RATING = "tmdb-rating"
    USER_RATING = "user-rating"
    DATE_ADDED = "date-added"


def _as_aware(value: datetime) -> datetime:
    # Legacy records may carry naive timestamps; treat them as UTC.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def sort_records(
    records: Iterable[Media], key: SortKey, *, descending: bool = True
) -> list[Media]:
    """Sort records by rating or date added.

    The sort is stable, so records with equal keys keep their collection order.
    """
    key = SortKey(key)
    if key == SortKey.TMDB_RATING:
        return sorted(records, key=lambda r: r.tmdb_rating, reverse=descending)
    if key == SortKey.USER_RATING:
        return sorted(records, key=lambda r: r.rating, reverse=descending)
    return sorted(records, key=lambda r: _as_aware(r.added_on), reverse=descending)


def filter_by_category(
    records: Iterable[Media], category: Category | None
) -> list[Media]:
    """Keep records in *category*; None keeps everything."""
    if category is None:
        return list(records)
    return [record for record in records if record.category == category]


def search_by_title(records: Iterable[Media], query: str | None) -> list[Media]:
    """Keep records whose title contains *query*, ignoring case."""
    if not query:
        return list(records)
    needle = query.lower()
    return [record for record in records if needle in record.title.lower()]


def apply_view(
    records: Sequence[Media],
    *,
    category: Category | None = None,
    query: str | None = None,
    sort: SortKey | None = None,
    descending: bool = True,
) -> list[Media]:
    """Apply search, category filter and sort, in that order."""
    view = search_by_title(records, query)
    view = filter_by_category(view, category)
    if sort is not None:
        view = sort_records(view, sort, descending=descending)
    return view

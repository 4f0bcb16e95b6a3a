"""Renderer for CLI output.

This module renders search results, the collection, single records and
collection statistics as rich tables and panels.
- Category colors are shared by every view so a shelf looks the same
  everywhere.
- Labels come from :mod:`binger.core.display`; nothing here computes
  durations itself.
"""

from collections.abc import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from binger.core.display import (
    display_year,
    duration_label,
    effective_duration,
    format_minutes,
    rating_badge,
    season_progress_label,
    type_label,
)
from binger.core.stats import CollectionStats
from binger.metadata.models import TMDBSearchResult, poster_url
from binger.models.media import Category, Media, MediaType, Show

CATEGORY_STYLES = {
    Category.WATCHED: "green",
    Category.WISHLIST: "magenta",
    Category.STREAMING: "cyan",
}


def render_search_results(
    results: Sequence[TMDBSearchResult], console: Console | None = None
) -> None:
    """Render TMDB search results as a numbered table.

    The numbers are what ``binger add --pick`` expects.
    """
    console = console or Console()
    if not results:
        console.print("[yellow]No movies or TV shows found.[/yellow]")
        return

    table = Table(title="Search results")
    table.add_column("#", justify="right", style="bold")
    table.add_column("TMDB ID", justify="right")
    table.add_column("Type")
    table.add_column("Title", style="cyan")
    table.add_column("Year", justify="right")
    table.add_column("TMDB", justify="right", style="yellow")
    for number, result in enumerate(results, start=1):
        table.add_row(
            str(number),
            str(result.id),
            "Movie" if result.media_type == MediaType.MOVIE else "TV Show",
            result.display_title,
            str(result.year or "Unknown"),
            f"{result.vote_average:.1f}",
        )
    console.print(table)


def render_collection(records: Sequence[Media], console: Console | None = None) -> None:
    """Render the collection (or a filtered view of it) as a table."""
    console = console or Console()
    if not records:
        console.print("[yellow]Your library is empty.[/yellow]")
        return

    table = Table(title=f"Your library ({len(records)})")
    table.add_column("#", justify="right", style="bold")
    table.add_column("ID", no_wrap=True)
    table.add_column("Title", style="cyan")
    table.add_column("Type")
    table.add_column("Year", justify="right")
    table.add_column("Category")
    table.add_column("Rating", justify="right", style="yellow")
    table.add_column("Length", justify="right")
    for number, record in enumerate(records, start=1):
        badge = rating_badge(record)
        length = season_progress_label(record) or duration_label(record)
        table.add_row(
            str(number),
            record.id,
            record.title,
            type_label(record),
            str(display_year(record)),
            record.category.value,
            f"{badge.label} ({badge.source})",
            length,
            style=CATEGORY_STYLES.get(record.category),
        )
    console.print(table)


def render_record(
    record: Media, console: Console | None = None, poster_size: str = "w500"
) -> None:
    """Render every detail of one record in a panel."""
    console = console or Console()
    badge = rating_badge(record)
    lines = [
        f"[bold]{record.title}[/bold] ({display_year(record)}) - {type_label(record)}",
        f"ID: {record.id}   TMDB: {record.tmdb_id}",
        f"Category: {record.category.value}",
        f"Rating: {badge.label} ({badge.source})   "
        f"Your rating: {record.rating:.1f}   TMDB: {record.tmdb_rating:.1f}",
        f"Watch time: {format_minutes(effective_duration(record))}"
        + (" (custom)" if record.custom_duration is not None else ""),
    ]
    if isinstance(record, Show):
        lines.append(
            f"Seasons: {record.num_of_seasons or '?'}   "
            f"Episodes per season: {record.episodes_per_season or '?'}   "
            f"Episode runtime: {record.episode_runtime or '?'} min"
        )
        progress = season_progress_label(record)
        if progress:
            lines.append(f"Progress: {progress}")
    else:
        lines.append(f"Runtime: {duration_label(record)}")
    lines.append(f"Added: {record.added_on:%Y-%m-%d %H:%M}")
    poster = poster_url(record.poster_path, poster_size)
    if poster:
        lines.append(f"Poster: {poster}")
    if record.note:
        lines.append(f"Note: {record.note}")
    if record.overview:
        lines.append("")
        lines.append(record.overview)
    console.print(
        Panel(
            "\n".join(lines),
            title=record.category.value,
            border_style=CATEGORY_STYLES.get(record.category, "white"),
        )
    )


def render_stats(stats: CollectionStats, console: Console | None = None) -> None:
    """Render collection statistics."""
    console = console or Console()
    table = Table(title="Watch statistics", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Watch time", format_minutes(stats.total_minutes))
    table.add_row("Hours", str(stats.total_hours))
    table.add_row("Days", str(stats.total_days))
    table.add_row("Shows", str(stats.total_shows))
    table.add_row("Movies", str(stats.total_movies))
    for category in Category:
        table.add_row(
            category.value,
            str(stats.by_category.get(category, 0)),
            style=CATEGORY_STYLES[category],
        )
    console.print(table)

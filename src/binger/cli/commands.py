"""CLI commands for Binger.

This module implements all user-facing CLI commands: catalog search, adding
and editing records, collection views, import/export, manual ordering,
statistics, account management and configuration.
- Uses Typer for declarative CLI structure and option parsing.
- All output is routed through Rich via ConsoleManager; ``--json`` output and
  exports go straight to stdout so they stay machine-readable.
- Every Binger error is recovered here, at the command boundary, with a red
  message and a non-zero exit code.

Design:
- Commands are synchronous Typer callbacks that run one ``async`` body with
  ``asyncio.run``.
- The application context, storage backend and store are built per command
  by :func:`open_store`; notices collected along the way are printed after
  the command body, even when it fails.
- Annotated is used for CLI argument/option definitions shared between
  commands.
"""

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional, TypeVar

import typer
from rich.console import Console
from rich.markup import escape

from binger.auth.client import SupabaseAuthClient
from binger.auth.session import SessionStore
from binger.cli import app
from binger.cli.console import ConsoleManager
from binger.cli.renderer import (
    render_collection,
    render_record,
    render_search_results,
    render_stats,
)
from binger.core.context import AppContext, build_context, select_backend
from binger.core.errors import (
    AuthError,
    BingerError,
    ConfigurationError,
    ExportError,
)
from binger.core.filters import SortKey, apply_view
from binger.core.stats import collection_stats
from binger.core.store import MediaStore, search_catalog
from binger.metadata.clients.tmdb import TMDBClient
from binger.metadata.models import TMDBSearchResult
from binger.metadata.settings import Settings
from binger.models.media import Category, MediaType, MediaUpdate, NewMediaFields
from binger.storage.local import LocalStorage
from binger.utils.config import (
    KNOWN_SETTINGS,
    effective_settings,
    get_session_path,
    get_storage_path,
    resolve_setting,
    set_setting,
    unset_setting,
)
from binger.utils.debug import debug
from binger.utils.json import dumps

T = TypeVar("T")


class ExitCode(int, Enum):
    """Exit codes for CLI commands."""

    SUCCESS = 0
    ERROR = 1
    NOT_CONFIGURED = 2


STORAGE = Annotated[
    Optional[Path],
    typer.Option(
        "--storage",
        help="Local collection file (overrides the storage.path setting).",
    ),
]

JSON_OUTPUT = Annotated[
    bool,
    typer.Option("--json", help="Output results in JSON format"),
]

RECORD_ID = Annotated[
    str,
    typer.Argument(help="Record id, e.g. movie-27205 or tv-1396"),
]

CATEGORY = Annotated[
    Optional[Category],
    typer.Option("--category", "-c", case_sensitive=False, help="Shelf to file under"),
]

RATING = Annotated[
    Optional[float],
    typer.Option("--rating", "-r", min=0, max=10, help="Your rating (0-10)"),
]

NOTE = Annotated[Optional[str], typer.Option("--note", "-n", help="Personal note")]

DURATION = Annotated[
    Optional[int],
    typer.Option("--duration", min=0, help="Override the total duration in minutes"),
]

WATCHED_SEASONS = Annotated[
    Optional[int],
    typer.Option(
        "--watched-seasons", min=0, help="Seasons watched so far (Streaming shows)"
    ),
]

SEASONS = Annotated[
    Optional[int],
    typer.Option("--seasons", min=0, help="Override the number of seasons"),
]

EPISODES = Annotated[
    Optional[int],
    typer.Option("--episodes", min=0, help="Override the episodes per season"),
]

EPISODE_RUNTIME = Annotated[
    Optional[int],
    typer.Option("--episode-runtime", min=0, help="Override the episode runtime"),
]

EMAIL = Annotated[str, typer.Option("--email", "-e", prompt=True, help="Account email")]

PASSWORD = Annotated[
    str,
    typer.Option("--password", "-p", prompt=True, hide_input=True, help="Password"),
]


def _error(console: Console, message: str) -> None:
    console.print(f"[red]Error: {escape(message)}[/red]")


def print_notices(context: AppContext, console: Console) -> None:
    """Print the warnings and errors collected on *context*."""
    for notice in context.notices:
        if notice.level >= logging.ERROR:
            console.print(f"[red]{escape(notice.message)}[/red]")
        elif notice.level >= logging.WARNING:
            console.print(f"[yellow]{escape(notice.message)}[/yellow]")
        else:
            debug(notice.message)


def run_command(console: Console, body: Callable[[], Awaitable[T]]) -> T:
    """Run an async command body and turn Binger errors into exit codes.

    Args:
        console: Where to print error messages.
        body: Zero-argument coroutine function with the command's work.

    Returns:
        Whatever *body* returns.

    Raises:
        typer.Exit: With ``NOT_CONFIGURED`` for configuration errors and
            ``ERROR`` for every other Binger error.
    """
    try:
        return asyncio.run(body())
    except ConfigurationError as e:
        _error(console, str(e))
        raise typer.Exit(ExitCode.NOT_CONFIGURED) from e
    except BingerError as e:
        _error(console, str(e))
        raise typer.Exit(ExitCode.ERROR) from e


async def open_store(storage: Path | None = None) -> MediaStore:
    """Build the context, pick the backend and load the collection.

    Args:
        storage: Local collection file from the command line, if given.

    Returns:
        MediaStore: The loaded store for this command.
    """
    settings = Settings()
    context = await build_context(settings, SessionStore(get_session_path()))
    local = LocalStorage(get_storage_path(str(storage) if storage else None))
    metadata = TMDBClient(settings) if context.metadata_configured else None
    store = MediaStore(context, metadata, select_backend(context, local), local)
    await store.load()
    debug(f"Using {store.backend.name} storage with {len(store.records)} record(s)")
    return store


def with_store(
    console: Console,
    storage: Path | None,
    action: Callable[[MediaStore], Awaitable[T]],
) -> T:
    """Open the store, run *action* on it and print the collected notices."""

    async def body() -> T:
        store = await open_store(storage)
        try:
            return await action(store)
        finally:
            print_notices(store.context, console)

    return run_command(console, body)


def _auth_client(settings: Settings) -> SupabaseAuthClient:
    if not settings.supabase_configured:
        missing = ", ".join(settings.missing_supabase_keys())
        raise ConfigurationError(
            f"Supabase is not configured ({missing} missing); accounts are unavailable."
        )
    return SupabaseAuthClient(settings.SUPABASE_URL or "", settings.SUPABASE_ANON_KEY or "")


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Title to search for")],
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-n", min=1, help="Show at most this many results"),
    ] = None,
    json_output: JSON_OUTPUT = False,
) -> None:
    """Search TMDB for movies and TV shows."""
    with ConsoleManager() as console:
        max_results = resolve_setting(
            "search.limit", default=KNOWN_SETTINGS["search.limit"], cli_value=limit
        )

        async def body() -> list[TMDBSearchResult]:
            return await search_catalog(TMDBClient(Settings()), query)

        results = run_command(console, body)[:max_results]
        if json_output:
            sys.stdout.write(dumps([r.model_dump(mode="json") for r in results]) + "\n")
        else:
            render_search_results(results, console=console)


@app.command()
def add(  # noqa: PLR0913
    query: Annotated[
        Optional[str], typer.Argument(help="Title to search for and add")
    ] = None,
    pick: Annotated[
        int, typer.Option("--pick", min=1, help="Which search result to add (1-based)")
    ] = 1,
    tmdb_id: Annotated[
        Optional[int], typer.Option("--tmdb-id", help="Add by TMDB id instead")
    ] = None,
    media_type: Annotated[
        Optional[MediaType],
        typer.Option("--type", "-t", case_sensitive=False, help="movie or tv"),
    ] = None,
    category: CATEGORY = None,
    rating: RATING = None,
    note: NOTE = None,
    duration: DURATION = None,
    watched_seasons: WATCHED_SEASONS = None,
    seasons: SEASONS = None,
    episodes: EPISODES = None,
    episode_runtime: EPISODE_RUNTIME = None,
    storage: STORAGE = None,
) -> None:
    """Add a movie or TV show to your library."""
    with ConsoleManager() as console:
        if tmdb_id is None and not query:
            _error(console, "Give a title to search for, or --tmdb-id with --type.")
            raise typer.Exit(ExitCode.ERROR)
        if tmdb_id is not None and media_type is None:
            _error(console, "--tmdb-id needs --type movie or --type tv.")
            raise typer.Exit(ExitCode.ERROR)

        fields = NewMediaFields(
            rating=rating or 0.0,
            category=category or Category.WATCHED,
            note=note,
            duration=duration,
            watched_seasons=watched_seasons,
            num_of_seasons=seasons,
            episodes_per_season=episodes,
            episode_runtime=episode_runtime,
        )

        async def action(store: MediaStore) -> None:
            if tmdb_id is not None and media_type is not None:
                result = TMDBSearchResult(id=tmdb_id, media_type=media_type)
            else:
                results = await store.search(query or "")
                if media_type is not None:
                    results = [r for r in results if r.media_type == media_type]
                if len(results) < pick:
                    _error(console, f"No result #{pick} for {query!r}.")
                    raise typer.Exit(ExitCode.ERROR)
                result = results[pick - 1]
            record = await store.add(result, fields)
            console.print(
                f"[green]Added {record.title} to {record.category.value}[/green] "
                f"({record.id})"
            )

        with_store(console, storage, action)


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


@app.command("list")
def list_media(
    category: CATEGORY = None,
    search_text: Annotated[
        Optional[str], typer.Option("--search", "-s", help="Filter by title")
    ] = None,
    sort: Annotated[
        Optional[SortKey], typer.Option("--sort", help="Sort order for the view")
    ] = None,
    ascending: Annotated[
        Optional[bool],
        typer.Option("--ascending/--descending", help="Sort lowest or highest first"),
    ] = None,
    json_output: JSON_OUTPUT = False,
    storage: STORAGE = None,
) -> None:
    """List your library."""
    with ConsoleManager() as console:

        async def action(store: MediaStore) -> None:
            view = apply_view(
                store.records,
                category=category,
                query=search_text,
                sort=sort,
                descending=not resolve_setting(
                    "list.ascending",
                    default=KNOWN_SETTINGS["list.ascending"],
                    cli_value=ascending,
                ),
            )
            if json_output:
                sys.stdout.write(dumps(view) + "\n")
            else:
                render_collection(view, console=console)

        with_store(console, storage, action)


@app.command()
def show(record_id: RECORD_ID, storage: STORAGE = None) -> None:
    """Show every detail of one record."""
    with ConsoleManager() as console:

        async def action(store: MediaStore) -> None:
            size = resolve_setting("display.poster_size", default="w500")
            render_record(store.get(record_id), console=console, poster_size=size)

        with_store(console, storage, action)


@app.command()
def update(  # noqa: PLR0913
    record_id: RECORD_ID,
    category: CATEGORY = None,
    rating: RATING = None,
    note: NOTE = None,
    duration: DURATION = None,
    clear_duration: Annotated[
        bool, typer.Option("--clear-duration", help="Remove the duration override")
    ] = False,
    watched_seasons: WATCHED_SEASONS = None,
    seasons: SEASONS = None,
    episodes: EPISODES = None,
    episode_runtime: EPISODE_RUNTIME = None,
    storage: STORAGE = None,
) -> None:
    """Edit your rating, note, category or durations for a record."""
    with ConsoleManager() as console:
        values = {
            "category": category,
            "rating": rating,
            "note": note,
            "duration": duration,
            "watched_seasons": watched_seasons,
            "num_of_seasons": seasons,
            "episodes_per_season": episodes,
            "episode_runtime": episode_runtime,
        }
        changes = {key: value for key, value in values.items() if value is not None}
        if clear_duration:
            changes["duration"] = None
        if not changes:
            _error(console, "Nothing to update; pass at least one option.")
            raise typer.Exit(ExitCode.ERROR)

        async def action(store: MediaStore) -> None:
            record = await store.update(record_id, MediaUpdate(**changes))
            console.print(f"[green]Updated {record.title}[/green] ({record.id})")

        with_store(console, storage, action)


@app.command()
def refresh(record_id: RECORD_ID, storage: STORAGE = None) -> None:
    """Re-fetch TMDB details for a record, keeping your own fields."""
    with ConsoleManager() as console:

        async def action(store: MediaStore) -> None:
            record = await store.refresh(record_id)
            console.print(f"[green]Refreshed {record.title}[/green] ({record.id})")

        with_store(console, storage, action)


@app.command()
def delete(
    record_id: RECORD_ID,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask")] = False,
    storage: STORAGE = None,
) -> None:
    """Remove a record from your library. There is no undo."""
    with ConsoleManager() as console:

        async def action(store: MediaStore) -> None:
            record = store.find(record_id)
            if record is None:
                console.print(f"[yellow]{record_id} is not in your library.[/yellow]")
                return
            if not yes and not typer.confirm(f"Delete {record.title}?"):
                raise typer.Abort()
            await store.delete(record_id)
            console.print(f"[green]Deleted {record.title}[/green]")

        with_store(console, storage, action)


@app.command("import")
def import_media(
    path: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="Export file"),
    ],
    storage: STORAGE = None,
) -> None:
    """Import records from a Binger export, skipping ones you already have."""
    with ConsoleManager() as console:

        async def action(store: MediaStore) -> None:
            records = store.parse_document(path.read_bytes())
            added = await store.import_records(records)
            skipped = len(records) - len(added)
            console.print(
                f"[green]Imported {len(added)} record(s)[/green]"
                + (f", skipped {skipped} already in your library" if skipped else "")
            )

        with_store(console, storage, action)


@app.command()
def export(
    output: Annotated[
        Optional[str],
        typer.Option("--output", "-o", help="File to write, or - for stdout"),
    ] = None,
    storage: STORAGE = None,
) -> None:
    """Export your whole library as a JSON document."""
    with ConsoleManager() as console:

        async def action(store: MediaStore) -> None:
            target = resolve_setting(
                "export.path", default=KNOWN_SETTINGS["export.path"], cli_value=output
            )
            document = store.export()
            if target == "-":
                sys.stdout.write(document + "\n")
                return
            try:
                Path(target).write_text(document, encoding="utf-8")
            except OSError as e:
                raise ExportError(f"Could not write export to {target}: {e}") from e
            console.print(
                f"[green]Exported {len(store.records)} record(s) to {target}[/green]"
            )

        with_store(console, storage, action)


@app.command()
def reorder(
    record_ids: Annotated[
        list[str], typer.Argument(help="Every record id, in the new order")
    ],
    storage: STORAGE = None,
) -> None:
    """Set the manual order of your library."""
    with ConsoleManager() as console:

        async def action(store: MediaStore) -> None:
            await store.reorder(record_ids)
            console.print(f"[green]Saved the order of {len(record_ids)} record(s)[/green]")

        with_store(console, storage, action)


@app.command()
def move(
    record_id: RECORD_ID,
    position: Annotated[
        int, typer.Argument(min=1, help="New position in the list (1-based)")
    ],
    storage: STORAGE = None,
) -> None:
    """Move one record to a new position in your library."""
    with ConsoleManager() as console:

        async def action(store: MediaStore) -> None:
            record = store.get(record_id)
            await store.move(record_id, position - 1)
            console.print(f"[green]Moved {record.title} to position {position}[/green]")

        with_store(console, storage, action)


@app.command()
def stats(json_output: JSON_OUTPUT = False, storage: STORAGE = None) -> None:
    """Show total watch time and counts for your library."""
    with ConsoleManager() as console:

        async def action(store: MediaStore) -> None:
            summary = collection_stats(store.records)
            if json_output:
                data = summary.model_dump(mode="json")
                data["total_hours"] = summary.total_hours
                data["total_days"] = summary.total_days
                sys.stdout.write(dumps(data) + "\n")
            else:
                render_stats(summary, console=console)

        with_store(console, storage, action)


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------


@app.command()
def login(email: EMAIL, password: PASSWORD) -> None:
    """Log in to sync your library with Supabase."""
    with ConsoleManager() as console:

        async def body() -> None:
            client = _auth_client(Settings())
            session = await client.sign_in(email, password)
            SessionStore(get_session_path()).save(session)
            console.print(f"[green]Logged in as {email}[/green]")

        run_command(console, body)


@app.command()
def signup(email: EMAIL, password: PASSWORD) -> None:
    """Create a Supabase account."""
    with ConsoleManager() as console:

        async def body() -> None:
            client = _auth_client(Settings())
            session = await client.sign_up(email, password)
            if session is None:
                console.print(
                    "[green]Account created.[/green] Check your email to confirm "
                    "it, then run [bold]binger login[/bold]."
                )
                return
            SessionStore(get_session_path()).save(session)
            console.print(f"[green]Account created; logged in as {email}[/green]")

        run_command(console, body)


@app.command()
def logout() -> None:
    """Log out and forget the saved session."""
    with ConsoleManager() as console:
        session_store = SessionStore(get_session_path())

        async def body() -> None:
            session = session_store.load()
            if session is None:
                console.print("[yellow]You are not logged in.[/yellow]")
                return
            settings = Settings()
            try:
                if settings.supabase_configured:
                    await _auth_client(settings).sign_out(session)
            except AuthError as e:
                # The local session is removed either way.
                console.print(f"[yellow]Could not revoke the session: {e}[/yellow]")
            session_store.clear()
            console.print("[green]Logged out[/green]")

        run_command(console, body)


@app.command()
def account(
    public: Annotated[
        Optional[bool],
        typer.Option(
            "--public/--private", help="Make your library public or private"
        ),
    ] = None,
) -> None:
    """Show your account, or change whether your library is public."""
    with ConsoleManager() as console:

        async def body() -> None:
            settings = Settings()
            client = _auth_client(settings)
            context = await build_context(settings, SessionStore(get_session_path()))
            print_notices(context, console)
            if context.session is None:
                raise AuthError("You are not logged in; run binger login first.")
            user = await client.get_user(context.session)
            if public is not None:
                await client.set_profile_public(context.session, public)
            user_settings = await client.get_user_settings(context.session) or {}
            visibility = "public" if user_settings.get("is_public") else "private"
            console.print(f"Logged in as [bold]{user.display_name}[/bold]")
            if user.email:
                console.print(f"Email: {user.email}")
            console.print(f"Library: {visibility}")

        run_command(console, body)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@app.command()
def config(
    key: Annotated[Optional[str], typer.Argument(help="Setting to show or change")] = None,
    value: Annotated[Optional[str], typer.Argument(help="New value")] = None,
    unset: Annotated[
        bool, typer.Option("--unset", help="Remove the setting from config.toml")
    ] = False,
) -> None:
    """Show or change settings in config.toml."""
    with ConsoleManager() as console:
        if key is not None and key not in KNOWN_SETTINGS:
            _error(
                console,
                f"Unknown setting {key!r}. Known: {', '.join(sorted(KNOWN_SETTINGS))}",
            )
            raise typer.Exit(ExitCode.ERROR)
        if key is not None and unset:
            removed = unset_setting(key)
            console.print(f"Removed {key}" if removed else f"{key} was not set")
            return
        if key is not None and value is not None:
            set_setting(key, value)
            console.print(f"[green]Set {key} = {value}[/green]")
            return
        resolved = effective_settings()
        keys = [key] if key is not None else list(resolved)
        for name in keys:
            console.print(f"{name} = {resolved[name]}")
        if key is None:
            settings = Settings()
            for name in ("TMDB_API_KEY", "SUPABASE_URL", "SUPABASE_ANON_KEY"):
                state = "set" if getattr(settings, name) else "[yellow]not set[/yellow]"
                console.print(f"{name}: {state}")


@app.command()
def version() -> None:
    """Show the version of Binger."""
    from binger.__about__ import __version__

    with ConsoleManager() as console:
        console.print(f"Binger version: [bold]{__version__}[/bold]")


def main() -> None:
    """Main entry point for the CLI."""
    app()

"""In-memory media collection with persistence through a storage backend.

MediaStore owns the collection for one session. Every mutation is applied in
memory first and then persisted through the selected backend:
- LocalStorage rewrites the JSON file with the full snapshot.
- SupabaseStorage applies the delta to the hosted table.

Remote write failures are logged and recorded as notices on the context; the
in-memory change is kept, so local state is the source of truth for the rest
of the session. Operations that need catalog data (add, refresh) fetch it
before touching the collection, so a failed fetch commits nothing.
"""

import logging
from collections.abc import Awaitable, Iterable, Sequence
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import ValidationError

from binger.core.context import AppContext
from binger.core.errors import (
    DuplicateMediaError,
    ImportFormatError,
    InvalidOrderError,
    MediaNotFoundError,
    MetadataFetchError,
    RemoteReadError,
    RemoteWriteError,
)
from binger.metadata.base import MetadataClient
from binger.metadata.models import TMDBDetails, TMDBSearchResult
from binger.metadata.settings import MissingAPIKeyError
from binger.models.media import (
    Category,
    Media,
    MediaListAdapter,
    MediaType,
    MediaUpdate,
    Movie,
    NewMediaFields,
    Show,
    make_record_id,
)
from binger.storage.base import StorageBackend
from binger.storage.local import LocalStorage

logger = logging.getLogger(__name__)


def build_record(details: TMDBDetails, fields: NewMediaFields | None = None) -> Media:
    """Build a new collection record from catalog details and user fields.

    Args:
        details: Full TMDB details for the movie or show.
        fields: The user's rating, category, note and overrides.

    Returns:
        A Movie or Show with ``added_on`` set to now.
    """
    fields = fields or NewMediaFields()
    common: dict[str, Any] = {
        "id": make_record_id(details.media_type, details.id),
        "tmdb_id": details.id,
        "title": details.display_title,
        "poster_path": details.poster_path,
        "backdrop_path": details.backdrop_path,
        "tmdb_rating": details.vote_average,
        "release_date": details.date,
        "overview": details.overview or None,
        "added_on": datetime.now(timezone.utc),
        "rating": fields.rating,
        "category": fields.category,
        "note": fields.note,
    }
    if details.media_type == MediaType.MOVIE:
        runtime = details.runtime or 0
        custom = fields.duration
        if custom is not None and custom == runtime:
            custom = None
        return Movie(**common, runtime=runtime, custom_duration=custom)

    watched = fields.watched_seasons if fields.category == Category.STREAMING else None
    return Show(
        **common,
        num_of_seasons=_first_set(fields.num_of_seasons, details.number_of_seasons),
        episodes_per_season=_first_set(
            fields.episodes_per_season, details.episodes_per_season
        ),
        episode_runtime=_first_set(fields.episode_runtime, details.episode_runtime),
        watched_seasons=watched,
        custom_duration=fields.duration,
    )


def _first_set(*values: int | None) -> int:
    for value in values:
        if value is not None:
            return value
    return 0


def _catalog_fields(details: TMDBDetails, record: Media) -> dict[str, Any]:
    """Return the non-user fields of *record* refreshed from *details*."""
    values: dict[str, Any] = {
        "title": details.display_title,
        "poster_path": details.poster_path,
        "backdrop_path": details.backdrop_path,
        "tmdb_rating": details.vote_average,
        "overview": details.overview or None,
        "release_date": details.date,
    }
    if isinstance(record, Movie):
        values["runtime"] = details.runtime or 0
    else:
        values["num_of_seasons"] = details.number_of_seasons or 0
        values["episodes_per_season"] = details.episodes_per_season
        values["episode_runtime"] = details.episode_runtime
    return values


def _rebuild(record: Media, changes: dict[str, Any]) -> Media:
    data = record.model_dump()
    data.update(changes)
    return type(record).model_validate(data)


async def search_catalog(client: MetadataClient, query: str) -> list[TMDBSearchResult]:
    """Search the catalog, wrapping transport and parse failures.

    Raises:
        MetadataFetchError: If the request fails or the reply cannot be parsed.
    """
    try:
        return await client.search(query)
    except (httpx.HTTPError, ValueError) as e:
        raise MetadataFetchError(f"Search for {query!r} failed: {e}") from e


class MediaStore:
    """The user's collection for one session."""

    def __init__(
        self,
        context: AppContext,
        metadata: MetadataClient | None,
        backend: StorageBackend,
        local: LocalStorage,
    ) -> None:
        """Initialize an empty store; call :meth:`load` to read the collection.

        Args:
            context: The session's application context.
            metadata: Client for catalog lookups, or None when unconfigured.
            backend: Storage backend selected for this session.
            local: The local file, used as fallback and import mirror.
        """
        self.context = context
        self.metadata = metadata
        self.backend = backend
        self.local = local
        self._records: list[Media] = []

    # -- read access -------------------------------------------------------

    @property
    def records(self) -> tuple[Media, ...]:
        """A read-only view of the collection, in collection order."""
        return tuple(self._records)

    @property
    def snapshot(self) -> list[Media]:
        """A copy of the collection list, for persisting."""
        return list(self._records)

    def find(self, record_id: str) -> Media | None:
        """Return the record with *record_id*, or None."""
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def get(self, record_id: str) -> Media:
        """Return the record with *record_id*.

        Raises:
            MediaNotFoundError: If no record has that id.
        """
        record = self.find(record_id)
        if record is None:
            raise MediaNotFoundError(record_id)
        return record

    def find_catalog(self, tmdb_id: int, media_type: MediaType | str) -> Media | None:
        """Return the record for a catalog item, or None."""
        media_type = MediaType(media_type)
        for record in self._records:
            if record.tmdb_id == tmdb_id and record.type == media_type.value:
                return record
        return None

    def _index(self, record_id: str) -> int:
        for i, record in enumerate(self._records):
            if record.id == record_id:
                return i
        raise MediaNotFoundError(record_id)

    # -- loading -----------------------------------------------------------

    async def load(self) -> tuple[Media, ...]:
        """Read the collection from the active backend.

        If the remote backend cannot be read, the session degrades to local
        storage and the local file is read instead.
        """
        try:
            self._records = list(await self.backend.load())
        except RemoteReadError as e:
            logger.error(str(e))
            self.context.degrade_to_local("Could not load your library from Supabase.")
            self.backend = self.local
            self._records = self.local.read()
        logger.debug(
            f"Loaded {len(self._records)} record(s) from {self.backend.name} storage"
        )
        return self.records

    async def _write(self, action: str, pending: Awaitable[None]) -> None:
        try:
            await pending
        except RemoteWriteError as e:
            logger.error(f"{action} failed on {self.backend.name} storage: {e}")
            self.context.notify(
                f"{action} was not saved to your online library. "
                "The change is kept for this session.",
                level=logging.ERROR,
            )

    # -- catalog -----------------------------------------------------------

    def _require_metadata(self) -> MetadataClient:
        if self.metadata is None:
            raise MissingAPIKeyError("TMDB_API_KEY")
        return self.metadata

    async def search(self, query: str) -> list[TMDBSearchResult]:
        """Search the catalog for movies and shows.

        Raises:
            MissingAPIKeyError: If TMDB is not configured.
            MetadataFetchError: If the catalog request fails.
        """
        return await search_catalog(self._require_metadata(), query)

    async def _details(self, tmdb_id: int, media_type: MediaType) -> TMDBDetails:
        client = self._require_metadata()
        try:
            return await client.details(tmdb_id, media_type)
        except (httpx.HTTPError, ValueError) as e:
            raise MetadataFetchError(
                f"Could not fetch details for {media_type.value} {tmdb_id}: {e}"
            ) from e

    # -- mutations ---------------------------------------------------------

    async def add(
        self, result: TMDBSearchResult, fields: NewMediaFields | None = None
    ) -> Media:
        """Add a catalog item to the collection.

        Args:
            result: The search result the user picked.
            fields: The user's rating, category, note and overrides.

        Returns:
            The new record, now first in the collection.

        Raises:
            DuplicateMediaError: If the item is already in the collection.
            MissingAPIKeyError: If TMDB is not configured.
            MetadataFetchError: If details could not be fetched.
        """
        self._reject_duplicate(result.id, result.media_type, result.display_title)
        details = await self._details(result.id, result.media_type)
        # The collection may have changed while the fetch was in flight.
        self._reject_duplicate(result.id, result.media_type, result.display_title)

        record = build_record(details, fields)
        self._records.insert(0, record)
        logger.info(f"Added {record.title} ({record.id}) to {record.category.value}")
        await self._write(
            f"Adding {record.title}", self.backend.insert([record], self.snapshot)
        )
        return record

    def _reject_duplicate(self, tmdb_id: int, media_type: MediaType, title: str) -> None:
        existing = self.find_catalog(tmdb_id, media_type)
        if existing is not None:
            raise DuplicateMediaError(existing.title or title, existing.id)

    async def update(self, record_id: str, changes: MediaUpdate) -> Media:
        """Apply user edits to a record.

        Only fields set on *changes* are applied. A duration equal to the
        movie's catalog runtime clears the override. ``watched_seasons`` is
        cleared unless the record ends up a Streaming show.

        Raises:
            MediaNotFoundError: If the id is unknown.
        """
        index = self._index(record_id)
        record = self._records[index]
        values: dict[str, Any] = {}
        for name in changes.model_fields_set:
            value = getattr(changes, name)
            if name == "duration":
                values["custom_duration"] = value
            elif name in ("rating", "category") and value is None:
                continue
            else:
                values[name] = value

        if isinstance(record, Movie):
            for name in ("watched_seasons", "num_of_seasons", "episodes_per_season",
                         "episode_runtime"):
                values.pop(name, None)
            if values.get("custom_duration") == record.runtime:
                values["custom_duration"] = None
        else:
            category = values.get("category", record.category)
            if category != Category.STREAMING:
                values["watched_seasons"] = None
            for name in ("num_of_seasons", "episodes_per_season", "episode_runtime"):
                if name in values and values[name] is None:
                    values.pop(name)

        updated = _rebuild(record, values)
        self._records[index] = updated
        logger.debug(f"Updated {updated.id}: {sorted(values)}")
        await self._write(
            f"Updating {updated.title}", self.backend.update(updated, self.snapshot)
        )
        return updated

    async def refresh(self, record_id: str) -> Media:
        """Re-fetch catalog data for a record, keeping the user's fields.

        Raises:
            MediaNotFoundError: If the id is unknown.
            MetadataFetchError: If details could not be fetched.
        """
        record = self.get(record_id)
        details = await self._details(record.tmdb_id, MediaType(record.type))
        # Re-read: the record may have been edited or deleted during the fetch.
        index = self._index(record_id)
        current = self._records[index]
        refreshed = _rebuild(current, _catalog_fields(details, current))
        self._records[index] = refreshed
        logger.info(f"Refreshed {refreshed.title} ({refreshed.id})")
        await self._write(
            f"Refreshing {refreshed.title}",
            self.backend.update(refreshed, self.snapshot),
        )
        return refreshed

    async def delete(self, record_id: str) -> bool:
        """Remove a record from the collection.

        Returns:
            True if a record was removed, False if the id was unknown.
        """
        record = self.find(record_id)
        if record is None:
            logger.debug(f"Delete of unknown id {record_id} ignored")
            return False
        self._records.remove(record)
        logger.info(f"Deleted {record.title} ({record.id})")
        await self._write(
            f"Deleting {record.title}", self.backend.delete(record.id, self.snapshot)
        )
        return True

    async def import_records(self, records: Iterable[Media]) -> list[Media]:
        """Append records that are not already in the collection.

        Records whose id or catalog item is already present are skipped. New
        records are written to the remote backend when it is active, and the
        full collection is always mirrored to the local file.

        Returns:
            The records that were added.
        """
        seen_ids = {record.id for record in self._records}
        seen_catalog = {(record.tmdb_id, record.type) for record in self._records}
        added: list[Media] = []
        for record in records:
            key = (record.tmdb_id, record.type)
            if record.id in seen_ids or key in seen_catalog:
                continue
            seen_ids.add(record.id)
            seen_catalog.add(key)
            added.append(record)

        self._records.extend(added)
        logger.info(f"Imported {len(added)} new record(s)")
        if added and self.backend is not self.local:
            await self._write(
                f"Importing {len(added)} record(s)",
                self.backend.insert(added, self.snapshot),
            )
        self.local.save(self.snapshot)
        return added

    def export(self) -> str:
        """Return the full collection as a JSON document."""
        return MediaListAdapter.dump_json(
            self.snapshot, by_alias=True, indent=2
        ).decode()

    @staticmethod
    def parse_document(text: str | bytes) -> list[Media]:
        """Validate an import document.

        Raises:
            ImportFormatError: If the document is not a collection export.
        """
        try:
            return MediaListAdapter.validate_json(text)
        except ValidationError as e:
            raise ImportFormatError(
                f"Not a valid Binger export ({e.error_count()} error(s)): {e}"
            ) from e

    async def reorder(self, sequence: Sequence[str | Media]) -> tuple[Media, ...]:
        """Put the collection in the given order and persist positions.

        Args:
            sequence: Every record id (or record) in the new order.

        Raises:
            InvalidOrderError: If *sequence* is not a permutation of the
                collection.
        """
        ids = [item if isinstance(item, str) else item.id for item in sequence]
        current = {record.id: record for record in self._records}
        if len(ids) != len(current) or set(ids) != set(current):
            raise InvalidOrderError(
                "Reorder must list every record in the collection exactly once."
            )
        self._records = [
            current[record_id].model_copy(update={"order": position})
            for position, record_id in enumerate(ids)
        ]
        await self._write("Saving the new order", self.backend.reorder(self.snapshot))
        return self.records

    async def move(self, record_id: str, index: int) -> tuple[Media, ...]:
        """Move one record to *index* and persist the new order.

        The index is clamped to the collection bounds.

        Raises:
            MediaNotFoundError: If the id is unknown.
        """
        ids = [record.id for record in self._records]
        ids.pop(self._index(record_id))
        index = max(0, min(index, len(ids)))
        ids.insert(index, record_id)
        return await self.reorder(ids)

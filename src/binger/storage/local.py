"""Local JSON file storage for the collection.

The collection is stored as a single JSON array of records using the camelCase
wire format. Datetimes are written as ISO-8601 strings and re-hydrated to
``datetime`` on read. Writes go to a temporary file that replaces the target,
so an interrupted write never leaves a truncated collection behind.
"""

import logging
import os
import shutil
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from binger.models.media import Media, MediaListAdapter
from binger.storage.base import StorageBackend

logger = logging.getLogger(__name__)


class LocalStorage(StorageBackend):
    """Collection stored in a JSON file on this machine."""

    name = "local"

    def __init__(self, path: Path) -> None:
        """Initialize storage for *path*; the file is created on first write."""
        self.path = path

    def read(self) -> list[Media]:
        """Read the collection from disk.

        Returns:
            The stored records, or an empty list when the file is missing or
            cannot be parsed. An unparsable file is copied to ``*.bak`` first.
        """
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_bytes()
            if not raw.strip():
                return []
            return MediaListAdapter.validate_json(raw)
        except (OSError, ValidationError) as e:
            backup = self.path.with_name(self.path.name + ".bak")
            logger.error(
                f"Could not read collection from {self.path}: {e}. "
                f"Starting empty; the unreadable file was copied to {backup}."
            )
            try:
                shutil.copyfile(self.path, backup)
            except OSError as copy_error:
                logger.error(f"Could not back up {self.path}: {copy_error}")
            return []

    def save(self, records: Sequence[Media]) -> None:
        """Write the full collection to disk, replacing the previous file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_bytes(
            MediaListAdapter.dump_json(list(records), by_alias=True, indent=2)
        )
        os.replace(tmp_path, self.path)
        logger.debug(f"Saved {len(records)} record(s) to {self.path}")

    async def load(self) -> list[Media]:
        """Read the collection from disk."""
        return self.read()

    async def insert(self, records: Sequence[Media], snapshot: Sequence[Media]) -> None:
        """Write the collection including the new records."""
        self.save(snapshot)

    async def update(self, record: Media, snapshot: Sequence[Media]) -> None:
        """Write the collection including the changed record."""
        self.save(snapshot)

    async def delete(self, record_id: str, snapshot: Sequence[Media]) -> None:
        """Write the collection without the removed record."""
        self.save(snapshot)

    async def reorder(self, snapshot: Sequence[Media]) -> None:
        """Write the collection in its new order."""
        self.save(snapshot)

"""Base abstraction for collection storage backends.

A backend mirrors the in-memory collection owned by the media store. Two
implementations exist: a local JSON file and the hosted Supabase table. The
store selects one per session and never branches on which one it has.

Every write receives both the change and ``snapshot``, the full collection
after the change. Row-oriented backends apply the change; file-oriented
backends write the snapshot.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from binger.models.media import Media


class StorageBackend(ABC):
    """Abstract base class for collection storage backends."""

    name: str = "storage"
    """Short name used in log messages and notices."""

    @abstractmethod
    async def load(self) -> list[Media]:
        """Read the whole collection, in display order."""
        raise NotImplementedError

    @abstractmethod
    async def insert(self, records: Sequence[Media], snapshot: Sequence[Media]) -> None:
        """Persist newly added records.

        Args:
            records: The records that were added.
            snapshot: The full collection after the change.
        """
        raise NotImplementedError

    @abstractmethod
    async def update(self, record: Media, snapshot: Sequence[Media]) -> None:
        """Persist the new state of one record."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, record_id: str, snapshot: Sequence[Media]) -> None:
        """Remove one record by id."""
        raise NotImplementedError

    @abstractmethod
    async def reorder(self, snapshot: Sequence[Media]) -> None:
        """Persist each record's ``order`` position."""
        raise NotImplementedError

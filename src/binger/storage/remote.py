"""Supabase (PostgREST) storage for the collection.

Talks to the hosted ``media`` table over PostgREST with ``httpx``. Each record
is one row keyed by ``id``, with the same camelCase columns as the wire format.
Requests carry the project's anon key and the user's bearer token, so
row-level security scopes every query to the signed-in user.
"""

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from binger.auth.session import Session
from binger.core.errors import RemoteReadError, RemoteWriteError
from binger.models.media import Media, MediaListAdapter
from binger.storage.base import StorageBackend

logger = logging.getLogger(__name__)

MEDIA_TABLE = "media"
REQUEST_TIMEOUT = 20.0
# Manual order first, then newest additions.
DEFAULT_ORDER = "order.asc.nullslast,addedOn.desc"


class SupabaseStorage(StorageBackend):
    """Collection stored in the hosted Supabase table."""

    name = "supabase"

    def __init__(
        self,
        url: str,
        anon_key: str,
        session: Session,
        table: str = MEDIA_TABLE,
    ) -> None:
        """Initialize the backend for one project and one signed-in user.

        Args:
            url: The Supabase project URL.
            anon_key: The project's public anon key.
            session: The signed-in user's session.
            table: Table holding the records.
        """
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.session = session
        self.table = table

    @property
    def table_url(self) -> str:
        """PostgREST endpoint for the media table."""
        return f"{self.url}/rest/v1/{self.table}"

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self.session.access_token}",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    @staticmethod
    def _row(record: Media) -> dict[str, Any]:
        return record.model_dump(mode="json", by_alias=True)

    async def load(self) -> list[Media]:
        """Read the signed-in user's rows.

        Raises:
            RemoteReadError: If the request fails or rows do not validate.
        """
        params = {"select": "*", "order": DEFAULT_ORDER}
        try:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
                resp = await client.get(
                    self.table_url, params=params, headers=self._headers()
                )
                resp.raise_for_status()
                return MediaListAdapter.validate_python(resp.json())
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            raise RemoteReadError(f"Could not load media from Supabase: {e}") from e

    async def insert(self, records: Sequence[Media], snapshot: Sequence[Media]) -> None:
        """Insert new rows.

        Raises:
            RemoteWriteError: If the insert fails.
        """
        if not records:
            return
        rows = [self._row(record) for record in records]
        try:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
                resp = await client.post(
                    self.table_url,
                    json=rows,
                    headers=self._headers(prefer="return=minimal"),
                )
                resp.raise_for_status()
        except httpx.HTTPError as e:
            raise RemoteWriteError(f"Could not insert {len(rows)} row(s): {e}") from e
        logger.debug(f"Inserted {len(rows)} row(s) into {self.table}")

    async def update(self, record: Media, snapshot: Sequence[Media]) -> None:
        """Overwrite one row with the record's current state.

        Raises:
            RemoteWriteError: If the update fails.
        """
        row = self._row(record)
        row.pop("id", None)
        await self._patch(record.id, row)

    async def delete(self, record_id: str, snapshot: Sequence[Media]) -> None:
        """Delete one row by id.

        Raises:
            RemoteWriteError: If the delete fails.
        """
        try:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
                resp = await client.delete(
                    self.table_url,
                    params={"id": f"eq.{record_id}"},
                    headers=self._headers(prefer="return=minimal"),
                )
                resp.raise_for_status()
        except httpx.HTTPError as e:
            raise RemoteWriteError(f"Could not delete {record_id}: {e}") from e

    async def reorder(self, snapshot: Sequence[Media]) -> None:
        """Write each record's position, one request per row.

        The batch is not atomic. Every row is attempted; failures are collected
        and reported together.

        Raises:
            RemoteWriteError: If any row could not be updated.
        """
        failed: list[str] = []
        for record in snapshot:
            try:
                await self._patch(record.id, {"order": record.order})
            except RemoteWriteError as e:
                logger.error(str(e))
                failed.append(record.id)
        if failed:
            raise RemoteWriteError(
                f"Order not saved for {len(failed)} of {len(snapshot)} row(s): "
                + ", ".join(failed)
            )

    async def _patch(self, record_id: str, values: dict[str, Any]) -> None:
        try:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
                resp = await client.patch(
                    self.table_url,
                    params={"id": f"eq.{record_id}"},
                    json=values,
                    headers=self._headers(prefer="return=minimal"),
                )
                resp.raise_for_status()
        except httpx.HTTPError as e:
            raise RemoteWriteError(f"Could not update {record_id}: {e}") from e

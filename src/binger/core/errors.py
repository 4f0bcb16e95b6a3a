"""Error taxonomy for Binger.

Every failure a store operation can surface derives from :class:`BingerError`
so the CLI can recover at the command boundary and keep the process alive.

- ConfigurationError: missing API or backend credentials. Reported once at
  startup; the app degrades to local-only mode.
- DuplicateMediaError: the (tmdb_id, type) pair is already in the collection.
- MediaNotFoundError: an operation referenced an unknown record id.
- MetadataFetchError: the metadata API call failed; nothing was committed.
- RemoteReadError / RemoteWriteError: the hosted backend failed. Writes are
  logged and the in-memory change is kept.
- InvalidOrderError: a reorder sequence is not a permutation of the collection.
- AuthError: the session provider rejected a login, signup or refresh.
  AuthUnavailableError: the session provider could not be reached.
- ImportFormatError: an import document does not match the export format.
- ExportError: the export document could not be written.
"""


class BingerError(Exception):
    """Base class for all Binger errors."""


class ConfigurationError(BingerError):
    """Raised when required configuration or credentials are missing."""


class DuplicateMediaError(BingerError):
    """Raised when adding a record whose (tmdb_id, type) already exists."""

    def __init__(self, title: str, record_id: str) -> None:
        """Initialize the error with the title and id of the existing record."""
        super().__init__(f"{title} is already in your library.")
        self.title = title
        self.record_id = record_id


class MediaNotFoundError(BingerError):
    """Raised when a record id is not present in the collection."""

    def __init__(self, record_id: str) -> None:
        """Initialize the error with the missing record id."""
        super().__init__(f"No media with id {record_id!r} in your library.")
        self.record_id = record_id


class MetadataFetchError(BingerError):
    """Raised when the metadata API could not provide details for a record."""


class RemoteReadError(BingerError):
    """Raised when the remote backend could not be read."""


class RemoteWriteError(BingerError):
    """Raised when a write to the remote backend failed."""


class InvalidOrderError(BingerError):
    """Raised when a reorder sequence does not match the collection."""


class AuthError(BingerError):
    """Raised when the session provider rejects a request."""


class AuthUnavailableError(AuthError):
    """Raised when the session provider cannot be reached at all."""


class ImportFormatError(BingerError):
    """Raised when an import document is not a valid collection export."""


class ExportError(BingerError):
    """Raised when an export document could not be written."""

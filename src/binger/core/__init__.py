"""Core collection logic: the media store, display derivation and statistics."""

from binger.core.errors import (
    AuthError,
    AuthUnavailableError,
    BingerError,
    ConfigurationError,
    DuplicateMediaError,
    ExportError,
    ImportFormatError,
    InvalidOrderError,
    MediaNotFoundError,
    MetadataFetchError,
    RemoteReadError,
    RemoteWriteError,
)

__all__ = [
    "AuthError",
    "AuthUnavailableError",
    "BingerError",
    "ConfigurationError",
    "DuplicateMediaError",
    "ExportError",
    "ImportFormatError",
    "InvalidOrderError",
    "MediaNotFoundError",
    "MetadataFetchError",
    "RemoteReadError",
    "RemoteWriteError",
]

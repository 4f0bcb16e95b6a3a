"""Storage backends for the collection: a local JSON file or Supabase."""

from binger.storage.base import StorageBackend
from binger.storage.local import LocalStorage
from binger.storage.remote import SupabaseStorage

__all__ = ["LocalStorage", "StorageBackend", "SupabaseStorage"]

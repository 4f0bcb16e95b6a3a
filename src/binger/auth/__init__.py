"""Login sessions for the hosted Supabase backend."""

from binger.auth.client import SupabaseAuthClient
from binger.auth.session import Session, SessionStore, User

__all__ = ["Session", "SessionStore", "SupabaseAuthClient", "User"]

"""Application context passed explicitly to store operations.

The context carries what the rest of the app needs to know about the current
session: the loaded credentials, the signed-in session (if any), whether the
hosted backend is configured and still reachable, and the notices collected
for the user along the way. It replaces ambient globals; every store operation
receives it.

The storage backend is selected once per session from the context with
:func:`select_backend`.
"""

import logging
from dataclasses import dataclass, field

from binger.auth.client import SupabaseAuthClient
from binger.auth.session import Session, SessionStore
from binger.core.errors import AuthError, AuthUnavailableError
from binger.metadata.settings import Settings
from binger.storage.base import StorageBackend
from binger.storage.local import LocalStorage
from binger.storage.remote import SupabaseStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    """A message for the user, collected during an operation."""

    message: str
    level: int = logging.WARNING


@dataclass
class AppContext:
    """Session and backend state for one run of the app."""

    settings: Settings
    session: Session | None = None
    remote_available: bool = True
    notices: list[Notice] = field(default_factory=list)

    @property
    def remote_configured(self) -> bool:
        """True when Supabase credentials are present."""
        return self.settings.supabase_configured

    @property
    def metadata_configured(self) -> bool:
        """True when a TMDB API key is present."""
        return bool(self.settings.TMDB_API_KEY)

    @property
    def use_remote(self) -> bool:
        """True when writes should go to the hosted backend."""
        return (
            self.session is not None
            and self.remote_configured
            and self.remote_available
        )

    def notify(self, message: str, level: int = logging.WARNING) -> None:
        """Record a notice for the user and log it."""
        self.notices.append(Notice(message=message, level=level))
        logger.debug(f"Notice: {message}")

    def degrade_to_local(self, reason: str) -> None:
        """Stop using the hosted backend for the rest of the session."""
        if self.remote_available:
            self.remote_available = False
            self.notify(f"{reason} Using local storage for this session.")


async def build_context(
    settings: Settings | None = None,
    session_store: SessionStore | None = None,
) -> AppContext:
    """Detect configuration and restore the saved session.

    Missing credentials are recorded as notices; they never raise. An expired
    session is refreshed when possible. A session the provider rejects is
    dropped; when the provider cannot be reached the saved session is kept
    and this run uses local storage.

    Args:
        settings: Loaded credentials; read from the environment when omitted.
        session_store: Where the login session is persisted.

    Returns:
        AppContext: The context for this run.
    """
    context = AppContext(settings=settings or Settings())
    if not context.metadata_configured:
        context.notify(
            "TMDB API key is not configured. Search, add and refresh are "
            "unavailable until TMDB_API_KEY is set."
        )
    if not context.remote_configured:
        missing = ", ".join(context.settings.missing_supabase_keys())
        context.notify(
            f"Supabase is not configured ({missing} missing); "
            "your library is stored locally.",
            level=logging.INFO,
        )
        return context
    if session_store is None:
        return context

    session = session_store.load()
    if session is not None and session.is_expired():
        auth = SupabaseAuthClient(
            context.settings.SUPABASE_URL or "", context.settings.SUPABASE_ANON_KEY or ""
        )
        try:
            session = await auth.refresh(session)
            session_store.save(session)
            logger.debug("Refreshed expired session")
        except AuthUnavailableError as e:
            # Keep the saved session; the refresh is retried on the next run.
            logger.info(f"Session refresh failed: {e}")
            context.degrade_to_local(f"Could not refresh your session ({e}).")
            session = None
        except AuthError as e:
            context.notify(f"Your session has expired ({e}). Please log in again.")
            session_store.clear()
            session = None
    context.session = session
    return context


def select_backend(context: AppContext, local: LocalStorage) -> StorageBackend:
    """Pick the storage backend for this session.

    Returns the Supabase backend when a session exists and the backend is
    configured and available; the local file otherwise.
    """
    if context.use_remote and context.session is not None:
        return SupabaseStorage(
            context.settings.SUPABASE_URL or "",
            context.settings.SUPABASE_ANON_KEY or "",
            context.session,
        )
    return local

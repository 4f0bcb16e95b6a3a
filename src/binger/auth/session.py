"""Login session model and on-disk persistence.

The session is what the hosted backend's auth endpoint returns after a
successful login: bearer tokens plus the signed-in user. It is stored as JSON
next to the local collection so later commands reuse it.
"""

import logging
import os
import time
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

EXPIRY_LEEWAY_SECONDS = 60


class User(BaseModel):
    """The signed-in user, as reported by the auth provider."""

    id: str
    email: Optional[str] = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def display_name(self) -> str:
        """Full name from the profile, falling back to the email address."""
        return str(self.user_metadata.get("full_name") or self.email or self.id)


class Session(BaseModel):
    """Bearer tokens for the hosted backend."""

    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_at: Optional[int] = None
    """Expiry as a Unix timestamp in seconds."""
    user: Optional[User] = None

    def is_expired(self, now: float | None = None) -> bool:
        """Return True if the access token is expired or about to expire."""
        if self.expires_at is None:
            return False
        current = time.time() if now is None else now
        return self.expires_at - EXPIRY_LEEWAY_SECONDS <= current


class SessionStore:
    """Reads and writes the persisted session file."""

    def __init__(self, path: Path) -> None:
        """Initialize the store for a session file path."""
        self.path = path

    def load(self) -> Session | None:
        """Return the saved session, or None when absent or unreadable."""
        if not self.path.exists():
            return None
        try:
            return Session.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return None

    def save(self, session: Session) -> None:
        """Persist *session*, readable by the current user only."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(session.model_dump_json(indent=2), encoding="utf-8")
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, self.path)

    def clear(self) -> None:
        """Remove the saved session if there is one."""
        self.path.unlink(missing_ok=True)

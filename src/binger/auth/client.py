"""Supabase auth (GoTrue) client.

Thin wrapper over the hosted auth endpoints used by Binger: email/password
login and signup, token refresh, logout, and the account's privacy setting in
the ``user_settings`` table.
"""

import logging
import time
from typing import Any

import httpx

from binger.auth.session import Session, User
from binger.core.errors import AuthError, AuthUnavailableError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 20.0
USER_SETTINGS_TABLE = "user_settings"


def _error_message(resp: httpx.Response) -> str:
    """Extract the provider's error message from a failed response."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(data, dict):
        for key in ("error_description", "msg", "message", "error"):
            if data.get(key):
                return str(data[key])
    return f"HTTP {resp.status_code}"


def _session_from_payload(data: dict[str, Any]) -> Session:
    """Build a Session from a token response, deriving expires_at if needed."""
    payload = dict(data)
    if payload.get("expires_at") is None and payload.get("expires_in") is not None:
        payload["expires_at"] = int(time.time()) + int(payload["expires_in"])
    return Session.model_validate(payload)


class SupabaseAuthClient:
    """Client for a Supabase project's auth and account endpoints."""

    def __init__(self, url: str, anon_key: str) -> None:
        """Initialize the client for one Supabase project.

        Args:
            url: The Supabase project URL.
            anon_key: The project's public anon key.
        """
        self.url = url.rstrip("/")
        self.anon_key = anon_key

    def _headers(self, session: Session | None = None) -> dict[str, str]:
        headers = {"apikey": self.anon_key}
        if session is not None:
            headers["Authorization"] = f"Bearer {session.access_token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        session: Session | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        headers = self._headers(session)
        headers.update(kwargs.pop("headers", {}))
        try:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
                resp = await client.request(
                    method, f"{self.url}{path}", headers=headers, **kwargs
                )
        except httpx.HTTPError as e:
            raise AuthUnavailableError(f"Could not reach the auth provider: {e}") from e
        if resp.is_server_error:
            raise AuthUnavailableError(
                f"The auth provider is unavailable: {_error_message(resp)}"
            )
        if resp.is_error:
            raise AuthError(_error_message(resp))
        return resp

    async def sign_in(self, email: str, password: str) -> Session:
        """Log in with email and password.

        Raises:
            AuthError: If the credentials are rejected.
        """
        resp = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = _session_from_payload(resp.json())
        logger.info(f"Signed in as {email}")
        return session

    async def sign_up(self, email: str, password: str) -> Session | None:
        """Create an account.

        Returns:
            The new session, or None when the project requires the user to
            confirm their email before logging in.

        Raises:
            AuthError: If the signup is rejected.
        """
        resp = await self._request(
            "POST", "/auth/v1/signup", json={"email": email, "password": password}
        )
        data = resp.json()
        if isinstance(data, dict) and data.get("access_token"):
            return _session_from_payload(data)
        return None

    async def refresh(self, session: Session) -> Session:
        """Exchange the refresh token for a new session.

        Raises:
            AuthError: If there is no refresh token or it is rejected.
            AuthUnavailableError: If the provider cannot be reached.
        """
        if not session.refresh_token:
            raise AuthError("Session has expired; please log in again.")
        resp = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": session.refresh_token},
        )
        return _session_from_payload(resp.json())

    async def sign_out(self, session: Session) -> None:
        """Revoke the session's tokens."""
        await self._request("POST", "/auth/v1/logout", session=session)

    async def get_user(self, session: Session) -> User:
        """Return the user the session belongs to."""
        resp = await self._request("GET", "/auth/v1/user", session=session)
        return User.model_validate(resp.json())

    async def get_user_settings(self, session: Session) -> dict[str, Any] | None:
        """Return the user's row in ``user_settings``, if there is one."""
        user_id = await self._user_id(session)
        resp = await self._request(
            "GET",
            f"/rest/v1/{USER_SETTINGS_TABLE}",
            session=session,
            params={"select": "*", "id": f"eq.{user_id}"},
        )
        rows = resp.json()
        return rows[0] if rows else None

    async def set_profile_public(self, session: Session, is_public: bool) -> None:
        """Make the user's collection public or private."""
        user_id = await self._user_id(session)
        await self._request(
            "POST",
            f"/rest/v1/{USER_SETTINGS_TABLE}",
            session=session,
            json={"id": user_id, "is_public": is_public},
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    async def _user_id(self, session: Session) -> str:
        if session.user is not None:
            return session.user.id
        return (await self.get_user(session)).id

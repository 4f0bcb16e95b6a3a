"""Tests for the application context and backend selection."""

import time
from pathlib import Path

import httpx
import pytest
import respx

from binger.auth.session import Session, SessionStore
from binger.core.context import AppContext, build_context, select_backend
from binger.metadata.settings import Settings
from binger.storage.local import LocalStorage
from binger.storage.remote import SupabaseStorage

SUPABASE_URL = "https://example.supabase.co"


def _settings(**overrides: str | None) -> Settings:
    values: dict[str, str | None] = {
        "TMDB_API_KEY": "dummy",
        "SUPABASE_URL": SUPABASE_URL,
        "SUPABASE_ANON_KEY": "anon",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def session_store(tmp_path: Path) -> SessionStore:
    return SessionStore(tmp_path / "session.json")


def test_use_remote_requires_session_and_configuration() -> None:
    context = AppContext(settings=_settings())
    assert context.remote_configured
    assert not context.use_remote
    context.session = Session(access_token="token")
    assert context.use_remote
    context.degrade_to_local("Supabase is down.")
    assert not context.use_remote
    assert len(context.notices) == 1
    # Degrading twice does not repeat the notice.
    context.degrade_to_local("Supabase is down.")
    assert len(context.notices) == 1


def test_select_backend(tmp_path: Path) -> None:
    local = LocalStorage(tmp_path / "media.json")
    context = AppContext(settings=_settings())
    assert select_backend(context, local) is local
    context.session = Session(access_token="token")
    backend = select_backend(context, local)
    assert isinstance(backend, SupabaseStorage)
    assert backend.table_url == f"{SUPABASE_URL}/rest/v1/media"


@pytest.mark.asyncio
class TestBuildContext:
    async def test_missing_credentials_become_notices(
        self, session_store: SessionStore
    ) -> None:
        settings = _settings(TMDB_API_KEY=None, SUPABASE_URL=None)
        context = await build_context(settings, session_store)
        assert not context.metadata_configured
        assert not context.remote_configured
        messages = " ".join(n.message for n in context.notices)
        assert "TMDB_API_KEY" in messages
        assert "SUPABASE_URL" in messages
        assert context.session is None

    async def test_restores_saved_session(self, session_store: SessionStore) -> None:
        session_store.save(Session(access_token="token"))
        context = await build_context(_settings(), session_store)
        assert context.session is not None
        assert context.session.access_token == "token"
        assert context.use_remote

    async def test_refreshes_expired_session(
        self, session_store: SessionStore, respx_mock: respx.MockRouter
    ) -> None:
        session_store.save(
            Session(access_token="old", refresh_token="r1", expires_at=int(time.time()) - 10)
        )
        respx_mock.post(f"{SUPABASE_URL}/auth/v1/token").mock(
            return_value=httpx.Response(
                200,
                json={"access_token": "new", "refresh_token": "r2", "expires_in": 3600},
            )
        )
        context = await build_context(_settings(), session_store)
        assert context.session is not None
        assert context.session.access_token == "new"
        saved = session_store.load()
        assert saved is not None and saved.refresh_token == "r2"

    async def test_failed_refresh_drops_session(
        self, session_store: SessionStore, respx_mock: respx.MockRouter
    ) -> None:
        session_store.save(
            Session(access_token="old", refresh_token="r1", expires_at=1)
        )
        respx_mock.post(f"{SUPABASE_URL}/auth/v1/token").mock(
            return_value=httpx.Response(
                400, json={"error_description": "Invalid Refresh Token"}
            )
        )
        context = await build_context(_settings(), session_store)
        assert context.session is None
        assert not session_store.path.exists()
        assert "Invalid Refresh Token" in context.notices[-1].message

    async def test_offline_refresh_keeps_saved_session(
        self, session_store: SessionStore, respx_mock: respx.MockRouter
    ) -> None:
        session_store.save(
            Session(access_token="old", refresh_token="r1", expires_at=1)
        )
        respx_mock.post(f"{SUPABASE_URL}/auth/v1/token").mock(
            side_effect=httpx.ConnectError("offline")
        )
        context = await build_context(_settings(), session_store)
        assert context.session is None
        assert not context.remote_available
        assert not context.use_remote
        saved = session_store.load()
        assert saved is not None and saved.refresh_token == "r1"
        assert "local storage" in context.notices[-1].message

    async def test_provider_outage_keeps_saved_session(
        self, session_store: SessionStore, respx_mock: respx.MockRouter
    ) -> None:
        session_store.save(
            Session(access_token="old", refresh_token="r1", expires_at=1)
        )
        respx_mock.post(f"{SUPABASE_URL}/auth/v1/token").mock(
            return_value=httpx.Response(503, text="Service Unavailable")
        )
        context = await build_context(_settings(), session_store)
        assert context.session is None
        assert session_store.path.exists()
        assert not context.remote_available

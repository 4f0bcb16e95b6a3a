"""Tests for the Binger CLI commands.

This test suite covers:
- Adding titles through a mocked TMDB, including duplicates and missing keys
- Collection views (table and --json), edits, deletion and ordering
- Export/import round trips between two local collections
- Configuration commands and global options
"""

import json
from pathlib import Path

import httpx
import pytest
import respx
from typer.testing import CliRunner

from binger.auth.session import Session, SessionStore, User
from binger.cli.commands import ExitCode, app
from binger.models.media import Category, Show
from binger.storage.local import LocalStorage
from binger.utils import config as cfg
from tests.helpers.fakes import make_movie, make_show

runner = CliRunner()

SEARCH_URL = "https://api.themoviedb.org/3/search/multi"
MOVIE_URL = "https://api.themoviedb.org/3/movie/27205"
SUPABASE = "https://example.supabase.co"


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point storage, session and config at *tmp_path*, local-only mode."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BINGER_STORAGE_PATH", str(tmp_path / "media.json"))
    monkeypatch.setenv("BINGER_SESSION_PATH", str(tmp_path / "session.json"))
    monkeypatch.setenv("BINGER_NO_RICH", "0")
    monkeypatch.setenv("TMDB_API_KEY", "dummy")  # pragma: allowlist secret
    monkeypatch.setenv("COLUMNS", "200")
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    monkeypatch.delenv("BINGER_EXPORT_PATH", raising=False)
    monkeypatch.delenv("BINGER_DISPLAY_POSTER_SIZE", raising=False)
    monkeypatch.setattr(cfg, "CONFIG_DIR", tmp_path / "config")
    monkeypatch.setattr(cfg, "CONFIG_FILE", tmp_path / "config" / "config.toml")
    return tmp_path


@pytest.fixture
def library(cli_env: Path) -> LocalStorage:
    storage = LocalStorage(cli_env / "media.json")
    storage.save(
        [make_movie(), make_show(category=Category.STREAMING, watched_seasons=2)]
    )
    return storage


def _mock_inception(respx_mock: respx.MockRouter) -> None:
    respx_mock.get(SEARCH_URL).mock(
        return_value=httpx.Response(
            200,
            json={
                "results": [
                    {
                        "id": 27205,
                        "media_type": "movie",
                        "title": "Inception",
                        "release_date": "2010-07-15",
                        "vote_average": 8.4,
                    }
                ]
            },
        )
    )
    respx_mock.get(MOVIE_URL).mock(
        return_value=httpx.Response(
            200,
            json={
                "id": 27205,
                "title": "Inception",
                "release_date": "2010-07-15",
                "runtime": 148,
                "vote_average": 8.4,
            },
        )
    )


def test_version() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "Binger version" in result.stdout


def test_list_empty(cli_env: Path) -> None:
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "Your library is empty." in result.stdout


def test_add_by_search(cli_env: Path, respx_mock: respx.MockRouter) -> None:
    _mock_inception(respx_mock)
    result = runner.invoke(
        app, ["add", "Inception", "--rating", "9", "--note", "dream levels"]
    )
    assert result.exit_code == 0, result.output
    assert "Added Inception to Watched" in result.stdout
    (record,) = LocalStorage(cli_env / "media.json").read()
    assert record.id == "movie-27205"
    assert record.rating == 9
    assert record.note == "dream levels"


def test_add_duplicate_fails(library: LocalStorage, respx_mock: respx.MockRouter) -> None:
    respx_mock.get(SEARCH_URL).mock(
        return_value=httpx.Response(
            200,
            json={"results": [{"id": 27205, "media_type": "movie", "title": "Inception"}]},
        )
    )
    result = runner.invoke(app, ["add", "Inception"])
    assert result.exit_code == ExitCode.ERROR
    assert "already in your library" in result.stdout
    assert len(library.read()) == 2


def test_add_without_api_key(cli_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TMDB_API_KEY")
    result = runner.invoke(app, ["add", "--tmdb-id", "27205", "--type", "movie"])
    assert result.exit_code == ExitCode.NOT_CONFIGURED
    assert "TMDB_API_KEY" in result.stdout


def test_add_by_id_requires_type(cli_env: Path) -> None:
    result = runner.invoke(app, ["add", "--tmdb-id", "27205"])
    assert result.exit_code == ExitCode.ERROR


def test_list_json(library: LocalStorage) -> None:
    result = runner.invoke(app, ["list", "--json", "--category", "streaming"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert [item["id"] for item in data] == ["tv-1396"]
    assert data[0]["watchedSeasons"] == 2


def test_list_table(library: LocalStorage) -> None:
    result = runner.invoke(app, ["list", "--sort", "user-rating"])
    assert result.exit_code == 0
    assert "Breaking Bad" in result.stdout
    assert "2 / 5 seasons" in result.stdout


def test_show_record(library: LocalStorage) -> None:
    result = runner.invoke(app, ["--no-rich", "show", "movie-27205"])
    assert result.exit_code == 0
    assert "Inception" in result.stdout
    assert "2h 28m" in result.stdout


def test_show_unknown_record(library: LocalStorage) -> None:
    result = runner.invoke(app, ["show", "movie-1"])
    assert result.exit_code == ExitCode.ERROR
    assert "No media with id" in result.stdout


def test_update_to_watched_clears_progress(library: LocalStorage) -> None:
    result = runner.invoke(app, ["update", "tv-1396", "--category", "Watched"])
    assert result.exit_code == 0, result.output
    show = next(r for r in library.read() if r.id == "tv-1396")
    assert isinstance(show, Show)
    assert show.category == Category.WATCHED
    assert show.watched_seasons is None


def test_update_needs_an_option(library: LocalStorage) -> None:
    result = runner.invoke(app, ["update", "tv-1396"])
    assert result.exit_code == ExitCode.ERROR


def test_delete(library: LocalStorage) -> None:
    result = runner.invoke(app, ["delete", "movie-27205", "--yes"])
    assert result.exit_code == 0
    assert [r.id for r in library.read()] == ["tv-1396"]


def test_delete_unknown_is_noop(library: LocalStorage) -> None:
    result = runner.invoke(app, ["delete", "movie-1", "--yes"])
    assert result.exit_code == 0
    assert "not in your library" in result.stdout
    assert len(library.read()) == 2


def test_export_import_round_trip(library: LocalStorage, cli_env: Path) -> None:
    export_file = cli_env / "export.json"
    result = runner.invoke(app, ["export", "--output", str(export_file)])
    assert result.exit_code == 0
    other = cli_env / "other.json"
    first = runner.invoke(app, ["import", str(export_file), "--storage", str(other)])
    assert first.exit_code == 0
    assert "Imported 2 record(s)" in first.stdout
    second = runner.invoke(app, ["import", str(export_file), "--storage", str(other)])
    assert "Imported 0 record(s)" in second.stdout
    assert LocalStorage(other).read() == library.read()


def test_export_to_stdout(library: LocalStorage) -> None:
    result = runner.invoke(app, ["export", "--output", "-"])
    assert result.exit_code == 0
    assert len(json.loads(result.stdout)) == 2


def test_import_rejects_bad_document(cli_env: Path) -> None:
    bad = cli_env / "bad.json"
    bad.write_text('{"not": "a list"}', encoding="utf-8")
    result = runner.invoke(app, ["import", str(bad)])
    assert result.exit_code == ExitCode.ERROR
    assert "Not a valid Binger export" in result.stdout


def test_reorder_and_move(library: LocalStorage) -> None:
    result = runner.invoke(app, ["reorder", "tv-1396", "movie-27205"])
    assert result.exit_code == 0
    assert [(r.id, r.order) for r in library.read()] == [
        ("tv-1396", 0),
        ("movie-27205", 1),
    ]
    result = runner.invoke(app, ["move", "movie-27205", "1"])
    assert result.exit_code == 0
    assert [r.id for r in library.read()] == ["movie-27205", "tv-1396"]


def test_reorder_rejects_partial_list(library: LocalStorage) -> None:
    result = runner.invoke(app, ["reorder", "tv-1396"])
    assert result.exit_code == ExitCode.ERROR


def test_stats_json(library: LocalStorage) -> None:
    result = runner.invoke(app, ["stats", "--json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    # 148 min movie + 2 seasons x 13 episodes x 45 min
    assert data["total_minutes"] == 148 + 1170
    assert data["total_movies"] == 1
    assert data["by_category"]["Streaming"] == 1


def test_config_set_and_show(cli_env: Path) -> None:
    result = runner.invoke(app, ["config", "display.poster_size", "w342"])
    assert result.exit_code == 0
    result = runner.invoke(app, ["config"])
    assert "display.poster_size = w342" in result.stdout
    assert "TMDB_API_KEY: set" in result.stdout
    result = runner.invoke(app, ["config", "display.poster_size", "--unset"])
    assert "Removed display.poster_size" in result.stdout


def test_config_unknown_key(cli_env: Path) -> None:
    result = runner.invoke(app, ["config", "nope", "1"])
    assert result.exit_code == ExitCode.ERROR


def test_login_without_supabase(cli_env: Path) -> None:
    result = runner.invoke(
        app, ["login", "--email", "me@example.com", "--password", "secret"]
    )
    assert result.exit_code == ExitCode.NOT_CONFIGURED
    assert "Supabase is not configured" in result.stdout


def test_login_saves_session(
    cli_env: Path, monkeypatch: pytest.MonkeyPatch, respx_mock: respx.MockRouter
) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    respx_mock.post("https://example.supabase.co/auth/v1/token").mock(
        return_value=httpx.Response(
            200, json={"access_token": "a", "refresh_token": "r", "expires_in": 3600}
        )
    )
    result = runner.invoke(
        app, ["login", "--email", "me@example.com", "--password", "secret"]
    )
    assert result.exit_code == 0, result.output
    assert "Logged in as me@example.com" in result.stdout
    assert (cli_env / "session.json").exists()


def test_logout_when_logged_out(cli_env: Path) -> None:
    result = runner.invoke(app, ["logout"])
    assert result.exit_code == 0
    assert "not logged in" in result.stdout


def _mock_search(respx_mock: respx.MockRouter, *results: dict) -> None:
    respx_mock.get(SEARCH_URL).mock(
        return_value=httpx.Response(200, json={"results": list(results)})
    )


def test_search_table(cli_env: Path, respx_mock: respx.MockRouter) -> None:
    _mock_search(
        respx_mock,
        {"id": 27205, "media_type": "movie", "title": "Inception", "vote_average": 8.4},
        {"id": 17, "media_type": "person", "name": "Someone"},
    )
    result = runner.invoke(app, ["search", "Inception"])
    assert result.exit_code == 0, result.output
    assert "Search results" in result.stdout
    assert "Inception" in result.stdout
    assert "Someone" not in result.stdout


def test_search_json(cli_env: Path, respx_mock: respx.MockRouter) -> None:
    _mock_search(
        respx_mock,
        {"id": 1396, "media_type": "tv", "name": "Breaking Bad", "vote_average": 8.9},
    )
    result = runner.invoke(app, ["search", "breaking", "--json"])
    assert result.exit_code == 0, result.output
    (entry,) = json.loads(result.stdout)
    assert entry["id"] == 1396
    assert entry["media_type"] == "tv"
    assert entry["name"] == "Breaking Bad"


def test_search_malformed_reply(cli_env: Path, respx_mock: respx.MockRouter) -> None:
    _mock_search(respx_mock, {"media_type": "movie", "title": "x"})
    result = runner.invoke(app, ["search", "x"])
    assert result.exit_code == ExitCode.ERROR
    assert "Search for 'x' failed" in result.stdout


def test_search_without_api_key(cli_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TMDB_API_KEY")
    result = runner.invoke(app, ["search", "Inception"])
    assert result.exit_code == ExitCode.NOT_CONFIGURED
    assert "TMDB_API_KEY" in result.stdout


def test_refresh_keeps_user_fields(
    library: LocalStorage, respx_mock: respx.MockRouter
) -> None:
    respx_mock.get(MOVIE_URL).mock(
        return_value=httpx.Response(
            200,
            json={
                "id": 27205,
                "title": "Inception (Remastered)",
                "release_date": "2010-07-15",
                "runtime": 150,
                "vote_average": 8.8,
            },
        )
    )
    result = runner.invoke(app, ["refresh", "movie-27205"])
    assert result.exit_code == 0, result.output
    assert "Refreshed Inception (Remastered)" in result.stdout
    record = next(r for r in library.read() if r.id == "movie-27205")
    assert record.title == "Inception (Remastered)"
    assert record.tmdb_rating == 8.8
    assert record.rating == 9.0


def test_refresh_html_reply_changes_nothing(
    library: LocalStorage, respx_mock: respx.MockRouter
) -> None:
    before = library.read()
    respx_mock.get(MOVIE_URL).mock(
        return_value=httpx.Response(200, text="<html>gateway</html>")
    )
    result = runner.invoke(app, ["refresh", "movie-27205"])
    assert result.exit_code == ExitCode.ERROR
    assert "Could not fetch details" in result.stdout
    assert library.read() == before


def test_export_to_unwritable_path(library: LocalStorage, cli_env: Path) -> None:
    result = runner.invoke(app, ["export", "--output", str(cli_env)])
    assert result.exit_code == ExitCode.ERROR
    assert "Could not write export" in result.stdout


@pytest.fixture
def supabase_env(cli_env: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("SUPABASE_URL", SUPABASE)
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    return cli_env


def test_signup_logs_in(supabase_env: Path, respx_mock: respx.MockRouter) -> None:
    respx_mock.post(f"{SUPABASE}/auth/v1/signup").mock(
        return_value=httpx.Response(
            200, json={"access_token": "a", "refresh_token": "r", "expires_in": 3600}
        )
    )
    result = runner.invoke(
        app, ["signup", "--email", "me@example.com", "--password", "secret"]
    )
    assert result.exit_code == 0, result.output
    assert "logged in as me@example.com" in result.stdout
    assert (supabase_env / "session.json").exists()


def test_signup_needing_confirmation(
    supabase_env: Path, respx_mock: respx.MockRouter
) -> None:
    respx_mock.post(f"{SUPABASE}/auth/v1/signup").mock(
        return_value=httpx.Response(200, json={"id": "u1", "email": "me@example.com"})
    )
    result = runner.invoke(
        app, ["signup", "--email", "me@example.com", "--password", "secret"]
    )
    assert result.exit_code == 0, result.output
    assert "Check your email" in result.stdout
    assert not (supabase_env / "session.json").exists()


def test_account_requires_login(supabase_env: Path) -> None:
    result = runner.invoke(app, ["account"])
    assert result.exit_code == ExitCode.ERROR
    assert "not logged in" in result.stdout


def test_account_privacy_toggle(
    supabase_env: Path, respx_mock: respx.MockRouter
) -> None:
    SessionStore(supabase_env / "session.json").save(
        Session(access_token="a", user=User(id="u1", email="me@example.com"))
    )
    respx_mock.get(f"{SUPABASE}/auth/v1/user").mock(
        return_value=httpx.Response(200, json={"id": "u1", "email": "me@example.com"})
    )
    upsert = respx_mock.post(f"{SUPABASE}/rest/v1/user_settings").mock(
        return_value=httpx.Response(201)
    )
    respx_mock.get(f"{SUPABASE}/rest/v1/user_settings").mock(
        return_value=httpx.Response(200, json=[{"id": "u1", "is_public": True}])
    )
    result = runner.invoke(app, ["account", "--public"])
    assert result.exit_code == 0, result.output
    assert json.loads(upsert.calls.last.request.content) == {
        "id": "u1",
        "is_public": True,
    }
    assert "Logged in as me@example.com" in result.stdout
    assert "Library: public" in result.stdout


def test_account_shows_private_library(
    supabase_env: Path, respx_mock: respx.MockRouter
) -> None:
    SessionStore(supabase_env / "session.json").save(
        Session(access_token="a", user=User(id="u1"))
    )
    respx_mock.get(f"{SUPABASE}/auth/v1/user").mock(
        return_value=httpx.Response(200, json={"id": "u1", "email": "me@example.com"})
    )
    respx_mock.get(f"{SUPABASE}/rest/v1/user_settings").mock(
        return_value=httpx.Response(200, json=[])
    )
    result = runner.invoke(app, ["account"])
    assert result.exit_code == 0, result.output
    assert "Library: private" in result.stdout


def test_search_limit(cli_env: Path, respx_mock: respx.MockRouter) -> None:
    _mock_search(
        respx_mock,
        {"id": 1, "media_type": "movie", "title": "First"},
        {"id": 2, "media_type": "movie", "title": "Second"},
    )
    result = runner.invoke(app, ["search", "x", "--limit", "1", "--json"])
    assert result.exit_code == 0, result.output
    assert [entry["id"] for entry in json.loads(result.stdout)] == [1]


def test_list_order_from_config(library: LocalStorage) -> None:
    runner.invoke(app, ["config", "list.ascending", "true"])
    result = runner.invoke(app, ["list", "--sort", "user-rating", "--json"])
    assert [entry["id"] for entry in json.loads(result.stdout)] == [
        "movie-27205",
        "tv-1396",
    ]
    result = runner.invoke(
        app, ["list", "--sort", "user-rating", "--descending", "--json"]
    )
    assert [entry["id"] for entry in json.loads(result.stdout)] == [
        "tv-1396",
        "movie-27205",
    ]

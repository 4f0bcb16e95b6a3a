"""Config utility for persistent Binger settings (storage path, display options).

Provides functions to read and write user preferences in
~/.config/binger/config.toml. Uses tomli/tomli-w for TOML parsing and writing.
"""

from pathlib import Path
from typing import TypeVar, Any, cast
import os

import tomli
import tomli_w

# Determine config directory respecting XDG_CONFIG_HOME if set.
_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
# Path like ~/.config/binger or $XDG_CONFIG_HOME/binger
CONFIG_DIR = _xdg_config_home / "binger"
CONFIG_FILE = CONFIG_DIR / "config.toml"

# Local collection and session live under the XDG data directory.
_xdg_data_home = Path(
    os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
)
DATA_DIR = _xdg_data_home / "binger"

DEFAULT_STORAGE_FILE = DATA_DIR / "media.json"
DEFAULT_SESSION_FILE = DATA_DIR / "session.json"
DEFAULT_EXPORT_FILE = "binger_media_export.json"

# Keys understood by ``binger config``; values are the defaults.
KNOWN_SETTINGS: dict[str, Any] = {
    "storage.path": str(DEFAULT_STORAGE_FILE),
    "session.path": str(DEFAULT_SESSION_FILE),
    "export.path": DEFAULT_EXPORT_FILE,
    "display.poster_size": "w500",
    "search.limit": 20,
    "list.ascending": False,
}


def get_storage_path(cli_value: str | None = None) -> Path:
    """Return the path of the local collection file.

    Args:
        cli_value: Explicit path passed on the command line, if any.

    Returns:
        Path: The resolved storage file path.
    """
    return Path(
        resolve_setting(
            "storage.path", default=str(DEFAULT_STORAGE_FILE), cli_value=cli_value
        )
    ).expanduser()


def get_session_path() -> Path:
    """Return the path of the persisted login session."""
    return Path(
        resolve_setting("session.path", default=str(DEFAULT_SESSION_FILE))
    ).expanduser()


def set_setting(key: str, value: Any) -> None:
    """Set a dotted *key* in config.toml, creating nested tables as needed.

    Args:
        key: Dotted key path, e.g. ``"storage.path"``.
        value: The value to store. Must be TOML-serialisable. Values for known
            keys are coerced to the type of their default.
    """
    if key in KNOWN_SETTINGS:
        value = _coerce(value, KNOWN_SETTINGS[key])
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    data = _read_config_file()
    current = data
    *parents, leaf = key.split(".")
    for part in parents:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[leaf] = value
    with CONFIG_FILE.open("wb") as f:
        tomli_w.dump(data, f)


def unset_setting(key: str) -> bool:
    """Remove a dotted *key* from config.toml.

    Returns:
        bool: True if the key existed and was removed.
    """
    data = _read_config_file()
    current: Any = data
    *parents, leaf = key.split(".")
    for part in parents:
        if not isinstance(current, dict) or part not in current:
            return False
        current = current[part]
    if not isinstance(current, dict) or leaf not in current:
        return False
    del current[leaf]
    with CONFIG_FILE.open("wb") as f:
        tomli_w.dump(data, f)
    return True


def effective_settings() -> dict[str, Any]:
    """Resolve every known setting, for display by ``binger config``."""
    return {
        key: resolve_setting(key, default=default)
        for key, default in KNOWN_SETTINGS.items()
    }


# ---------------------------------------------------------------------------
# Generic configuration resolution
# ---------------------------------------------------------------------------

T = TypeVar("T")


def _read_config_file() -> dict[str, Any]:
    """Read the TOML config file if it exists, returning a (nested) dict."""

    if not CONFIG_FILE.exists():
        return {}
    with CONFIG_FILE.open("rb") as f:
        return tomli.load(f)


def _lookup_nested(data: dict[str, Any], dotted_key: str) -> Any | None:
    """Retrieve a nested value from *data* given a dotted key path.

    Example: dotted_key="storage.path" will attempt
    ``data["storage"]["path"]`` returning None if any level is missing.
    """

    keys = dotted_key.split(".")
    current: Any = data
    for part in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def _make_env_var_name(dotted_key: str, prefix: str = "BINGER_") -> str:
    """Convert a dotted key path to an uppercase ENV var name.

    Example: "storage.path" -> "BINGER_STORAGE_PATH".
    """

    return prefix + dotted_key.replace(".", "_").upper()


def _coerce(raw: Any, default: Any) -> Any:
    """Coerce *raw* to the type of *default*, falling back to *default*."""
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, str):
            return raw.lower() in {"1", "true", "yes", "on"}
        return default
    if isinstance(default, int):
        if isinstance(raw, int):
            return raw
        if isinstance(raw, str):
            try:
                return int(raw)
            except ValueError:
                return default
        return default
    return raw


def resolve_setting(
    key: str,
    *,
    default: T,
    cli_value: T | None = None,
) -> T:
    """Resolve a configuration *key* using precedence CLI > env > config > default.

    Args:
        key: Dotted key path, e.g. ``"storage.path"`` or ``"foo"``.
        default: Value to fall back to when no overrides found.
        cli_value: Value passed from CLI option (may be ``None`` when not provided).

    Returns:
        The resolved value with type matching *default* (or *cli_value*).
    """

    # 1. CLI value wins if provided (and not ``None`` to mimic Typer semantics).
    if cli_value is not None:
        return cli_value

    # 2. Environment variable
    env_var = _make_env_var_name(key)
    if env_var in os.environ:
        return cast(T, _coerce(os.environ[env_var], default))

    # 3. Config file lookup
    file_val = _lookup_nested(_read_config_file(), key)
    if file_val is not None:
        return cast(T, _coerce(file_val, default))

    # 4. Default
    return default

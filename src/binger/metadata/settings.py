# WARNING: This settings loader is for LOCAL DEVELOPMENT ONLY.
# Never commit your .env file or share your API keys.
# Ensure .env is listed in .gitignore!

"""Settings loader for metadata and backend credentials.

Loads TMDB and Supabase credentials from environment variables or a .env file.
Every key is optional at load time so that a missing credential is reported as
a configuration error instead of failing at import.

Recognised .env keys:
- TMDB_API_KEY (required for search, add and refresh)
- SUPABASE_URL (optional, enables the hosted backend)
- SUPABASE_ANON_KEY (optional, enables the hosted backend)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from binger.core.errors import ConfigurationError


class MissingAPIKeyError(ConfigurationError):
    """Raised when a required API key is missing from the environment or .env file."""

    def __init__(self, key: str) -> None:
        """Initialize the error with the missing key name."""
        super().__init__(
            f"{key} is not configured. "
            "Set it in your environment or in a .env file (see .env.example)."
        )
        self.key = key


class Settings(BaseSettings):
    """Credentials for TMDB and the hosted Supabase backend."""

    TMDB_API_KEY: str | None = None
    SUPABASE_URL: str | None = None
    SUPABASE_ANON_KEY: str | None = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def require_keys(self) -> None:
        """Raise MissingAPIKeyError if any required key is missing."""
        required = ["TMDB_API_KEY"]
        for key in required:
            if not getattr(self, key, None):
                raise MissingAPIKeyError(key)

    @property
    def supabase_configured(self) -> bool:
        """Return True when both Supabase credentials are present."""
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)

    def missing_supabase_keys(self) -> list[str]:
        """Return the names of the Supabase keys that are not set."""
        return [
            key
            for key in ("SUPABASE_URL", "SUPABASE_ANON_KEY")
            if not getattr(self, key, None)
        ]

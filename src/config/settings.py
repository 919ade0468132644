"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Values are read from (highest priority first):
#
#   1. Environment variables   e.g. TICKETMASTER_API_KEY=abc123
#   2. The .env file           key=value lines in the project root
#   3. The defaults below
#
# Field ``ticketmaster_api_key`` maps to env var ``TICKETMASTER_API_KEY``.
# An empty string means "not configured"; the providers check for it and
# raise ConfigurationError before touching the network.
#
# The .env file is git-ignored; .env.example lists every variable.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Concert Companion application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Ticketmaster Discovery API ===
    ticketmaster_api_key: str = ""
    ticketmaster_base_url: str = "https://app.ticketmaster.com/discovery/v2"
    ticketmaster_timeout: float = 10.0  # seconds, per search call
    concert_search_concurrency: int = 5  # max in-flight searches per request

    # === Spotify Web API ===
    spotify_client_id: str = ""
    spotify_client_secret: str = ""
    spotify_redirect_uri: str = "http://localhost:3000/callback"
    spotify_api_base_url: str = "https://api.spotify.com/v1"
    spotify_accounts_url: str = "https://accounts.spotify.com"

    # === Persistence ===
    database_path: str = "data/concert_companion.db"

    # === App Config ===
    client_url: str = "http://localhost:3000"
    app_host: str = "0.0.0.0"
    app_port: int = 5001
    app_env: str = "development"
    log_level: str = "INFO"

    def ticketmaster_configured(self) -> bool:
        return bool(self.ticketmaster_api_key)

    def spotify_configured(self) -> bool:
        """Return True when both Spotify client credentials are set."""
        return bool(self.spotify_client_id and self.spotify_client_secret)

    def get_cors_origins(self) -> list[str]:
        """Allow every origin in development, only the web client elsewhere."""
        if self.app_env == "development":
            return ["*"]
        return [self.client_url]

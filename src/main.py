"""Concert Companion FastAPI application entry point.

Wires together providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml`` and
configures structured logging before the app is built.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.providers.event.ticketmaster_provider import TicketmasterProvider
from src.providers.music_profile.spotify_provider import SpotifyProvider
from src.providers.user_store.sqlite_user_repository import SQLiteUserRepository
from src.services.concert_service import DEFAULT_MAX_CONCURRENCY, ConcertAggregationService
from src.services.spotify_auth_service import (
    DEFAULT_TIME_RANGE,
    DEFAULT_TOP_ARTISTS_LIMIT,
    SpotifyAuthService,
)
from src.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=30.0)

    # -- Providers --
    concert_search = TicketmasterProvider(http_client=http_client, settings=app_settings)
    music_profile = SpotifyProvider(http_client=http_client, settings=app_settings)

    db_path = app_config.get("database", {}).get("path", app_settings.database_path)
    user_repository = SQLiteUserRepository(db_path=db_path)

    # -- Services --
    concerts_cfg = app_config.get("concerts", {})
    spotify_cfg = app_config.get("spotify", {})

    concert_service = ConcertAggregationService(
        user_repository=user_repository,
        concert_search=concert_search,
        max_concurrency=int(concerts_cfg.get("max_concurrency", DEFAULT_MAX_CONCURRENCY)),
    )
    auth_service = SpotifyAuthService(
        music_profile=music_profile,
        user_repository=user_repository,
        top_artists_limit=int(spotify_cfg.get("top_artists_limit", DEFAULT_TOP_ARTISTS_LIMIT)),
        time_range=spotify_cfg.get("time_range", DEFAULT_TIME_RANGE),
    )

    provider_registry = {
        "concert_search": concert_search.is_configured(),
        "music_profile": app_settings.spotify_configured(),
        "user_store": True,
    }

    return {
        "http_client": http_client,
        "settings": app_settings,
        "environment": app_settings.app_env,
        "user_repository": user_repository,
        "concert_service": concert_service,
        "auth_service": auth_service,
        "provider_registry": provider_registry,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise providers and services on startup, clean up on shutdown."""
    components = _build_all(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)
    application.state.started_at = time.monotonic()

    await components["user_repository"].initialize()

    if not settings.ticketmaster_configured():
        _logger.warning("ticketmaster_not_configured", hint="set TICKETMASTER_API_KEY")

    _logger.info(
        "app_startup",
        version=config.get("app", {}).get("version", "1.0.0"),
        environment=settings.app_env,
        providers=components["provider_registry"],
    )

    yield

    # -- Shutdown: close shared httpx client --
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="Concert Companion API",
        version=config.get("app", {}).get("version", "1.0.0"),
        description=(
            "Connect a Spotify account, then find upcoming concerts for the "
            "user's top artists through the Ticketmaster Discovery API."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=settings.get_cors_origins())

    application.include_router(api_router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )

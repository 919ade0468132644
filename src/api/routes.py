"""FastAPI API routes for Concert Companion.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                                   Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/health                                GET     Health + provider config
# /api/auth/spotify/callback                 POST    Exchange OAuth code, store user + artists
# /api/user/profile/{spotifyId}              GET     Stored user + top artists
# /api/user/refresh-artists                  POST    Re-fetch top artists from Spotify
# /api/concerts/top-artists/{spotifyId}      GET     Upcoming concerts for top artists
#
# Services are resolved from ``app.state`` (populated at startup in
# main.py) through ``Annotated[T, Depends(fn)]`` aliases, so tests can
# mount this router on a bare FastAPI app with mocks on its state.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from src.api.schemas import (
    ErrorResponse,
    HealthResponse,
    RefreshArtistsRequest,
    SpotifyCallbackRequest,
    UserProfileResponse,
)
from src.models.concert import AggregationResult
from src.models.user import PublicUser
from src.services.concert_service import ConcertAggregationService
from src.services.spotify_auth_service import SpotifyAuthService
from src.utils.errors import ConcertCompanionError, NotFoundError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api")

_VERSION = "1.0.0"
_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    404: {"model": ErrorResponse, "description": "Unknown user"},
    500: {"model": ErrorResponse, "description": "Aggregation failed"},
}


# ---------------------------------------------------------------------------
# Dependency injection helpers: resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_concert_service(request: Request) -> ConcertAggregationService:
    """Return the concert aggregation service from application state."""
    return request.app.state.concert_service


def _get_auth_service(request: Request) -> SpotifyAuthService:
    """Return the Spotify auth service from application state."""
    return request.app.state.auth_service


ConcertServiceDep = Annotated[ConcertAggregationService, Depends(_get_concert_service)]
AuthServiceDep = Annotated[SpotifyAuthService, Depends(_get_auth_service)]


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _app_error_response(exc: ConcertCompanionError) -> JSONResponse:
    _logger.warning(
        "request_failed",
        error_type=type(exc).__name__,
        message=exc.message,
        provider=exc.provider_name,
    )
    return _error_response(exc.status_code, type(exc).__name__, exc.message)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health_check(request: Request) -> HealthResponse:
    """Return uptime, environment and which external providers are configured."""
    state = request.app.state
    started_at: float = getattr(state, "started_at", time.monotonic())
    providers: dict[str, Any] = dict(getattr(state, "provider_registry", {}))

    return HealthResponse(
        status="healthy" if providers.get("concert_search", False) else "degraded",
        version=_VERSION,
        timestamp=datetime.now(tz=timezone.utc),
        uptime=int(time.monotonic() - started_at),
        environment=getattr(state, "environment", "development"),
        providers=providers,
    )


# ---------------------------------------------------------------------------
# Spotify account connection
# ---------------------------------------------------------------------------


@router.post(
    "/auth/spotify/callback",
    response_model=UserProfileResponse,
    summary="Complete Spotify sign-in",
)
async def spotify_callback(
    body: SpotifyCallbackRequest,
    auth_service: AuthServiceDep,
) -> UserProfileResponse | JSONResponse:
    """Exchange the authorization code and store the user's top artists."""
    if not body.code or not body.code.strip():
        return _error_response(400, "Missing authorization code", "Request body must include a non-empty code")
    try:
        user, artists = await auth_service.complete_auth(body.code)
    except ConcertCompanionError as exc:
        return _app_error_response(exc)
    return UserProfileResponse(user=PublicUser.from_record(user), top_artists=artists)


@router.get(
    "/user/profile/{spotify_id}",
    response_model=UserProfileResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Stored profile and top artists",
)
async def get_user_profile(
    spotify_id: str,
    auth_service: AuthServiceDep,
) -> UserProfileResponse | JSONResponse:
    """Return the stored user and their ranked top artists."""
    try:
        user, artists = await auth_service.get_profile(spotify_id)
    except NotFoundError as exc:
        return _error_response(404, "User not found", exc.message)
    return UserProfileResponse(user=PublicUser.from_record(user), top_artists=artists)


@router.post(
    "/user/refresh-artists",
    response_model=UserProfileResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Refresh top artists from Spotify",
)
async def refresh_artists(
    body: RefreshArtistsRequest,
    auth_service: AuthServiceDep,
) -> UserProfileResponse | JSONResponse:
    """Replace the stored top-artist snapshot with a fresh one from Spotify."""
    try:
        user, artists = await auth_service.refresh_artists(body.spotify_id)
    except NotFoundError as exc:
        return _error_response(404, "User not found", exc.message)
    except ConcertCompanionError as exc:
        return _app_error_response(exc)
    return UserProfileResponse(user=PublicUser.from_record(user), top_artists=artists)


# ---------------------------------------------------------------------------
# Concerts
# ---------------------------------------------------------------------------


@router.get(
    "/concerts/top-artists/{spotify_id}",
    response_model=AggregationResult,
    responses=_ERROR_RESPONSES,
    summary="Upcoming concerts for a user's top artists",
)
async def concerts_for_top_artists(
    spotify_id: str,
    concert_service: ConcertServiceDep,
    limit: Annotated[str | None, Query(description="Events per artist, 1-10 (default 3)")] = None,
    artists: Annotated[str | None, Query(description="Top artists to search, 1-20 (default 5)")] = None,
    country_code: Annotated[
        str | None,
        Query(alias="countryCode", description="ISO-3166 alpha-2 override of the user's country"),
    ] = None,
) -> AggregationResult | JSONResponse:
    """Search upcoming concerts for each of the user's top artists.

    Query values are parsed leniently: anything that is not a positive
    integer falls back to the default, values above the maximum are capped.
    Per-artist search failures are reported inside ``results`` and do not
    fail the request.
    """
    try:
        return await concert_service.aggregate_for_user(
            spotify_id,
            events_per_artist=limit,
            artist_limit=artists,
            country_code=country_code,
        )
    except NotFoundError as exc:
        return _error_response(404, "User not found", exc.message)
    except ConcertCompanionError as exc:
        _logger.error(
            "concert_aggregation_failed",
            spotify_id=spotify_id,
            error_type=type(exc).__name__,
            message=exc.message,
        )
        return _error_response(500, "Failed to fetch concerts", exc.message)
    except Exception as exc:
        _logger.error(
            "concert_aggregation_crashed",
            spotify_id=spotify_id,
            error=str(exc),
            exc_info=True,
        )
        return _error_response(500, "Failed to fetch concerts", "Internal server error")

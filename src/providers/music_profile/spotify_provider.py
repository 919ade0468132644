"""Spotify Web API provider.

Wraps the accounts service (authorization-code exchange, token refresh)
and the two Web API reads the app needs: ``GET /me`` and
``GET /me/top/artists``.  Uses the injected shared ``httpx.AsyncClient``.

Error mapping:
    401 from any endpoint / ``invalid_grant``  ->  AuthenticationError
    any other error response or transport error ->  ProviderUnavailableError
    unreadable body, token payload or profile   ->  ProviderUnavailableError
    missing client credentials                  ->  ConfigurationError
"""

from __future__ import annotations

from typing import Any

import httpx

from src.config.settings import Settings
from src.interfaces.music_profile_provider import IMusicProfileProvider
from src.models.user import SpotifyTokens
from src.utils.errors import AuthenticationError, ConfigurationError, ProviderUnavailableError
from src.utils.logging import get_logger

_PROVIDER_NAME = "spotify"
_TIMEOUT = 15.0
_MAX_TOP_ARTISTS = 50  # Spotify's page-size limit for /me/top


class SpotifyProvider(IMusicProfileProvider):
    """Spotify OAuth + Web API adapter.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection pooling.
    settings:
        Supplies client credentials, redirect URI and base URLs.
    """

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings) -> None:
        self._http = http_client
        self._client_id = settings.spotify_client_id
        self._client_secret = settings.spotify_client_secret
        self._redirect_uri = settings.spotify_redirect_uri
        self._api_base = settings.spotify_api_base_url.rstrip("/")
        self._accounts_base = settings.spotify_accounts_url.rstrip("/")
        self._logger = get_logger(__name__)

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _require_credentials(self) -> None:
        if not (self._client_id and self._client_secret):
            raise ConfigurationError(
                message="Spotify client credentials not configured. "
                "Set SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET in the environment.",
                provider_name=_PROVIDER_NAME,
            )

    async def _request_token(self, form: dict[str, str]) -> SpotifyTokens:
        self._require_credentials()
        try:
            response = await self._http.post(
                f"{self._accounts_base}/api/token",
                data=form,
                auth=(self._client_id, self._client_secret),
                timeout=_TIMEOUT,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response)
            self._logger.warning(
                "spotify_token_error",
                grant_type=form.get("grant_type"),
                status=exc.response.status_code,
                error=detail,
            )
            # The accounts service answers 400 invalid_grant for used or
            # expired codes and revoked refresh tokens.
            if exc.response.status_code in (400, 401):
                raise AuthenticationError(
                    message=f"Spotify rejected the token request: {detail}",
                    provider_name=_PROVIDER_NAME,
                ) from exc
            raise ProviderUnavailableError(
                message=f"Spotify token request failed: {detail}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(
                message=f"Spotify token request failed: {str(exc) or type(exc).__name__}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        try:
            # ValidationError and JSONDecodeError are both ValueErrors.
            return SpotifyTokens.model_validate(response.json())
        except ValueError as exc:
            self._logger.warning(
                "spotify_token_unreadable",
                grant_type=form.get("grant_type"),
                error=str(exc),
            )
            raise ProviderUnavailableError(
                message="Spotify token response was not a valid token payload",
                provider_name=_PROVIDER_NAME,
            ) from exc

    async def _get(
        self,
        path: str,
        access_token: str,
        params: dict[str, Any] | None = None,
        what: str = "data",
    ) -> Any:
        try:
            response = await self._http.get(
                f"{self._api_base}{path}",
                headers={"Authorization": f"Bearer {access_token}"},
                params=params,
                timeout=_TIMEOUT,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response)
            self._logger.warning(
                "spotify_api_error",
                path=path,
                status=exc.response.status_code,
                error=detail,
            )
            if exc.response.status_code == 401:
                raise AuthenticationError(
                    message=f"Spotify access token rejected while fetching {what}",
                    provider_name=_PROVIDER_NAME,
                ) from exc
            raise ProviderUnavailableError(
                message=f"Failed to fetch {what} from Spotify",
                provider_name=_PROVIDER_NAME,
            ) from exc
        except httpx.HTTPError as exc:
            self._logger.warning("spotify_transport_error", path=path, error=str(exc))
            raise ProviderUnavailableError(
                message=f"Failed to fetch {what} from Spotify",
                provider_name=_PROVIDER_NAME,
            ) from exc
        try:
            return response.json()
        except ValueError as exc:
            self._logger.warning("spotify_body_unreadable", path=path, error=str(exc))
            raise ProviderUnavailableError(
                message=f"Spotify returned an unreadable {what} response",
                provider_name=_PROVIDER_NAME,
            ) from exc

    # ------------------------------------------------------------------
    # IMusicProfileProvider
    # ------------------------------------------------------------------

    async def exchange_code(self, code: str) -> SpotifyTokens:
        return await self._request_token(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self._redirect_uri,
            }
        )

    async def refresh_access_token(self, refresh_token: str) -> SpotifyTokens:
        return await self._request_token(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            }
        )

    async def get_user_profile(self, access_token: str) -> dict[str, Any]:
        profile = await self._get("/me", access_token, what="user profile")
        if not isinstance(profile, dict) or not profile.get("id"):
            raise ProviderUnavailableError(
                message="Spotify user profile has no id",
                provider_name=_PROVIDER_NAME,
            )
        return profile

    async def get_top_artists(
        self,
        access_token: str,
        limit: int = 20,
        time_range: str = "medium_term",
    ) -> list[dict[str, Any]]:
        """Return the user's top artists (``medium_term`` = roughly the last six months)."""
        payload = await self._get(
            "/me/top/artists",
            access_token,
            params={"limit": max(1, min(limit, _MAX_TOP_ARTISTS)), "time_range": time_range},
            what="top artists",
        )
        items = payload.get("items") if isinstance(payload, dict) else None
        return [item for item in (items or []) if isinstance(item, dict)]


def _error_detail(response: httpx.Response) -> str:
    """Extract Spotify's error text from either of its two error body shapes."""
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict):
        error = body.get("error")
        # Web API: {"error": {"status": 401, "message": "..."}}
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        # Accounts service: {"error": "invalid_grant", "error_description": "..."}
        if body.get("error_description"):
            return str(body["error_description"])
        if isinstance(error, str):
            return error
    return f"HTTP {response.status_code}"

"""Spotify account connection and top-artist snapshot maintenance.

``complete_auth`` runs the connect flow end to end:

    authorization code -> tokens -> /me profile -> upsert user
                       -> /me/top/artists -> replace stored snapshot

Authorization codes are single use, and browsers (React StrictMode, double
clicks) sometimes post the same code twice.  The exchange is therefore
wrapped in a :class:`~src.utils.concurrency.SingleFlight` latch keyed by
the code: a duplicate request that arrives while the first is running
awaits and returns the same result instead of burning the code again.
"""

from __future__ import annotations

from typing import Any

import structlog

from src.interfaces.music_profile_provider import IMusicProfileProvider
from src.interfaces.user_repository import IUserRepository
from src.models.artist import RankedArtist
from src.models.user import UserRecord
from src.utils.concurrency import SingleFlight
from src.utils.errors import AuthenticationError, NotFoundError
from src.utils.logging import get_logger

DEFAULT_TOP_ARTISTS_LIMIT = 20
DEFAULT_TIME_RANGE = "medium_term"

AuthOutcome = tuple[UserRecord, list[RankedArtist]]


class SpotifyAuthService:
    """Connects Spotify accounts and keeps their top-artist snapshots fresh."""

    def __init__(
        self,
        music_profile: IMusicProfileProvider,
        user_repository: IUserRepository,
        top_artists_limit: int = DEFAULT_TOP_ARTISTS_LIMIT,
        time_range: str = DEFAULT_TIME_RANGE,
    ) -> None:
        self._profile = music_profile
        self._users = user_repository
        self._top_artists_limit = top_artists_limit
        self._time_range = time_range
        self._exchanges: SingleFlight[AuthOutcome] = SingleFlight()
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def complete_auth(self, code: str) -> AuthOutcome:
        """Exchange ``code`` and store the user plus their top artists."""
        return await self._exchanges.run(code, lambda: self._complete_auth(code))

    async def _complete_auth(self, code: str) -> AuthOutcome:
        self._logger.info("spotify_auth_started")

        tokens = await self._profile.exchange_code(code)
        profile = await self._profile.get_user_profile(tokens.access_token)
        user = await self._users.save_user(
            profile,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=tokens.expires_in,
        )

        raw_artists = await self._fetch_top_artists(tokens.access_token)
        artists = await self._users.save_user_artists(user.id, raw_artists)

        self._logger.info(
            "spotify_auth_complete",
            user_id=user.id,
            spotify_id=user.spotify_id,
            artists=len(artists),
        )
        return user, artists

    async def get_profile(self, spotify_id: str) -> AuthOutcome:
        """Return the stored user and their ranked artists."""
        user = await self._require_user(spotify_id)
        artists = await self._users.get_ranked_artists(user.id)
        return user, artists

    async def refresh_artists(self, spotify_id: str) -> AuthOutcome:
        """Re-fetch the user's top artists from Spotify and replace the snapshot.

        An expired access token is refreshed first when a refresh token is
        stored.
        """
        user = await self._require_user(spotify_id)
        user = await self._ensure_fresh_token(user)

        raw_artists = await self._fetch_top_artists(user.access_token or "")
        artists = await self._users.save_user_artists(user.id, raw_artists)
        self._logger.info("user_artists_refreshed", spotify_id=spotify_id, artists=len(artists))
        return user, artists

    # -- Private helpers ------------------------------------------------------

    async def _require_user(self, spotify_id: str) -> UserRecord:
        user = await self._users.get_user_by_spotify_id(spotify_id)
        if user is None:
            raise NotFoundError(message=f"User {spotify_id} not found")
        return user

    async def _ensure_fresh_token(self, user: UserRecord) -> UserRecord:
        if not user.token_expired():
            return user
        if not user.refresh_token:
            raise AuthenticationError(
                message="Stored Spotify token has expired; reconnect the account",
                provider_name=self._profile.get_provider_name(),
            )
        tokens = await self._profile.refresh_access_token(user.refresh_token)
        self._logger.info("spotify_token_refreshed", user_id=user.id)
        return await self._users.update_tokens(
            user.id,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=tokens.expires_in,
        )

    async def _fetch_top_artists(self, access_token: str) -> list[dict[str, Any]]:
        return await self._profile.get_top_artists(
            access_token,
            limit=self._top_artists_limit,
            time_range=self._time_range,
        )

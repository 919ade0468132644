"""Abstract base class for user and top-artist persistence.

Stores connected Spotify users (profile plus OAuth tokens) and each
user's ranked top-artist snapshot.  The aggregation pipeline only reads
through :meth:`get_user_by_spotify_id` and :meth:`get_ranked_artists`;
the write methods are used by the Spotify connect / refresh flow.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from src.models.artist import RankedArtist
from src.models.user import UserRecord


# Concrete implementation: SQLiteUserRepository (src/providers/user_store/)
class IUserRepository(ABC):
    """Contract for user / ranked-artist storage.

    All operations are async to support network-backed stores.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    async def get_user_by_spotify_id(self, spotify_id: str) -> UserRecord | None:
        """Return the stored user for a Spotify user ID, or ``None``."""

    @abstractmethod
    async def get_ranked_artists(self, user_id: int) -> list[RankedArtist]:
        """Return a user's top artists ordered by ascending rank."""

    @abstractmethod
    async def save_user(
        self,
        profile: dict[str, Any],
        access_token: str,
        refresh_token: str | None,
        expires_in: int,
    ) -> UserRecord:
        """Insert or update a user from a Spotify ``/me`` profile payload.

        Parameters
        ----------
        profile:
            Raw Spotify profile (``id``, ``email``, ``display_name``,
            ``images``, ``country``).
        access_token, refresh_token:
            OAuth tokens to store alongside the profile.
        expires_in:
            Access-token lifetime in seconds, converted to an absolute
            ``token_expires_at``.
        """

    @abstractmethod
    async def update_tokens(
        self,
        user_id: int,
        access_token: str,
        refresh_token: str | None,
        expires_in: int,
    ) -> UserRecord:
        """Replace a user's stored tokens after a refresh.

        A ``None`` refresh token keeps the one already stored.
        """

    @abstractmethod
    async def save_user_artists(
        self,
        user_id: int,
        artists: list[dict[str, Any]],
    ) -> list[RankedArtist]:
        """Replace a user's top-artist snapshot.

        Parameters
        ----------
        artists:
            Raw Spotify artist objects in listening order; the position in
            the list becomes ``rank`` (1-based).

        Returns
        -------
        list[RankedArtist]
            The stored snapshot, rank ordered.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this repository."""

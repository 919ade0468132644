"""Abstract base class for music-streaming profile providers.

Covers the OAuth authorization-code flow plus the two reads the app needs
from the user's streaming account: their profile and their top artists.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from src.models.user import SpotifyTokens


# Concrete implementation: SpotifyProvider (src/providers/music_profile/)
class IMusicProfileProvider(ABC):
    """Contract for streaming-account access."""

    @abstractmethod
    async def exchange_code(self, code: str) -> SpotifyTokens:
        """Exchange an OAuth authorization code for access/refresh tokens."""

    @abstractmethod
    async def refresh_access_token(self, refresh_token: str) -> SpotifyTokens:
        """Obtain a new access token from a refresh token."""

    @abstractmethod
    async def get_user_profile(self, access_token: str) -> dict[str, Any]:
        """Return the raw profile of the token's owner."""

    @abstractmethod
    async def get_top_artists(
        self,
        access_token: str,
        limit: int = 20,
        time_range: str = "medium_term",
    ) -> list[dict[str, Any]]:
        """Return the owner's top artists, most listened first."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

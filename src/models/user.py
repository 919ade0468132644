"""Pydantic v2 models for connected Spotify users.

``UserRecord`` is the full stored row, OAuth tokens included, and never
leaves the service layer.  ``PublicUser`` is what the API returns.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UserRecord(BaseModel):
    """A row of the ``users`` table."""

    model_config = ConfigDict(frozen=True)

    id: int
    spotify_id: str
    email: str | None = None
    display_name: str | None = None
    profile_image_url: str | None = None
    country: str | None = Field(default=None, description="ISO-3166 alpha-2 from the Spotify profile.")
    access_token: str | None = None
    refresh_token: str | None = None
    token_expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def token_expired(self, now: datetime | None = None) -> bool:
        """Return True when the stored access token is missing or past its expiry."""
        if not self.access_token or self.token_expires_at is None:
            return True
        now = now or datetime.now(tz=timezone.utc)
        expires = self.token_expires_at
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        return expires <= now


class PublicUser(BaseModel):
    """User profile as exposed over HTTP (no tokens)."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    spotify_id: str
    email: str | None = None
    display_name: str | None = None
    profile_image_url: str | None = None
    country: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: UserRecord) -> PublicUser:
        return cls(
            id=record.id,
            spotify_id=record.spotify_id,
            email=record.email,
            display_name=record.display_name,
            profile_image_url=record.profile_image_url,
            country=record.country,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class SpotifyTokens(BaseModel):
    """Token bundle returned by the Spotify accounts service."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str | None = None
    expires_in: int = 3600
    scope: str | None = None
    token_type: str = "Bearer"

"""Pydantic request/response schemas for the Concert Companion API.

Request schemas end with ``Request``, response schemas with ``Response``.
All payloads use camelCase keys on the wire; the concert aggregation
endpoint returns :class:`~src.models.concert.AggregationResult` directly.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.models.artist import RankedArtist
from src.models.user import PublicUser

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Body returned for application errors."""

    error: str
    message: str


class HealthResponse(BaseModel):
    """Liveness plus configured-provider overview."""

    model_config = _CAMEL

    status: str
    version: str
    timestamp: datetime
    uptime: int = Field(description="Seconds since startup.")
    environment: str
    providers: dict[str, Any] = Field(default_factory=dict)


class SpotifyCallbackRequest(BaseModel):
    """Authorization code received by the web client's OAuth callback."""

    code: str | None = None


class RefreshArtistsRequest(BaseModel):
    model_config = _CAMEL

    spotify_id: str = Field(min_length=1)


class UserProfileResponse(BaseModel):
    """A connected user and their current top-artist snapshot."""

    model_config = _CAMEL

    user: PublicUser
    top_artists: list[RankedArtist] = Field(default_factory=list)

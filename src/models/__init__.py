"""Concert Companion domain models — re-exports all public model classes.

    - artist.py  -- a user's ranked top artists
    - concert.py -- per-artist concert groups and the aggregation result
    - event.py   -- provider-independent concert events
    - user.py    -- connected Spotify users and OAuth tokens
"""

from __future__ import annotations

from src.models.artist import ArtistSummary, RankedArtist
from src.models.concert import AggregationResult, ArtistConcertGroup
from src.models.event import (
    CanonicalEvent,
    EventClassification,
    EventVenue,
    PriceRange,
    SaleWindow,
)
from src.models.user import PublicUser, SpotifyTokens, UserRecord

__all__ = [
    "AggregationResult",
    "ArtistConcertGroup",
    "ArtistSummary",
    "CanonicalEvent",
    "EventClassification",
    "EventVenue",
    "PriceRange",
    "PublicUser",
    "RankedArtist",
    "SaleWindow",
    "SpotifyTokens",
    "UserRecord",
]

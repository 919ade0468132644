"""Shared pytest fixtures for the Concert Companion test suite."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config.settings import Settings
from src.interfaces.concert_search_provider import IConcertSearchProvider
from src.interfaces.music_profile_provider import IMusicProfileProvider
from src.interfaces.user_repository import IUserRepository
from src.models.artist import RankedArtist
from src.models.event import CanonicalEvent
from src.models.user import SpotifyTokens, UserRecord

# ---------------------------------------------------------------------------
# Raw Ticketmaster payloads
# ---------------------------------------------------------------------------

_SAMPLE_RAW_EVENT: dict[str, Any] = {
    "name": "Bicep Live",
    "type": "event",
    "id": "G5diZ9VkqL0Wd",
    "url": "https://www.ticketmaster.co.uk/bicep-live/event/G5diZ9VkqL0Wd",
    "locale": "en-us",
    "images": [
        {"ratio": "3_2", "url": "https://s1.ticketm.net/img/small.jpg", "width": 305, "height": 203},
        {"ratio": "16_9", "url": "https://s1.ticketm.net/img/large.jpg", "width": 1024, "height": 576},
        {"ratio": "16_9", "url": "https://s1.ticketm.net/img/huge.jpg", "width": 2048, "height": 1152},
    ],
    "sales": {
        "public": {
            "startDateTime": "2026-03-01T10:00:00Z",
            "endDateTime": "2026-11-14T22:00:00Z",
        }
    },
    "dates": {
        "start": {
            "localDate": "2026-11-14",
            "localTime": "19:30:00",
            "dateTime": "2026-11-14T19:30:00Z",
        },
        "status": {"code": "onsale"},
    },
    "classifications": [
        {
            "primary": True,
            "segment": {"id": "KZFzniwnSyZfZ7v7nJ", "name": "Music"},
            "genre": {"id": "KnvZfZ7vAvF", "name": "Dance/Electronic"},
            "subGenre": {"id": "KZazBEonSMnZfZ7vkdl", "name": "Techno"},
        },
        {
            "primary": False,
            "segment": {"name": "Music"},
            "genre": {"name": "Electronic"},
        },
    ],
    "priceRanges": [{"type": "standard", "currency": "GBP", "min": 35.5, "max": 62.0}],
    "_embedded": {
        "venues": [
            {
                "name": "Alexandra Palace",
                "city": {"name": "London"},
                "state": {"name": "Greater London", "stateCode": "LDN"},
                "country": {"name": "Great Britain", "countryCode": "GB"},
                "address": {"line1": "Alexandra Palace Way"},
                "location": {"longitude": "-0.130", "latitude": "51.594"},
            }
        ]
    },
}


@pytest.fixture
def raw_event() -> dict[str, Any]:
    """A fully populated Discovery API event (deep copy, safe to mutate)."""
    return copy.deepcopy(_SAMPLE_RAW_EVENT)


@pytest.fixture
def search_payload(raw_event: dict[str, Any]) -> dict[str, Any]:
    """A Discovery API search response wrapping two events."""
    second = copy.deepcopy(raw_event)
    second["id"] = "G5diZ9VkqL0We"
    second["dates"] = {"start": {"localDate": "2026-12-01"}}
    return {
        "_embedded": {"events": [raw_event, second]},
        "page": {"size": 5, "totalElements": 2, "totalPages": 1, "number": 0},
    }


# ---------------------------------------------------------------------------
# Domain objects
# ---------------------------------------------------------------------------


def make_user(**overrides: Any) -> UserRecord:
    fields: dict[str, Any] = {
        "id": 1,
        "spotify_id": "31abcxyz",
        "email": "listener@example.com",
        "display_name": "Listener",
        "country": "gb",
        "access_token": "access-1",
        "refresh_token": "refresh-1",
        "token_expires_at": datetime.now(tz=timezone.utc) + timedelta(hours=1),
    }
    fields.update(overrides)
    return UserRecord(**fields)


def make_artists(*names: str) -> list[RankedArtist]:
    return [
        RankedArtist(
            id=100 + position,
            name=name,
            external_id=f"sp-{position + 1}",
            rank=position + 1,
            image_url=f"https://i.scdn.co/image/{position + 1}",
        )
        for position, name in enumerate(names)
    ]


def make_events(count: int, prefix: str = "ev") -> list[CanonicalEvent]:
    return [CanonicalEvent(id=f"{prefix}-{i}", name=f"Show {i}") for i in range(count)]


@pytest.fixture
def sample_user() -> UserRecord:
    return make_user()


@pytest.fixture
def sample_artists() -> list[RankedArtist]:
    return make_artists("Bicep", "Floating Points", "Four Tet")


# ---------------------------------------------------------------------------
# Mock collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_user_repository(
    sample_user: UserRecord,
    sample_artists: list[RankedArtist],
) -> MagicMock:
    """An IUserRepository mock that knows one user with three artists."""
    repo = MagicMock(spec=IUserRepository)
    repo.get_user_by_spotify_id = AsyncMock(return_value=sample_user)
    repo.get_ranked_artists = AsyncMock(return_value=sample_artists)
    repo.save_user = AsyncMock(return_value=sample_user)
    repo.update_tokens = AsyncMock(return_value=sample_user)
    repo.save_user_artists = AsyncMock(return_value=sample_artists)
    repo.get_provider_name.return_value = "mock_users"
    return repo


@pytest.fixture
def mock_concert_search() -> MagicMock:
    """An IConcertSearchProvider mock returning two events for any artist."""
    search = MagicMock(spec=IConcertSearchProvider)
    search.search_events = AsyncMock(return_value=make_events(2))
    search.is_configured.return_value = True
    search.get_provider_name.return_value = "mock_search"
    return search


@pytest.fixture
def mock_music_profile() -> MagicMock:
    """An IMusicProfileProvider mock for the Spotify connect flow."""
    provider = MagicMock(spec=IMusicProfileProvider)
    provider.exchange_code = AsyncMock(
        return_value=SpotifyTokens(access_token="access-1", refresh_token="refresh-1", expires_in=3600)
    )
    provider.refresh_access_token = AsyncMock(
        return_value=SpotifyTokens(access_token="access-2", expires_in=3600)
    )
    provider.get_user_profile = AsyncMock(
        return_value={"id": "31abcxyz", "display_name": "Listener", "country": "GB"}
    )
    provider.get_top_artists = AsyncMock(
        return_value=[{"id": "sp-1", "name": "Bicep"}, {"id": "sp-2", "name": "Floating Points"}]
    )
    provider.get_provider_name.return_value = "spotify"
    return provider


@pytest.fixture
def app_settings() -> Settings:
    """Settings with every credential filled in and no .env lookup."""
    return Settings(
        _env_file=None,
        ticketmaster_api_key="tm-test-key",
        ticketmaster_base_url="https://tm.test/discovery/v2",
        ticketmaster_timeout=2.5,
        spotify_client_id="client-id",
        spotify_client_secret="client-secret",
        spotify_redirect_uri="http://localhost:3000/callback",
        spotify_api_base_url="https://api.spotify.test/v1",
        spotify_accounts_url="https://accounts.spotify.test",
    )


# ---------------------------------------------------------------------------
# Factory fixtures (tests build variations without importing conftest)
# ---------------------------------------------------------------------------


@pytest.fixture
def user_factory():  # noqa: ANN201
    return make_user


@pytest.fixture
def artists_factory():  # noqa: ANN201
    return make_artists


@pytest.fixture
def events_factory():  # noqa: ANN201
    return make_events

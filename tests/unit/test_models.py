"""Unit tests for Pydantic v2 domain models."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from src.models.artist import ArtistSummary, RankedArtist
from src.models.concert import AggregationResult, ArtistConcertGroup
from src.models.event import CanonicalEvent
from src.models.user import PublicUser, UserRecord


def _summary() -> ArtistSummary:
    return ArtistSummary(id=1, name="Bicep", spotify_id="sp-1", rank=1)


class TestArtistModels:
    def test_rank_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            RankedArtist(id=1, name="Bicep", external_id="sp-1", rank=0)

    def test_summary_from_ranked(self) -> None:
        ranked = RankedArtist(id=7, name="Four Tet", external_id="sp-7", rank=3, image_url="img", genres=["idm"])

        summary = ArtistSummary.from_ranked(ranked)

        assert summary.model_dump(by_alias=True) == {
            "id": 7,
            "name": "Four Tet",
            "spotifyId": "sp-7",
            "rank": 3,
            "imageUrl": "img",
        }

    def test_models_are_frozen(self) -> None:
        with pytest.raises(ValidationError):
            _summary().name = "Other"  # type: ignore[misc]


class TestArtistConcertGroup:
    def test_error_group_cannot_carry_events(self) -> None:
        with pytest.raises(ValidationError):
            ArtistConcertGroup(artist=_summary(), events=[CanonicalEvent(id="e1")], error="failed")

    def test_error_group_with_no_events(self) -> None:
        group = ArtistConcertGroup(artist=_summary(), error="failed")
        assert group.events == []

    def test_accepts_camel_case_input(self) -> None:
        result = AggregationResult.model_validate(
            {
                "generatedAt": "2026-10-19T12:00:00Z",
                "countryCode": "GB",
                "artistCount": 1,
                "totalEvents": 0,
                "results": [{"artist": {"id": 1, "name": "Bicep", "spotifyId": "sp-1", "rank": 1}}],
            }
        )
        assert result.results[0].artist.spotify_id == "sp-1"


class TestUserModels:
    def test_token_expiry(self) -> None:
        now = datetime(2026, 10, 19, 12, tzinfo=timezone.utc)
        user = UserRecord(id=1, spotify_id="x", access_token="a", token_expires_at=now + timedelta(minutes=1))

        assert not user.token_expired(now)
        assert user.token_expired(now + timedelta(minutes=2))

    def test_missing_token_counts_as_expired(self) -> None:
        assert UserRecord(id=1, spotify_id="x").token_expired()

    def test_naive_expiry_is_treated_as_utc(self) -> None:
        user = UserRecord(id=1, spotify_id="x", access_token="a", token_expires_at=datetime(2020, 1, 1))
        assert user.token_expired()

    def test_public_user_hides_tokens(self) -> None:
        record = UserRecord(id=1, spotify_id="x", access_token="secret", refresh_token="secret2")

        payload = PublicUser.from_record(record).model_dump(by_alias=True)

        assert "secret" not in repr(payload)
        assert payload["spotifyId"] == "x"

"""Unit tests for SpotifyAuthService."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.models.user import SpotifyTokens
from src.services.spotify_auth_service import SpotifyAuthService
from src.utils.errors import AuthenticationError, NotFoundError


def _service(profile: MagicMock, repo: MagicMock) -> SpotifyAuthService:
    return SpotifyAuthService(
        music_profile=profile,
        user_repository=repo,
        top_artists_limit=10,
        time_range="short_term",
    )


class TestCompleteAuth:
    @pytest.mark.asyncio
    async def test_full_flow(self, mock_music_profile: MagicMock, mock_user_repository: MagicMock) -> None:
        user, artists = await _service(mock_music_profile, mock_user_repository).complete_auth("code-1")

        mock_music_profile.exchange_code.assert_awaited_once_with("code-1")
        mock_music_profile.get_user_profile.assert_awaited_once_with("access-1")
        mock_user_repository.save_user.assert_awaited_once_with(
            {"id": "31abcxyz", "display_name": "Listener", "country": "GB"},
            access_token="access-1",
            refresh_token="refresh-1",
            expires_in=3600,
        )
        mock_music_profile.get_top_artists.assert_awaited_once_with("access-1", limit=10, time_range="short_term")
        mock_user_repository.save_user_artists.assert_awaited_once()
        assert user.spotify_id == "31abcxyz"
        assert len(artists) == 3

    @pytest.mark.asyncio
    async def test_duplicate_code_exchanged_once(
        self, mock_music_profile: MagicMock, mock_user_repository: MagicMock
    ) -> None:
        release = asyncio.Event()

        async def slow_exchange(code: str) -> SpotifyTokens:
            await release.wait()
            return SpotifyTokens(access_token="access-1", refresh_token="refresh-1")

        mock_music_profile.exchange_code = AsyncMock(side_effect=slow_exchange)
        service = _service(mock_music_profile, mock_user_repository)

        first = asyncio.create_task(service.complete_auth("same-code"))
        second = asyncio.create_task(service.complete_auth("same-code"))
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(first, second)

        assert mock_music_profile.exchange_code.await_count == 1
        assert results[0] == results[1]

    @pytest.mark.asyncio
    async def test_rejected_code_propagates(
        self, mock_music_profile: MagicMock, mock_user_repository: MagicMock
    ) -> None:
        mock_music_profile.exchange_code = AsyncMock(side_effect=AuthenticationError(message="invalid_grant"))

        with pytest.raises(AuthenticationError):
            await _service(mock_music_profile, mock_user_repository).complete_auth("bad")
        mock_user_repository.save_user.assert_not_awaited()


class TestProfileAndRefresh:
    @pytest.mark.asyncio
    async def test_get_profile(self, mock_music_profile: MagicMock, mock_user_repository: MagicMock) -> None:
        user, artists = await _service(mock_music_profile, mock_user_repository).get_profile("31abcxyz")

        assert user.id == 1
        assert [a.rank for a in artists] == [1, 2, 3]
        mock_music_profile.get_top_artists.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_user(self, mock_music_profile: MagicMock, mock_user_repository: MagicMock) -> None:
        mock_user_repository.get_user_by_spotify_id = AsyncMock(return_value=None)
        service = _service(mock_music_profile, mock_user_repository)

        with pytest.raises(NotFoundError):
            await service.get_profile("nobody")
        with pytest.raises(NotFoundError):
            await service.refresh_artists("nobody")

    @pytest.mark.asyncio
    async def test_refresh_with_valid_token(
        self, mock_music_profile: MagicMock, mock_user_repository: MagicMock
    ) -> None:
        await _service(mock_music_profile, mock_user_repository).refresh_artists("31abcxyz")

        mock_music_profile.refresh_access_token.assert_not_awaited()
        mock_music_profile.get_top_artists.assert_awaited_once_with("access-1", limit=10, time_range="short_term")
        mock_user_repository.save_user_artists.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_refresh_renews_expired_token(
        self, mock_music_profile: MagicMock, mock_user_repository: MagicMock, user_factory
    ) -> None:
        expired = user_factory(token_expires_at=datetime.now(tz=timezone.utc) - timedelta(minutes=5))
        mock_user_repository.get_user_by_spotify_id = AsyncMock(return_value=expired)
        mock_user_repository.update_tokens = AsyncMock(return_value=user_factory(access_token="access-2"))

        await _service(mock_music_profile, mock_user_repository).refresh_artists("31abcxyz")

        mock_music_profile.refresh_access_token.assert_awaited_once_with("refresh-1")
        mock_user_repository.update_tokens.assert_awaited_once_with(
            1, access_token="access-2", refresh_token=None, expires_in=3600
        )
        mock_music_profile.get_top_artists.assert_awaited_once_with("access-2", limit=10, time_range="short_term")

    @pytest.mark.asyncio
    async def test_expired_token_without_refresh_token(
        self, mock_music_profile: MagicMock, mock_user_repository: MagicMock, user_factory
    ) -> None:
        stale = user_factory(refresh_token=None, token_expires_at=datetime(2020, 1, 1, tzinfo=timezone.utc))
        mock_user_repository.get_user_by_spotify_id = AsyncMock(return_value=stale)

        with pytest.raises(AuthenticationError, match="reconnect"):
            await _service(mock_music_profile, mock_user_repository).refresh_artists("31abcxyz")

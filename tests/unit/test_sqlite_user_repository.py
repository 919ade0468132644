"""Unit tests for SQLiteUserRepository.

Each test uses a temporary SQLite database to ensure isolation.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio

from src.providers.user_store.sqlite_user_repository import SQLiteUserRepository
from src.utils.errors import NotFoundError, ProviderUnavailableError


@pytest_asyncio.fixture
async def repository(tmp_path: Path) -> SQLiteUserRepository:
    """Create and initialize a repository with a temp DB."""
    repo = SQLiteUserRepository(db_path=tmp_path / "nested" / "users.db")
    await repo.initialize()
    return repo


# ─── Sample data ─────────────────────────────────────────────────────

SPOTIFY_PROFILE = {
    "id": "31abcxyz",
    "email": "listener@example.com",
    "display_name": "Listener",
    "country": "GB",
    "images": [{"url": "https://i.scdn.co/image/me", "width": 300}],
}

TOP_ARTISTS = [
    {
        "id": "2dHHhYVRQeQmiCqfU5Ks1a",
        "name": "Bicep",
        "genres": ["electronica", "uk dance"],
        "popularity": 67,
        "images": [{"url": "https://i.scdn.co/image/bicep"}],
    },
    {"id": "4hO5GLchGO5jLxOxVMsmBh", "name": "Floating Points", "genres": [], "images": []},
    {"id": "7Eu1txygG6nJttLHbZdQOh", "name": "Four Tet"},
]


class TestUsers:
    @pytest.mark.asyncio
    async def test_initialize_creates_parent_directory(self, tmp_path: Path) -> None:
        repo = SQLiteUserRepository(db_path=tmp_path / "a" / "b" / "users.db")
        await repo.initialize()
        await repo.initialize()
        assert (tmp_path / "a" / "b" / "users.db").exists()

    @pytest.mark.asyncio
    async def test_unknown_user_is_none(self, repository: SQLiteUserRepository) -> None:
        assert await repository.get_user_by_spotify_id("nobody") is None

    @pytest.mark.asyncio
    async def test_save_and_load_user(self, repository: SQLiteUserRepository) -> None:
        saved = await repository.save_user(
            SPOTIFY_PROFILE, access_token="a1", refresh_token="r1", expires_in=3600
        )
        loaded = await repository.get_user_by_spotify_id("31abcxyz")

        assert loaded is not None
        assert loaded.id == saved.id
        assert loaded.country == "GB"
        assert loaded.profile_image_url == "https://i.scdn.co/image/me"
        assert loaded.access_token == "a1"
        assert loaded.refresh_token == "r1"
        assert not loaded.token_expired()

    @pytest.mark.asyncio
    async def test_upsert_keeps_id_and_refresh_token(self, repository: SQLiteUserRepository) -> None:
        first = await repository.save_user(
            SPOTIFY_PROFILE, access_token="a1", refresh_token="r1", expires_in=3600
        )
        second = await repository.save_user(
            {**SPOTIFY_PROFILE, "display_name": "Renamed"},
            access_token="a2",
            refresh_token=None,
            expires_in=3600,
        )

        assert second.id == first.id
        assert second.display_name == "Renamed"
        assert second.access_token == "a2"
        assert second.refresh_token == "r1"

    @pytest.mark.asyncio
    async def test_profile_without_id_is_rejected(self, repository: SQLiteUserRepository) -> None:
        with pytest.raises(ProviderUnavailableError, match="no id"):
            await repository.save_user({"display_name": "?"}, access_token="a", refresh_token=None, expires_in=60)

    @pytest.mark.asyncio
    async def test_update_tokens(self, repository: SQLiteUserRepository) -> None:
        user = await repository.save_user(SPOTIFY_PROFILE, access_token="a1", refresh_token="r1", expires_in=0)
        assert user.token_expired()

        updated = await repository.update_tokens(user.id, access_token="a2", refresh_token=None, expires_in=3600)

        assert updated.access_token == "a2"
        assert updated.refresh_token == "r1"
        assert not updated.token_expired()

    @pytest.mark.asyncio
    async def test_update_tokens_unknown_user(self, repository: SQLiteUserRepository) -> None:
        with pytest.raises(NotFoundError):
            await repository.update_tokens(999, access_token="a", refresh_token=None, expires_in=60)


class TestUserArtists:
    @pytest.mark.asyncio
    async def test_ranks_are_contiguous_from_one(self, repository: SQLiteUserRepository) -> None:
        user = await repository.save_user(SPOTIFY_PROFILE, access_token="a", refresh_token="r", expires_in=60)

        artists = await repository.save_user_artists(user.id, TOP_ARTISTS)

        assert [a.rank for a in artists] == [1, 2, 3]
        assert [a.name for a in artists] == ["Bicep", "Floating Points", "Four Tet"]
        assert artists[0].external_id == "2dHHhYVRQeQmiCqfU5Ks1a"
        assert artists[0].genres == ["electronica", "uk dance"]
        assert artists[0].popularity == 67
        assert artists[0].image_url == "https://i.scdn.co/image/bicep"
        assert artists[1].image_url is None
        assert artists[2].genres == []

    @pytest.mark.asyncio
    async def test_snapshot_is_replaced_not_merged(self, repository: SQLiteUserRepository) -> None:
        user = await repository.save_user(SPOTIFY_PROFILE, access_token="a", refresh_token="r", expires_in=60)
        await repository.save_user_artists(user.id, TOP_ARTISTS)

        replaced = await repository.save_user_artists(user.id, list(reversed(TOP_ARTISTS[:2])))

        assert [(a.rank, a.name) for a in replaced] == [(1, "Floating Points"), (2, "Bicep")]
        assert await repository.get_ranked_artists(user.id) == replaced

    @pytest.mark.asyncio
    async def test_empty_snapshot_clears_artists(self, repository: SQLiteUserRepository) -> None:
        user = await repository.save_user(SPOTIFY_PROFILE, access_token="a", refresh_token="r", expires_in=60)
        await repository.save_user_artists(user.id, TOP_ARTISTS)

        assert await repository.save_user_artists(user.id, []) == []

    @pytest.mark.asyncio
    async def test_artists_are_per_user(self, repository: SQLiteUserRepository) -> None:
        alice = await repository.save_user(SPOTIFY_PROFILE, access_token="a", refresh_token="r", expires_in=60)
        bob = await repository.save_user({"id": "bob"}, access_token="b", refresh_token=None, expires_in=60)
        await repository.save_user_artists(alice.id, TOP_ARTISTS)

        assert await repository.get_ranked_artists(bob.id) == []
        assert len(await repository.get_ranked_artists(alice.id)) == 3

    def test_provider_name(self, tmp_path: Path) -> None:
        assert SQLiteUserRepository(db_path=tmp_path / "x.db").get_provider_name() == "sqlite_users"

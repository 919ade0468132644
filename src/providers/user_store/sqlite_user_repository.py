"""SQLite-backed user and top-artist repository.

Persists connected Spotify users and their ranked top-artist snapshots to
a local SQLite database (``data/concert_companion.db`` by default).  Uses
``aiosqlite`` for async I/O; each operation opens its own connection.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from src.interfaces.user_repository import IUserRepository
from src.models.artist import RankedArtist
from src.models.user import UserRecord
from src.utils.errors import NotFoundError, ProviderUnavailableError
from src.utils.logging import get_logger

_DEFAULT_DB_PATH = Path("data/concert_companion.db")

_CREATE_TABLES_SQL = [
    """\
CREATE TABLE IF NOT EXISTS users (
    id                    INTEGER PRIMARY KEY AUTOINCREMENT,
    spotify_id            TEXT    NOT NULL UNIQUE,
    email                 TEXT,
    display_name          TEXT,
    profile_image_url     TEXT,
    country               TEXT,
    spotify_access_token  TEXT,
    spotify_refresh_token TEXT,
    token_expires_at      TEXT,
    created_at            TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at            TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
""",
    """\
CREATE TABLE IF NOT EXISTS user_artists (
    id                 INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id            INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    artist_name        TEXT    NOT NULL,
    artist_spotify_id  TEXT    NOT NULL,
    artist_image_url   TEXT,
    genres             TEXT    NOT NULL DEFAULT '[]',
    popularity         INTEGER,
    rank               INTEGER NOT NULL,
    created_at         TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    UNIQUE(user_id, rank)
);
""",
]

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_user_artists_user ON user_artists(user_id);",
]

_UPSERT_USER_SQL = """\
INSERT INTO users (
    spotify_id, email, display_name, profile_image_url, country,
    spotify_access_token, spotify_refresh_token, token_expires_at
) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(spotify_id)
DO UPDATE SET email                 = excluded.email,
              display_name          = excluded.display_name,
              profile_image_url     = excluded.profile_image_url,
              country               = excluded.country,
              spotify_access_token  = excluded.spotify_access_token,
              spotify_refresh_token = COALESCE(excluded.spotify_refresh_token, spotify_refresh_token),
              token_expires_at      = excluded.token_expires_at,
              updated_at            = strftime('%Y-%m-%dT%H:%M:%fZ', 'now');
"""

_UPDATE_TOKENS_SQL = """\
UPDATE users
SET spotify_access_token  = ?,
    spotify_refresh_token = COALESCE(?, spotify_refresh_token),
    token_expires_at      = ?,
    updated_at            = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
WHERE id = ?;
"""

_INSERT_ARTIST_SQL = """\
INSERT INTO user_artists (
    user_id, artist_name, artist_spotify_id, artist_image_url, genres, popularity, rank
) VALUES (?, ?, ?, ?, ?, ?, ?);
"""

_SELECT_USER_COLUMNS = (
    "SELECT id, spotify_id, email, display_name, profile_image_url, country, "
    "spotify_access_token, spotify_refresh_token, token_expires_at, created_at, updated_at "
    "FROM users"
)


def _first_image_url(images: Any) -> str | None:
    if isinstance(images, list) and images and isinstance(images[0], dict):
        return images[0].get("url") or None
    return None


def _expires_at(expires_in: int) -> str:
    return (datetime.now(tz=timezone.utc) + timedelta(seconds=expires_in)).isoformat()


def _row_to_user(row: aiosqlite.Row) -> UserRecord:
    r = dict(row)
    return UserRecord(
        id=r["id"],
        spotify_id=r["spotify_id"],
        email=r["email"],
        display_name=r["display_name"],
        profile_image_url=r["profile_image_url"],
        country=r["country"],
        access_token=r["spotify_access_token"],
        refresh_token=r["spotify_refresh_token"],
        token_expires_at=r["token_expires_at"],
        created_at=r["created_at"],
        updated_at=r["updated_at"],
    )


def _row_to_artist(row: aiosqlite.Row) -> RankedArtist:
    r = dict(row)
    try:
        genres = json.loads(r["genres"] or "[]")
    except json.JSONDecodeError:
        genres = []
    return RankedArtist(
        id=r["id"],
        name=r["artist_name"],
        external_id=r["artist_spotify_id"],
        rank=r["rank"],
        image_url=r["artist_image_url"],
        genres=[g for g in genres if isinstance(g, str)],
        popularity=r["popularity"],
    )


class SQLiteUserRepository(IUserRepository):
    """SQLite-backed storage for users and their top artists."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[aiosqlite.Connection]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys = ON;")
            yield db

    async def initialize(self) -> None:
        """Create the users / user_artists tables and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            for table_sql in _CREATE_TABLES_SQL:
                await db.execute(table_sql)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        self._logger.info("user_db_initialized", path=str(self._db_path))

    async def get_user_by_spotify_id(self, spotify_id: str) -> UserRecord | None:
        async with self._connection() as db:
            cursor = await db.execute(f"{_SELECT_USER_COLUMNS} WHERE spotify_id = ?", (spotify_id,))
            row = await cursor.fetchone()
        return _row_to_user(row) if row else None

    async def _get_user_by_id(self, user_id: int) -> UserRecord:
        async with self._connection() as db:
            cursor = await db.execute(f"{_SELECT_USER_COLUMNS} WHERE id = ?", (user_id,))
            row = await cursor.fetchone()
        if row is None:
            raise NotFoundError(message=f"User {user_id} not found", provider_name="sqlite")
        return _row_to_user(row)

    async def get_ranked_artists(self, user_id: int) -> list[RankedArtist]:
        """Return a user's artists, rank 1 first."""
        async with self._connection() as db:
            cursor = await db.execute(
                "SELECT id, artist_name, artist_spotify_id, artist_image_url, genres, popularity, rank "
                "FROM user_artists WHERE user_id = ? ORDER BY rank ASC",
                (user_id,),
            )
            rows = await cursor.fetchall()
        return [_row_to_artist(r) for r in rows]

    async def save_user(
        self,
        profile: dict[str, Any],
        access_token: str,
        refresh_token: str | None,
        expires_in: int,
    ) -> UserRecord:
        """Upsert a user keyed on ``spotify_id``.  Returns the stored row."""
        spotify_id = profile.get("id")
        if not spotify_id:
            raise ProviderUnavailableError(
                message="Spotify profile has no id",
                provider_name="spotify",
            )

        async with self._connection() as db:
            await db.execute(
                _UPSERT_USER_SQL,
                (
                    spotify_id,
                    profile.get("email"),
                    profile.get("display_name"),
                    _first_image_url(profile.get("images")),
                    profile.get("country"),
                    access_token,
                    refresh_token,
                    _expires_at(expires_in),
                ),
            )
            await db.commit()
            cursor = await db.execute(f"{_SELECT_USER_COLUMNS} WHERE spotify_id = ?", (spotify_id,))
            row = await cursor.fetchone()

        user = _row_to_user(row)
        self._logger.info("user_saved", user_id=user.id, spotify_id=spotify_id)
        return user

    async def update_tokens(
        self,
        user_id: int,
        access_token: str,
        refresh_token: str | None,
        expires_in: int,
    ) -> UserRecord:
        async with self._connection() as db:
            await db.execute(
                _UPDATE_TOKENS_SQL,
                (access_token, refresh_token, _expires_at(expires_in), user_id),
            )
            await db.commit()
        return await self._get_user_by_id(user_id)

    async def save_user_artists(
        self,
        user_id: int,
        artists: list[dict[str, Any]],
    ) -> list[RankedArtist]:
        """Replace the user's snapshot in one transaction; rank = position + 1."""
        rows = [
            (
                user_id,
                artist.get("name") or "",
                artist.get("id") or "",
                _first_image_url(artist.get("images")),
                json.dumps(artist.get("genres") or []),
                artist.get("popularity"),
                position + 1,
            )
            for position, artist in enumerate(artists)
        ]

        async with self._connection() as db:
            await db.execute("DELETE FROM user_artists WHERE user_id = ?", (user_id,))
            if rows:
                await db.executemany(_INSERT_ARTIST_SQL, rows)
            await db.commit()

        self._logger.info("user_artists_saved", user_id=user_id, count=len(rows))
        return await self.get_ranked_artists(user_id)

    def get_provider_name(self) -> str:
        return "sqlite_users"

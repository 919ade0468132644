"""Per-user concert aggregation across a user's top artists.

Architecture role: **Fan-out / join-all orchestrator**
------------------------------------------------------
For one user this service

1. resolves the user and their ranked artist list through the injected
   :class:`~src.interfaces.user_repository.IUserRepository` (two
   sequential reads: the artist query needs the resolved user id),
2. prefix-takes the top ``artist_limit`` artists,
3. fans out one concert search per artist through the injected
   :class:`~src.interfaces.concert_search_provider.IConcertSearchProvider`,
   bounded by a request-scoped semaphore,
4. waits for every branch to settle (``return_exceptions=True``) and
   assembles an :class:`~src.models.concert.AggregationResult` in rank
   order.

Partial-failure contract: a failing search is recorded as ``error`` on
that artist's group with no events; the other artists are unaffected and
the request still succeeds.  Only a missing provider credential
(:class:`ConfigurationError`) fails the whole request.

Nothing is cached between requests.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from src.interfaces.concert_search_provider import IConcertSearchProvider
from src.interfaces.user_repository import IUserRepository
from src.models.artist import ArtistSummary, RankedArtist
from src.models.concert import AggregationResult, ArtistConcertGroup
from src.models.event import CanonicalEvent
from src.utils.concurrency import throttled_gather
from src.utils.errors import ConfigurationError, NotFoundError
from src.utils.logging import get_logger

DEFAULT_EVENTS_PER_ARTIST = 3
MAX_EVENTS_PER_ARTIST = 10
DEFAULT_ARTIST_LIMIT = 5
MAX_ARTIST_LIMIT = 20
DEFAULT_MAX_CONCURRENCY = 5


def clamp_limit(value: int | str | None, default: int, maximum: int) -> int:
    """Clamp a caller-supplied limit into ``[1, maximum]``.

    Missing, non-numeric, zero and negative values fall back to ``default``;
    values above ``maximum`` are capped.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number < 1:
        return default
    return min(number, maximum)


def resolve_country_code(override: str | None, stored: str | None) -> str | None:
    """Request override first, then the user's stored country, upper-cased."""
    for candidate in (override, stored):
        if candidate and candidate.strip():
            return candidate.strip().upper()
    return None


class ConcertAggregationService:
    """Finds upcoming concerts for a user's top artists.

    Parameters
    ----------
    user_repository:
        Source of users and their ranked artists.
    concert_search:
        Concert search provider, called once per selected artist.
    max_concurrency:
        Upper bound on searches in flight for a single request.
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        concert_search: IConcertSearchProvider,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        self._users = user_repository
        self._search = concert_search
        self._max_concurrency = max(1, max_concurrency)
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # -- Public API -----------------------------------------------------------

    async def aggregate_for_user(
        self,
        spotify_id: str,
        events_per_artist: int | str | None = None,
        artist_limit: int | str | None = None,
        country_code: str | None = None,
    ) -> AggregationResult:
        """Collect upcoming concerts for the user's top artists.

        Parameters
        ----------
        spotify_id:
            The user's Spotify ID.
        events_per_artist:
            Events kept per artist; clamped to [1, 10], default 3.
        artist_limit:
            Number of top artists searched; clamped to [1, 20], default 5.
        country_code:
            Optional ISO-3166 alpha-2 override of the user's stored country.

        Raises
        ------
        NotFoundError
            No stored user has this Spotify ID.
        ConfigurationError
            The search provider has no credential.
        """
        per_artist = clamp_limit(events_per_artist, DEFAULT_EVENTS_PER_ARTIST, MAX_EVENTS_PER_ARTIST)
        limit = clamp_limit(artist_limit, DEFAULT_ARTIST_LIMIT, MAX_ARTIST_LIMIT)

        user = await self._users.get_user_by_spotify_id(spotify_id)
        if user is None:
            raise NotFoundError(message=f"User {spotify_id} not found")

        resolved_country = resolve_country_code(country_code, user.country)

        artists = await self._users.get_ranked_artists(user.id)
        if not artists:
            self._logger.info("aggregation_no_artists", spotify_id=spotify_id)
            return AggregationResult(
                generated_at=datetime.now(tz=timezone.utc),
                country_code=resolved_country,
                artist_count=0,
                total_events=0,
                results=[],
            )

        selected = artists[:limit]
        self._logger.info(
            "aggregation_started",
            spotify_id=spotify_id,
            artists=len(selected),
            events_per_artist=per_artist,
            country_code=resolved_country,
        )

        outcomes = await throttled_gather(
            [self._search.search_events(a.name, per_artist, resolved_country) for a in selected],
            limit=self._max_concurrency,
            return_exceptions=True,
        )

        groups = [
            self._build_group(artist, outcome, per_artist)
            for artist, outcome in zip(selected, outcomes)
        ]

        total_events = sum(len(group.events) for group in groups)
        failed = sum(1 for group in groups if group.error is not None)

        result = AggregationResult(
            generated_at=datetime.now(tz=timezone.utc),
            country_code=resolved_country,
            artist_count=len(selected),
            total_events=total_events,
            results=groups,
        )
        self._logger.info(
            "aggregation_complete",
            spotify_id=spotify_id,
            artists=len(selected),
            total_events=total_events,
            failed_artists=failed,
        )
        return result

    # -- Private helpers ------------------------------------------------------

    def _build_group(
        self,
        artist: RankedArtist,
        outcome: list[CanonicalEvent] | BaseException,
        per_artist: int,
    ) -> ArtistConcertGroup:
        summary = ArtistSummary.from_ranked(artist)

        if isinstance(outcome, ConfigurationError):
            raise outcome
        if isinstance(outcome, Exception):
            self._logger.warning(
                "concert_search_failed",
                artist=artist.name,
                rank=artist.rank,
                error=str(outcome),
            )
            message = getattr(outcome, "message", None) or str(outcome) or type(outcome).__name__
            return ArtistConcertGroup(artist=summary, events=[], error=message)
        if isinstance(outcome, BaseException):
            # KeyboardInterrupt / CancelledError are not per-artist failures.
            raise outcome

        return ArtistConcertGroup(artist=summary, events=list(outcome)[:per_artist])

"""Ticketmaster Discovery API concert search provider.

Issues one ``GET /events.json`` keyword search per call and converts the
embedded events through :func:`~src.services.event_normalizer.normalize_events`.

Single attempt per call: no retry, no backoff.  Every request carries an
explicit timeout so a stalled search cannot hold a fan-out open
indefinitely; a timeout surfaces as :class:`SearchError` like any other
transport failure.

Follows the same adapter pattern as the other providers: injected
``httpx.AsyncClient`` (shared, closed by the application lifespan),
settings passed at construction, structured logging.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from src.config.settings import Settings
from src.interfaces.concert_search_provider import IConcertSearchProvider
from src.models.event import CanonicalEvent
from src.services.event_normalizer import normalize_events
from src.utils.errors import ConfigurationError, SearchError
from src.utils.logging import get_logger

_PROVIDER_NAME = "ticketmaster"
_DEFAULT_PAGE_SIZE = 5
_MUSIC_SEGMENT = "Music"


def _provider_message(response: httpx.Response) -> str | None:
    """Best human-readable error text from a Discovery API error body.

    Apigee faults (bad key, quota) come as ``{"fault": {"faultstring": ...}}``;
    other errors sometimes carry a top-level ``message``.
    """
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, Mapping):
        return None

    fault = body.get("fault")
    if isinstance(fault, Mapping) and fault.get("faultstring"):
        return str(fault["faultstring"])
    if body.get("message"):
        return str(body["message"])
    return None


class TicketmasterProvider(IConcertSearchProvider):
    """Searches Ticketmaster for upcoming music events by artist keyword.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection pooling.
    settings:
        Supplies ``ticketmaster_api_key``, ``ticketmaster_base_url`` and
        ``ticketmaster_timeout``.
    """

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings) -> None:
        self._http = http_client
        self._api_key = settings.ticketmaster_api_key
        self._base_url = settings.ticketmaster_base_url.rstrip("/")
        self._timeout = settings.ticketmaster_timeout
        self._logger = get_logger(__name__)

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    def _build_params(
        self,
        artist_name: str,
        max_results: int,
        country_code: str | None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "apikey": self._api_key,
            "keyword": artist_name,
            "size": max_results,
            "sort": "date,asc",
            "segmentName": _MUSIC_SEGMENT,
            "locale": "*",
        }
        if country_code:
            params["countryCode"] = country_code
        return params

    async def search_events(
        self,
        artist_name: str,
        max_results: int = _DEFAULT_PAGE_SIZE,
        country_code: str | None = None,
    ) -> list[CanonicalEvent]:
        """Search upcoming music events for ``artist_name``.

        Raises
        ------
        ConfigurationError
            ``TICKETMASTER_API_KEY`` is not set.  Checked before anything else.
        SearchError
            Non-404 error response, transport failure, or an unreadable body.
        """
        if not self._api_key:
            raise ConfigurationError(
                message="Ticketmaster API key not configured. Set TICKETMASTER_API_KEY in the environment.",
                provider_name=_PROVIDER_NAME,
            )

        if not artist_name or not artist_name.strip():
            return []

        url = f"{self._base_url}/events.json"
        params = self._build_params(artist_name, max_results, country_code)

        try:
            response = await self._http.get(url, params=params, timeout=self._timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status == 404:
                self._logger.debug("ticketmaster_no_events", artist=artist_name)
                return []
            message = _provider_message(exc.response) or str(exc)
            self._logger.warning(
                "ticketmaster_search_error",
                artist=artist_name,
                status=status,
                error=message,
            )
            raise SearchError(
                message=f"Failed to fetch concerts for {artist_name}: {message}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        except httpx.HTTPError as exc:
            # httpx timeouts often carry an empty message.
            message = str(exc) or type(exc).__name__
            self._logger.warning(
                "ticketmaster_transport_error",
                artist=artist_name,
                error=message,
            )
            raise SearchError(
                message=f"Failed to fetch concerts for {artist_name}: {message}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise SearchError(
                message=f"Failed to fetch concerts for {artist_name}: invalid JSON in response",
                provider_name=_PROVIDER_NAME,
            ) from exc

        embedded = payload.get("_embedded") if isinstance(payload, Mapping) else None
        raw_events = embedded.get("events") if isinstance(embedded, Mapping) else None
        events = normalize_events(raw_events)

        self._logger.debug(
            "ticketmaster_search_complete",
            artist=artist_name,
            country_code=country_code,
            events=len(events),
        )
        return events

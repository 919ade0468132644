"""Abstract base class for concert/event search providers.

Defines the contract for looking up upcoming shows by artist name.  The
concrete implementation wraps Ticketmaster's Discovery API; a Songkick or
Bandsintown adapter would implement the same interface and the
aggregation service would not change.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.event import CanonicalEvent


# Concrete implementation: TicketmasterProvider (src/providers/event/)
class IConcertSearchProvider(ABC):
    """Contract for keyword-based concert search."""

    @abstractmethod
    async def search_events(
        self,
        artist_name: str,
        max_results: int = 5,
        country_code: str | None = None,
    ) -> list[CanonicalEvent]:
        """Return upcoming music events for an artist, soonest first.

        Parameters
        ----------
        artist_name:
            Keyword to search for.  An empty name returns ``[]`` without
            contacting the provider.
        max_results:
            Page size requested from the provider.
        country_code:
            Optional ISO-3166 alpha-2 filter.

        Returns
        -------
        list[CanonicalEvent]
            Zero or more normalized events.  A provider "not found"
            response is an empty list, not an error.

        Raises
        ------
        src.utils.errors.ConfigurationError
            If the provider credential is missing (raised before any I/O).
        src.utils.errors.SearchError
            If the provider answers with any other error or cannot be reached.
        """

    @abstractmethod
    def is_configured(self) -> bool:
        """Return True when the provider has the credentials it needs."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

"""Pydantic v2 models for normalized concert events.

A :class:`CanonicalEvent` is the provider-independent shape every concert
search result is converted into.  All models are frozen and serialize with
camelCase keys (``imageUrl``, ``saleWindow``, ``subGenre``).

Every field is always present in the serialized output.  A value the
provider did not supply is ``None`` (JSON ``null``), never an empty string
and never a missing key, so clients can tell "unknown" apart from "empty".
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_EVENT_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class SaleWindow(BaseModel):
    """Public on-sale window, ISO-8601 timestamps."""

    model_config = _EVENT_CONFIG

    start: str | None = None
    end: str | None = None


class PriceRange(BaseModel):
    """Ticket price range.  No currency is assumed when the provider omits it."""

    model_config = _EVENT_CONFIG

    min: float | None = None
    max: float | None = None
    currency: str | None = None


class EventVenue(BaseModel):
    """Where an event takes place."""

    model_config = _EVENT_CONFIG

    name: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class EventClassification(BaseModel):
    """One genre / sub-genre / segment triple.  Each part is independently nullable."""

    model_config = _EVENT_CONFIG

    genre: str | None = None
    sub_genre: str | None = None
    segment: str | None = None


class CanonicalEvent(BaseModel):
    """A concert or show normalized from a provider's raw event record."""

    model_config = _EVENT_CONFIG

    id: str | None = Field(default=None, description="Provider-assigned event ID.")
    name: str | None = None
    url: str | None = Field(default=None, description="Ticket purchase link.")
    date: str | None = Field(
        default=None,
        description="ISO-8601 date or date-time; null when the date is TBA.",
    )
    sale_window: SaleWindow = Field(default_factory=SaleWindow)
    status: str | None = Field(default=None, description="Provider status code, e.g. 'onsale'.")
    image_url: str | None = None
    price: PriceRange = Field(default_factory=PriceRange)
    venue: EventVenue = Field(default_factory=EventVenue)
    classifications: list[EventClassification] = Field(default_factory=list)

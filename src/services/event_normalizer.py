"""Ticketmaster Discovery event payload -> :class:`CanonicalEvent`.

Pure transformation: no I/O, no state.  The Discovery API nests almost
everything optionally (``_embedded.venues[0].city.name``,
``dates.start.localTime``, ``priceRanges[0].currency``, ...), and any level
may be missing, ``null`` or of an unexpected type.  Every lookup therefore
goes through the small ``_mapping`` / ``_first`` / ``_text`` / ``_number``
helpers, which degrade to ``None`` instead of raising.

Only a top-level input that is not a mapping at all is rejected (``None``
is returned and callers drop it).
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from src.models.event import (
    CanonicalEvent,
    EventClassification,
    EventVenue,
    PriceRange,
    SaleWindow,
)

# Smallest image width considered good enough for an event card.
MIN_IMAGE_WIDTH = 640


# ---------------------------------------------------------------------------
# Absence-tolerant accessors
# ---------------------------------------------------------------------------


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _first(value: Any) -> Mapping[str, Any]:
    """First element of a list if it is a mapping, else an empty mapping."""
    items = _list(value)
    return _mapping(items[0]) if items else {}


def _text(value: Any) -> str | None:
    """Non-empty string, or None.  Numbers are stringified (IDs are sometimes numeric)."""
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _number(value: Any) -> float | None:
    """Parse ints, floats and numeric strings; anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _name_of(value: Any) -> str | None:
    return _text(_mapping(value).get("name"))


# ---------------------------------------------------------------------------
# Field resolvers
# ---------------------------------------------------------------------------


def resolve_date(dates: Any) -> str | None:
    """Combined date-time, else local date plus optional local time, else None."""
    start = _mapping(_mapping(dates).get("start"))

    date_time = _text(start.get("dateTime"))
    if date_time:
        return date_time

    local_date = _text(start.get("localDate"))
    if not local_date:
        return None
    local_time = _text(start.get("localTime"))
    return f"{local_date}T{local_time}" if local_time else local_date


def resolve_image_url(images: Any) -> str | None:
    """First image at least ``MIN_IMAGE_WIDTH`` wide, falling back to the first image."""
    candidates = [_mapping(image) for image in _list(images)]
    if not candidates:
        return None

    for image in candidates:
        width = _number(image.get("width"))
        if width is not None and width >= MIN_IMAGE_WIDTH:
            return _text(image.get("url"))

    return _text(candidates[0].get("url"))


def resolve_price(price_ranges: Any) -> PriceRange:
    price = _first(price_ranges)
    return PriceRange(
        min=_number(price.get("min")),
        max=_number(price.get("max")),
        currency=_text(price.get("currency")),
    )


def resolve_venue(embedded: Any) -> EventVenue:
    venue = _first(_mapping(embedded).get("venues"))
    state = _mapping(venue.get("state"))
    location = _mapping(venue.get("location"))

    return EventVenue(
        name=_text(venue.get("name")),
        city=_name_of(venue.get("city")),
        # Full state name reads better than the postal code.
        state=_text(state.get("name")) or _text(state.get("stateCode")),
        country=_text(_mapping(venue.get("country")).get("countryCode")),
        address=_text(_mapping(venue.get("address")).get("line1")),
        latitude=_number(location.get("latitude")),
        longitude=_number(location.get("longitude")),
    )


def resolve_classifications(classifications: Any) -> list[EventClassification]:
    return [
        EventClassification(
            genre=_name_of(entry.get("genre")),
            sub_genre=_name_of(entry.get("subGenre")),
            segment=_name_of(entry.get("segment")),
        )
        for entry in (_mapping(item) for item in _list(classifications))
    ]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize_event(raw: Any) -> CanonicalEvent | None:
    """Convert one raw Discovery API event into a :class:`CanonicalEvent`.

    Args:
        raw: A single element of ``_embedded.events`` from the search response.

    Returns:
        The normalized event, or ``None`` when ``raw`` is not an object.
    """
    if not isinstance(raw, Mapping):
        return None

    dates = raw.get("dates")
    public_sale = _mapping(_mapping(raw.get("sales")).get("public"))

    return CanonicalEvent(
        id=_text(raw.get("id")),
        name=_text(raw.get("name")),
        url=_text(raw.get("url")),
        date=resolve_date(dates),
        sale_window=SaleWindow(
            start=_text(public_sale.get("startDateTime")),
            end=_text(public_sale.get("endDateTime")),
        ),
        status=_text(_mapping(_mapping(dates).get("status")).get("code")),
        image_url=resolve_image_url(raw.get("images")),
        price=resolve_price(raw.get("priceRanges")),
        venue=resolve_venue(raw.get("_embedded")),
        classifications=resolve_classifications(raw.get("classifications")),
    )


def normalize_events(raw_events: Any) -> list[CanonicalEvent]:
    """Normalize a list of raw events, dropping entries that are not objects."""
    events = (normalize_event(raw) for raw in _list(raw_events))
    return [event for event in events if event is not None]

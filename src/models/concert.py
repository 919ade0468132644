"""Pydantic v2 models for the per-user concert aggregation result."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from src.models.artist import ArtistSummary
from src.models.event import CanonicalEvent

_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ArtistConcertGroup(BaseModel):
    """Upcoming events for one artist, or the reason the search failed."""

    model_config = _CONFIG

    artist: ArtistSummary
    events: list[CanonicalEvent] = Field(default_factory=list)
    error: str | None = Field(
        default=None,
        description="Search failure message for this artist; events is empty when set.",
    )

    @model_validator(mode="after")
    def _no_events_on_error(self) -> ArtistConcertGroup:
        if self.error is not None and self.events:
            raise ValueError("a failed artist group cannot carry events")
        return self


class AggregationResult(BaseModel):
    """Top-level response of the concerts-for-top-artists endpoint."""

    model_config = _CONFIG

    generated_at: datetime
    country_code: str | None = None
    artist_count: int = Field(ge=0, description="Number of artists actually searched.")
    total_events: int = Field(default=0, ge=0)
    results: list[ArtistConcertGroup] = Field(default_factory=list)

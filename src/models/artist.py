"""Pydantic v2 models for a user's stored top artists."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RankedArtist(BaseModel):
    """One entry of a user's top-artist snapshot.

    Ranks within a user's list are unique and contiguous from 1 (the most
    listened artist).  The list is replaced wholesale on every refresh.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: int = Field(description="Row ID in the user_artists table.")
    name: str
    external_id: str = Field(description="Spotify artist ID.")
    rank: int = Field(ge=1)
    image_url: str | None = None
    genres: list[str] = Field(default_factory=list)
    popularity: int | None = None


class ArtistSummary(BaseModel):
    """The slice of a :class:`RankedArtist` echoed back next to its concerts."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    spotify_id: str
    rank: int
    image_url: str | None = None

    @classmethod
    def from_ranked(cls, artist: RankedArtist) -> ArtistSummary:
        return cls(
            id=artist.id,
            name=artist.name,
            spotify_id=artist.external_id,
            rank=artist.rank,
            image_url=artist.image_url,
        )

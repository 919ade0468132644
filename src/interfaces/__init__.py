"""Public interface definitions for all external collaborators.

Every external API or store is accessed through the abstract base classes
in this package.  Concrete adapters live in ``src/providers/`` and are
constructed once in ``src/main.py`` at startup, then injected into the
services.  Tests inject mocks built from the same interfaces.

    Interface                 →  Concrete implementation
    ─────────────────────────────────────────────────────────────
    IConcertSearchProvider    →  TicketmasterProvider
    IMusicProfileProvider     →  SpotifyProvider
    IUserRepository           →  SQLiteUserRepository
"""

from src.interfaces.concert_search_provider import IConcertSearchProvider
from src.interfaces.music_profile_provider import IMusicProfileProvider
from src.interfaces.user_repository import IUserRepository

__all__ = [
    "IConcertSearchProvider",
    "IMusicProfileProvider",
    "IUserRepository",
]

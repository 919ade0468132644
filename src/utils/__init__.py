"""Utility modules for Concert Companion.

- **errors** -- Domain exception hierarchy rooted at ConcertCompanionError;
  each class carries the HTTP status the API maps it to.
- **concurrency** -- Semaphore-bounded fan-out (``throttled_gather``) and a
  keyed single-flight latch for idempotent one-shot operations.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    AuthenticationError,
    ConcertCompanionError,
    ConfigurationError,
    NotFoundError,
    ProviderUnavailableError,
    SearchError,
)

# -- Async concurrency helpers ---------------------------------------------
from src.utils.concurrency import SingleFlight, throttled_gather

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

__all__ = [
    "AuthenticationError",
    "ConcertCompanionError",
    "ConfigurationError",
    "NotFoundError",
    "ProviderUnavailableError",
    "SearchError",
    "SingleFlight",
    "configure_logging",
    "get_logger",
    "throttled_gather",
]

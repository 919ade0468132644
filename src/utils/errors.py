"""Custom exception hierarchy for Concert Companion.

All application exceptions inherit from :class:`ConcertCompanionError`,
which carries an optional ``provider_name`` so error handlers can identify
which external service (e.g. "ticketmaster", "spotify") caused the failure.

The hierarchy is organized by how callers react to a failure:

    ConcertCompanionError      (base -- catch-all for any application error)
    +-- ConfigurationError       (missing credential / invalid settings)
    +-- NotFoundError            (user or record does not exist)
    +-- SearchError              (one concert search failed)
    +-- ProviderUnavailableError (external service down / unreachable)
    +-- AuthenticationError      (external service rejected our credentials)

``ConfigurationError`` and ``NotFoundError`` are request-fatal.
``SearchError`` is contained per artist by the aggregation service and
embedded in the response as data.

Each class exposes a ``status_code`` used by
:class:`~src.api.middleware.ErrorHandlingMiddleware` when the error escapes
a route handler.
"""


class ConcertCompanionError(Exception):
    """Base exception for all Concert Companion errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[ticketmaster] Invalid ApiKey``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Request-fatal errors
# ---------------------------------------------------------------------------

class ConfigurationError(ConcertCompanionError):
    """Raised when a required credential or setting is missing.

    Not retryable without operator intervention, so it must stay distinct
    from :class:`SearchError` in logs and responses.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NotFoundError(ConcertCompanionError):
    """Raised when a requested user (or other record) does not exist."""

    status_code = 404

    def __init__(
        self,
        message: str = "Resource not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service errors
# ---------------------------------------------------------------------------

class SearchError(ConcertCompanionError):
    """Raised when a single concert search fails (non-404 response or transport error)."""

    status_code = 502

    def __init__(
        self,
        message: str = "Concert search failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderUnavailableError(ConcertCompanionError):
    """Raised when an external service is unreachable or returns an error."""

    status_code = 502

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class AuthenticationError(ConcertCompanionError):
    """Raised when an external service rejects a token or authorization code."""

    status_code = 401

    def __init__(
        self,
        message: str = "Authentication with external service failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)

"""Custom exception hierarchy for gameScout.

All application exceptions inherit from :class:`GameScoutError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "rawg", "sqlite_recommendations") caused
the failure.

The hierarchy is organized by pipeline stage:

    GameScoutError  (base -- catch-all for any gameScout error)
    +-- UnauthenticatedError       (no resolved user identity)
    +-- ContextLoadError           (saved games / profile could not be read)
    +-- GenerationUnavailableError (LLM unreachable, quota, auth failure)
    +-- GenerationParseError       (LLM replied with an unusable structure)
    +-- UpstreamUnavailableError   (catalog API non-2xx / network error)
    +-- EnrichmentError            (one item's catalog lookup failed)
    +-- PersistenceError           (snapshot / library storage failure)
    +-- ProfileConflictError       (username already held by another user)
    +-- ConfigurationError         (startup / missing config)

Fatal errors (generation, context load, auth) abort a request.  Enrichment
and snapshot persistence errors are contained by the pipeline and never
reach the caller.
"""


class GameScoutError(Exception):
    """Base exception for all gameScout errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[openai] Rate limit exceeded``.
    """

    # Whether a client may reasonably retry the same request.
    retryable: bool = False

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
# Request preconditions
# ---------------------------------------------------------------------------

class UnauthenticatedError(GameScoutError):
    """Raised when a request carries no valid user identity."""

    def __init__(
        self,
        message: str = "Not authenticated",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ContextLoadError(GameScoutError):
    """Raised when the user's saved games or profile cannot be loaded."""

    def __init__(
        self,
        message: str = "Could not load saved games",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Generation errors (fatal to the request, safe to retry)
# ---------------------------------------------------------------------------

class GenerationUnavailableError(GameScoutError):
    """Raised when the generative model cannot be reached or refuses the call."""

    retryable = True

    def __init__(
        self,
        message: str = "Recommendation model is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class GenerationParseError(GameScoutError):
    """Raised when the generative model's reply is not a usable JSON structure."""

    retryable = True

    def __init__(
        self,
        message: str = "Could not parse recommendations from the model reply",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Catalog errors
# ---------------------------------------------------------------------------

class UpstreamUnavailableError(GameScoutError):
    """Raised when the game catalog API returns non-2xx or is unreachable.

    The gateway never retries; callers decide whether to retry or degrade.
    """

    retryable = True

    def __init__(
        self,
        message: str = "Game catalog is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EnrichmentError(GameScoutError):
    """Raised when one recommendation's catalog lookup fails or times out.

    Only ever seen inside the enricher, which degrades the item to a null
    image and catalog id.
    """

    def __init__(
        self,
        message: str = "Catalog lookup for recommendation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Storage / configuration errors
# ---------------------------------------------------------------------------

class PersistenceError(GameScoutError):
    """Raised when a storage read or write fails."""

    def __init__(
        self,
        message: str = "Storage operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(GameScoutError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProfileConflictError(GameScoutError):
    """Raised when a profile update collides with another user's profile.

    The only such collision is a username that is already taken.
    """

    def __init__(
        self,
        message: str = "That username is already taken",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)

"""Utility modules for gameScout.

Available utility modules (all re-exported here for convenience):

- **errors** -- Domain-specific exception hierarchy rooted at GameScoutError;
  each pipeline stage raises its own subclass so callers can handle failures
  granularly without broad ``except Exception`` blocks.
- **concurrency** -- per-task timeout racing for fan-out calls such as the
  recommendation enrichment lookups.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    ConfigurationError,
    ContextLoadError,
    EnrichmentError,
    GameScoutError,
    GenerationParseError,
    GenerationUnavailableError,
    PersistenceError,
    ProfileConflictError,
    UnauthenticatedError,
    UpstreamUnavailableError,
)

# -- Async concurrency helpers ---------------------------------------------
from src.utils.concurrency import race_with_timeout, timed_gather

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "ContextLoadError",
    "EnrichmentError",
    "GameScoutError",
    "GenerationParseError",
    "GenerationUnavailableError",
    "PersistenceError",
    "ProfileConflictError",
    "UnauthenticatedError",
    "UpstreamUnavailableError",
    "configure_logging",
    "get_logger",
    "race_with_timeout",
    "timed_gather",
]

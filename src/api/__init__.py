"""gameScout API layer: routes, schemas, auth, and middleware."""

from src.api.middleware import (
    RequestLoggingMiddleware,
    configure_cors,
    configure_error_handlers,
)
from src.api.routes import router
from src.api.schemas import (
    ErrorResponse,
    HealthResponse,
    RecommendationsResponse,
)

__all__ = [
    "RequestLoggingMiddleware",
    "configure_cors",
    "configure_error_handlers",
    "router",
    "ErrorResponse",
    "HealthResponse",
    "RecommendationsResponse",
]

"""gameScout FastAPI application entry point.

Wires together all providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml``, and configures
structured logging.

Also exposes :func:`build_components` so the CLI can run the recommendation
pipeline outside the web server with the same wiring.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    RequestLoggingMiddleware,
    configure_cors,
    configure_error_handlers,
)
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.interfaces.llm_provider import ILLMProvider
from src.pipeline.orchestrator import RecommendationOrchestrator
from src.providers.catalog.rawg_provider import RawgCatalogProvider
from src.providers.library.sqlite_library_provider import SQLiteLibraryProvider
from src.providers.llm.anthropic_provider import AnthropicLLMProvider
from src.providers.llm.ollama_provider import OllamaLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider
from src.providers.store.sqlite_recommendation_store import SQLiteRecommendationStore
from src.services.chat_recommender import ChatRecommender
from src.services.recommendation_enricher import RecommendationEnricher
from src.services.recommendation_generator import GenerativeRecommender
from src.utils.logging import configure_logging, get_logger

_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=config["logging"]["level"],
    json_output=(config["app"]["env"] == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# LLM provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider:
    """Select the first available LLM provider based on configured API keys.

    Priority order: OpenAI -> Anthropic -> Ollama (no key needed).
    """
    if app_settings.openai_api_key:
        return OpenAILLMProvider(settings=app_settings)
    if app_settings.anthropic_api_key:
        return AnthropicLLMProvider(settings=app_settings)
    return OllamaLLMProvider(settings=app_settings)


def build_components(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    The caller owns ``http_client`` and must close it.
    """
    reco_cfg = app_config["recommendations"]
    chat_cfg = app_config["chat"]
    explain_cfg = app_config["explain"]
    catalog_cfg = app_config["catalog"]
    db_path = app_config.get("storage", {}).get("database_path", app_settings.database_path)

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(catalog_cfg["request_timeout"]))

    # -- Providers --
    llm = _build_llm_provider(app_settings)
    catalog = RawgCatalogProvider(settings=app_settings, http_client=http_client)
    library = SQLiteLibraryProvider(db_path=db_path)
    store = SQLiteRecommendationStore(db_path=db_path)

    # -- Services --
    generator = GenerativeRecommender(
        llm_provider=llm,
        count=reco_cfg["count"],
        temperature=reco_cfg["temperature"],
        max_tokens=reco_cfg["max_tokens"],
        explain_temperature=explain_cfg["temperature"],
        explain_max_tokens=explain_cfg["max_tokens"],
    )
    enricher = RecommendationEnricher(catalog=catalog, timeout=reco_cfg["enrichment_timeout"])
    chat_recommender = ChatRecommender(
        llm_provider=llm,
        enricher=enricher,
        temperature=chat_cfg["temperature"],
        max_tokens=chat_cfg["max_tokens"],
    )
    orchestrator = RecommendationOrchestrator(
        library=library,
        generator=generator,
        enricher=enricher,
        store=store,
    )

    # -- Provider registry for /health --
    provider_registry: dict[str, Any] = {
        "llm": llm.is_available(),
        "llm_provider": llm.get_provider_name(),
        "catalog": catalog.is_available(),
        "store": True,
        "auth": "dev-header" if app_settings.is_dev_auth() else "jwt",
    }

    return {
        "settings": app_settings,
        "config": app_config,
        "http_client": http_client,
        "llm": llm,
        "catalog": catalog,
        "library": library,
        "store": store,
        "orchestrator": orchestrator,
        "chat_recommender": chat_recommender,
        "provider_registry": provider_registry,
    }


async def initialize_storage(components: dict[str, Any]) -> None:
    """Create the SQLite tables used by the library and snapshot store."""
    await components["library"].initialize()
    await components["store"].initialize()


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = build_components(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    await initialize_storage(components)

    _logger.info(
        "app_startup",
        version=_VERSION,
        environment=config["app"]["env"],
        llm=components["provider_registry"]["llm_provider"],
        llm_candidates=config["llm"]["available_providers"],
        auth=components["provider_registry"]["auth"],
        llm_configured=components["provider_registry"]["llm"],
        catalog_configured=components["provider_registry"]["catalog"],
    )

    yield

    # -- Shutdown: close shared httpx client --
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="gameScout API",
        version=_VERSION,
        description=(
            "Browse a game catalog, keep a library of saved games, and get "
            "AI-generated recommendations enriched with catalog artwork."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    configure_cors(application)
    application.add_middleware(RequestLoggingMiddleware)
    configure_error_handlers(application)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=config["app"]["host"],
        port=config["app"]["port"],
        reload=(config["app"]["env"] == "development"),
    )

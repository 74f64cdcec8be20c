"""FastAPI API routes for gameScout.

Provides REST endpoints for AI recommendations, catalog browsing, the
user's saved-games library and profile, and a health check.  Service
dependencies are resolved from ``app.state`` via FastAPI's ``Depends``
using the ``Annotated`` pattern.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                              Method  Auth  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/recommendations               POST    yes   Generate + store fresh picks
# /api/v1/recommendations               GET     yes   Latest stored picks
# /api/v1/recommendations/chat          POST    yes   Free-text request → picks
# /api/v1/recommendations/explain       POST    yes   Why a game suits the user
# /api/v1/games                         GET     no    Browse/search the catalog
# /api/v1/games/special                 GET     no    Best of a year / top 50
# /api/v1/games/genres                  GET     no    Genre list
# /api/v1/games/{game_id}               GET     no    Details + media
# /api/v1/games/{game_id}/series        GET     no    Same-series games
# /api/v1/library                       GET     yes   Saved games, newest first
# /api/v1/library                       POST    yes   Save (or update) a game
# /api/v1/library/{game_id}             DELETE  yes   Remove a saved game
# /api/v1/profile                       GET     yes   Current user's profile
# /api/v1/profile                       PATCH   yes   Partial profile update
# /api/v1/health                        GET     no    Health + provider status
#
# Domain errors raised by handlers (UnauthenticatedError,
# GenerationUnavailableError, ...) are turned into JSON error bodies by
# the exception handlers in middleware.py.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from src.api.auth_utils import CurrentUserDep
from src.api.schemas import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    ExplainRequest,
    ExplainResponse,
    GameDetailResponse,
    GameSeriesResponse,
    GamesPageResponse,
    GenresResponse,
    HealthResponse,
    LibraryResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    RecommendationsResponse,
    RemoveGameResponse,
    SavedGameResponse,
    SaveGameRequest,
)
from src.interfaces.catalog_provider import ICatalogProvider
from src.interfaces.library_provider import ILibraryProvider
from src.models.catalog import CatalogSearchQuery
from src.models.library import ProfileUpdate
from src.models.pipeline import RecommendationPhase
from src.pipeline.orchestrator import RecommendationOrchestrator
from src.providers.catalog.rawg_provider import genre_ids_from_slugs
from src.services.chat_recommender import ChatRecommender
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Dependency helpers: read services from app.state (populated in main.py).
# ---------------------------------------------------------------------------


def _get_orchestrator(request: Request) -> RecommendationOrchestrator:
    return request.app.state.orchestrator


def _get_chat(request: Request) -> ChatRecommender:
    return request.app.state.chat_recommender


def _get_catalog(request: Request) -> ICatalogProvider:
    return request.app.state.catalog


def _get_library(request: Request) -> ILibraryProvider:
    return request.app.state.library


def _get_config(request: Request) -> dict[str, Any]:
    return request.app.state.config


OrchestratorDep = Annotated[RecommendationOrchestrator, Depends(_get_orchestrator)]
ChatDep = Annotated[ChatRecommender, Depends(_get_chat)]
CatalogDep = Annotated[ICatalogProvider, Depends(_get_catalog)]
LibraryDep = Annotated[ILibraryProvider, Depends(_get_library)]
ConfigDep = Annotated[dict[str, Any], Depends(_get_config)]

_AUTH_ERRORS: dict[int | str, dict[str, Any]] = {401: {"model": ErrorResponse}}
_GENERATION_ERRORS: dict[int | str, dict[str, Any]] = {
    401: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}
_CATALOG_ERRORS: dict[int | str, dict[str, Any]] = {502: {"model": ErrorResponse}}


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------


@router.post(
    "/recommendations",
    response_model=RecommendationsResponse,
    responses=_GENERATION_ERRORS,
    summary="Generate fresh recommendations from the user's saved games",
)
async def generate_recommendations(
    user_id: CurrentUserDep,
    orchestrator: OrchestratorDep,
) -> RecommendationsResponse:
    """Generate, enrich and store a new set of recommendations.

    Users without saved games get an empty list and a guidance message,
    not an error.
    """
    outcome = await orchestrator.generate(user_id)
    if outcome.status == RecommendationPhase.INSUFFICIENT_DATA:
        return RecommendationsResponse(recommendations=[], message=outcome.message)
    return RecommendationsResponse(
        recommendations=outcome.recommendations,
        based_on=outcome.based_on_count,
        generated_at=outcome.generated_at,
    )


@router.get(
    "/recommendations",
    response_model=RecommendationsResponse,
    responses=_AUTH_ERRORS,
    summary="Get the most recently generated recommendations",
)
async def get_latest_recommendations(
    user_id: CurrentUserDep,
    orchestrator: OrchestratorDep,
) -> RecommendationsResponse:
    latest = await orchestrator.get_latest(user_id)
    if latest.status == RecommendationPhase.EMPTY:
        return RecommendationsResponse(recommendations=[], message=latest.message)
    return RecommendationsResponse(
        recommendations=latest.recommendations,
        generated_at=latest.generated_at,
        cached=True,
    )


@router.post(
    "/recommendations/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, **_GENERATION_ERRORS},
    summary="Ask for recommendations in free text",
)
async def chat_recommendations(
    body: ChatRequest,
    user_id: CurrentUserDep,
    chat: ChatDep,
    config: ConfigDep,
) -> ChatResponse:
    max_length = config["chat"]["max_message_length"]
    if not body.message.strip():
        raise HTTPException(status_code=400, detail="Message must not be empty")
    if len(body.message) > max_length:
        raise HTTPException(
            status_code=400,
            detail=f"Message is too long (maximum {max_length} characters)",
        )

    reply = await chat.reply(user_id, body.message)
    return ChatResponse(message=reply.message, recommendations=reply.recommendations)


@router.post(
    "/recommendations/explain",
    response_model=ExplainResponse,
    responses=_AUTH_ERRORS,
    summary="Explain why a game suits the user",
)
async def explain_recommendation(
    body: ExplainRequest,
    user_id: CurrentUserDep,
    orchestrator: OrchestratorDep,
) -> ExplainResponse:
    explanation = await orchestrator.explain(user_id, body.game_name)
    return ExplainResponse(game_name=body.game_name, explanation=explanation)


# ---------------------------------------------------------------------------
# Catalog browse
# ---------------------------------------------------------------------------


@router.get(
    "/games",
    response_model=GamesPageResponse,
    responses=_CATALOG_ERRORS,
    summary="Browse or search the game catalog",
)
async def browse_games(
    catalog: CatalogDep,
    config: ConfigDep,
    genres: Annotated[str | None, Query(description="Comma-separated genre slugs")] = None,
    search: Annotated[str | None, Query(max_length=200)] = None,
    page: Annotated[int, Query(ge=1)] = 1,
) -> GamesPageResponse:
    """List games ordered by rating, optionally filtered by genre or text."""
    slugs = [slug for slug in (genres or "").split(",") if slug.strip()]
    query = CatalogSearchQuery(
        text=search.strip() if search and search.strip() else None,
        genre_ids=genre_ids_from_slugs(slugs),
        page=page,
        page_size=config["catalog"]["browse_page_size"],
        ordering="-rating",
    )
    result = await catalog.search(query)
    return GamesPageResponse(
        games=result.items,
        count=result.total_count,
        has_more=result.has_more,
        page=page,
    )


@router.get(
    "/games/special",
    response_model=GamesPageResponse,
    responses={400: {"model": ErrorResponse}, **_CATALOG_ERRORS},
    summary="Curated lists: best of a year or all-time top 50",
)
async def special_games(
    catalog: CatalogDep,
    config: ConfigDep,
    list_type: Annotated[str | None, Query(alias="type")] = None,
    year: Annotated[int | None, Query(ge=1970, le=2100)] = None,
) -> GamesPageResponse:
    if list_type == "best-of-year":
        chosen_year = year or date.today().year
        query = CatalogSearchQuery(
            date_range=(date(chosen_year, 1, 1), date(chosen_year, 12, 31)),
            ordering="-metacritic,-rating",
            page_size=config["catalog"]["browse_page_size"],
        )
    elif list_type == "top-50":
        query = CatalogSearchQuery(
            ordering="-rating,-metacritic",
            page_size=config["catalog"]["top_list_size"],
        )
    else:
        raise HTTPException(
            status_code=400,
            detail="Invalid list type. Use 'best-of-year' or 'top-50'.",
        )

    result = await catalog.search(query)
    _logger.debug("special_list_served", list_type=list_type, results=len(result.items))
    return GamesPageResponse(
        games=result.items,
        count=result.total_count,
        has_more=result.has_more,
        page=1,
    )


@router.get(
    "/games/genres",
    response_model=GenresResponse,
    responses=_CATALOG_ERRORS,
    summary="List catalog genres",
)
async def list_genres(catalog: CatalogDep, config: ConfigDep) -> GenresResponse:
    genres = await catalog.get_genres(page_size=config["catalog"]["genres_page_size"])
    return GenresResponse(genres=genres)


@router.get(
    "/games/{game_id}",
    response_model=GameDetailResponse,
    responses=_CATALOG_ERRORS,
    summary="Game details with screenshots and trailers",
)
async def game_details(game_id: int, catalog: CatalogDep) -> GameDetailResponse:
    """Fetch details, screenshots and trailers concurrently."""
    game, screenshots, trailers = await asyncio.gather(
        catalog.get_game_details(game_id),
        catalog.get_screenshots(game_id),
        catalog.get_trailers(game_id),
    )
    return GameDetailResponse(game=game, screenshots=screenshots, trailers=trailers)


@router.get(
    "/games/{game_id}/series",
    response_model=GameSeriesResponse,
    responses=_CATALOG_ERRORS,
    summary="Other games in the same series",
)
async def game_series(game_id: int, catalog: CatalogDep) -> GameSeriesResponse:
    games = await catalog.get_game_series(game_id)
    return GameSeriesResponse(games=games, count=len(games))


# ---------------------------------------------------------------------------
# Library & profile
# ---------------------------------------------------------------------------


@router.get(
    "/library",
    response_model=LibraryResponse,
    responses=_AUTH_ERRORS,
    summary="List the user's saved games",
)
async def list_library(user_id: CurrentUserDep, library: LibraryDep) -> LibraryResponse:
    saved = await library.list_saved_games(user_id)
    games = [SavedGameResponse.model_validate(g.model_dump()) for g in saved]
    return LibraryResponse(games=games, count=len(games))


@router.post(
    "/library",
    response_model=SavedGameResponse,
    status_code=201,
    responses=_AUTH_ERRORS,
    summary="Save a game to the user's library",
)
async def save_game(
    body: SaveGameRequest,
    user_id: CurrentUserDep,
    library: LibraryDep,
) -> SavedGameResponse:
    saved = await library.save_game(
        user_id,
        body.game_id,
        body.game_data,
        rating=body.rating,
        notes=body.notes,
    )
    return SavedGameResponse.model_validate(saved.model_dump())


@router.delete(
    "/library/{game_id}",
    response_model=RemoveGameResponse,
    responses={404: {"model": ErrorResponse}, **_AUTH_ERRORS},
    summary="Remove a game from the user's library",
)
async def remove_game(
    game_id: int,
    user_id: CurrentUserDep,
    library: LibraryDep,
) -> RemoveGameResponse:
    removed = await library.remove_game(user_id, game_id)
    if not removed:
        raise HTTPException(status_code=404, detail=f"Game {game_id} is not in your library")
    return RemoveGameResponse(game_id=game_id, removed=True)


@router.get(
    "/profile",
    response_model=ProfileResponse,
    responses=_AUTH_ERRORS,
    summary="Get the current user's profile",
)
async def get_profile(user_id: CurrentUserDep, library: LibraryDep) -> ProfileResponse:
    profile = await library.get_profile(user_id)
    if profile is None:
        return ProfileResponse(id=user_id)
    return ProfileResponse.model_validate(profile.model_dump())


@router.patch(
    "/profile",
    response_model=ProfileResponse,
    responses={409: {"model": ErrorResponse}, **_AUTH_ERRORS},
    summary="Update the current user's profile",
)
async def update_profile(
    body: ProfileUpdateRequest,
    user_id: CurrentUserDep,
    library: LibraryDep,
) -> ProfileResponse:
    update = ProfileUpdate(**body.model_dump(exclude_unset=True))
    profile = await library.update_profile(user_id, update)
    return ProfileResponse.model_validate(profile.model_dump())


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability.

    ``healthy`` needs both the LLM and the catalog configured; the app
    still serves stored recommendations and the library otherwise.
    """
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    llm_ok = bool(providers.get("llm", False))
    catalog_ok = bool(providers.get("catalog", False))
    if llm_ok and catalog_ok:
        status = "healthy"
    elif llm_ok or catalog_ok:
        status = "degraded"
    else:
        status = "unhealthy"

    return HealthResponse(status=status, version=_VERSION, providers=providers)

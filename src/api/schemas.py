"""Pydantic request/response schemas for the gameScout API.

# ─── HOW SCHEMAS WORK ──────────────────────────────────────────────────
#
# These models define the shape of every HTTP request and response body.
# FastAPI uses them for validation (bad requests → 422), serialization
# (via response_model=...) and the OpenAPI docs at /docs.
#
# The public JSON contract is camelCase (basedOn, generatedAt, hasMore).
# ``_CamelModel`` generates those aliases; ``populate_by_name`` lets
# Python code keep using snake_case, and FastAPI serializes response
# models by alias.
#
# Convention: request schemas end with "Request", response schemas end
# with "Response".
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer
from pydantic.alias_generators import to_camel

from src.models.catalog import CatalogGame, GameDetails, Genre, Screenshot, Trailer
from src.models.library import SavedGameData, UserPreferences
from src.models.recommendation import EnrichedRecommendation


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------


class RecommendationsResponse(_CamelModel):
    """Body of both recommendation endpoints.

    Only the fields relevant to the outcome are emitted: a fresh generation
    carries ``basedOn`` and ``generatedAt``; a stored snapshot carries
    ``generatedAt`` and ``cached``; an empty outcome carries ``message``.
    Null fields *inside* recommendations (``image``, ``catalogId``) are
    always kept.
    """

    recommendations: list[EnrichedRecommendation] = Field(default_factory=list)
    based_on: int | None = None
    generated_at: datetime | None = None
    cached: bool | None = None
    message: str | None = None

    @model_serializer(mode="wrap")
    def _drop_absent_fields(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        return {key: value for key, value in data.items() if value is not None}


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)


class ChatResponse(BaseModel):
    message: str
    recommendations: list[EnrichedRecommendation] = Field(default_factory=list)


class ExplainRequest(_CamelModel):
    game_name: str = Field(..., min_length=1, max_length=200)


class ExplainResponse(_CamelModel):
    game_name: str
    explanation: str


# ---------------------------------------------------------------------------
# Catalog browse
# ---------------------------------------------------------------------------


class GamesPageResponse(_CamelModel):
    games: list[CatalogGame]
    count: int
    has_more: bool
    page: int


class GenresResponse(BaseModel):
    genres: list[Genre]


class GameDetailResponse(BaseModel):
    game: GameDetails
    screenshots: list[Screenshot] = Field(default_factory=list)
    trailers: list[Trailer] = Field(default_factory=list)


class GameSeriesResponse(BaseModel):
    """Other games in the same series."""

    games: list[CatalogGame]
    count: int


# ---------------------------------------------------------------------------
# Library & profile
# ---------------------------------------------------------------------------


class SaveGameRequest(_CamelModel):
    game_id: int = Field(..., ge=1)
    game_data: SavedGameData
    rating: int | None = Field(default=None, ge=1, le=5)
    notes: str | None = Field(default=None, max_length=2000)


class SavedGameResponse(_CamelModel):
    id: int
    game_id: int
    game_data: SavedGameData
    rating: int | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class LibraryResponse(BaseModel):
    games: list[SavedGameResponse]
    count: int


class RemoveGameResponse(_CamelModel):
    game_id: int
    removed: bool


class ProfileResponse(_CamelModel):
    id: str
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    preferences: UserPreferences = Field(default_factory=UserPreferences)


class PreferencesUpdateRequest(BaseModel):
    """Partial preferences; keys keep the stored snake_case names."""

    model_config = ConfigDict(extra="allow")

    favorite_genres: list[str] | None = None
    platform: str | None = None
    language: str | None = None


class ProfileUpdateRequest(_CamelModel):
    username: str | None = Field(default=None, min_length=3, max_length=50)
    full_name: str | None = Field(default=None, max_length=120)
    avatar_url: str | None = None
    preferences: PreferencesUpdateRequest | None = None


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
    retryable: bool = False

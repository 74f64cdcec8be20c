"""Recommendation models for the gameScout pipeline.

Defines Pydantic v2 models for the generation input (``UserContext``),
the model's raw suggestions (``RecommendationCandidate``), their
catalog-enriched form (``EnrichedRecommendation``) and the persisted unit
(``RecommendationSnapshot``).  All models are frozen.

Wire names follow the public JSON contract (``estimatedRating``,
``catalogId``); Python code uses snake_case attributes.  ``populate_by_name``
lets both spellings construct a model, and ``model_dump(by_alias=True)``
produces the wire form that is also what gets persisted.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Generation input - built per request, never persisted.
# ---------------------------------------------------------------------------
class OwnedGameSummary(BaseModel):
    """What the prompt needs to know about one saved game."""

    model_config = ConfigDict(frozen=True)

    name: str
    # Ordered and de-duplicated so the rendered prompt is deterministic.
    genres: tuple[str, ...] = ()
    rating: float | None = None

    @field_validator("genres", mode="before")
    @classmethod
    def _dedupe_genres(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        seen: dict[str, None] = {}
        for genre in value:
            if genre:
                seen.setdefault(str(genre), None)
        return tuple(seen)


class UserContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    owned_games: list[OwnedGameSummary] = Field(default_factory=list)
    favorite_genres: list[str] = Field(default_factory=list)
    display_name: str | None = None
    # Catalog ids of the saved games, recorded on the snapshot.
    owned_game_ids: list[int] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.owned_games


# ---------------------------------------------------------------------------
# RecommendationCandidate - one suggestion straight from the model.
# ---------------------------------------------------------------------------
class RecommendationCandidate(BaseModel):
    """A single model suggestion.

    Titles and genres are accepted as-is; the model may invent or misspell
    them, and enrichment treats the title only as a best-effort search.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    title: str = Field(min_length=1)
    reasoning: str = ""
    genres: list[str] = Field(default_factory=list)
    estimated_rating: str = Field(default="", alias="estimatedRating")

    @field_validator("title", "reasoning", mode="before")
    @classmethod
    def _strip_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("genres", mode="before")
    @classmethod
    def _coerce_genres(cls, value: Any) -> Any:
        # Models occasionally answer "Action, RPG" instead of a list.
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("estimated_rating", mode="before")
    @classmethod
    def _coerce_rating(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


# ---------------------------------------------------------------------------
# EnrichedRecommendation - candidate + best-effort catalog data.
# ---------------------------------------------------------------------------
class EnrichedRecommendation(RecommendationCandidate):
    """A candidate plus the image and id of its first catalog match.

    Both fields are ``None`` when the lookup timed out, failed, or found
    nothing; the item itself is always kept.
    """

    image: str | None = None
    catalog_id: int | None = Field(default=None, alias="catalogId")
    # The catalog's own rating of the match, next to the model's guess.
    actual_rating: float | None = Field(default=None, alias="actualRating")

    @classmethod
    def unmatched(cls, candidate: RecommendationCandidate) -> EnrichedRecommendation:
        return cls(**candidate.model_dump())

    @property
    def is_matched(self) -> bool:
        return self.catalog_id is not None


# ---------------------------------------------------------------------------
# RecommendationSnapshot - the persisted, immutable unit.
# ---------------------------------------------------------------------------
class RecommendationSnapshot(BaseModel):
    """One generation's results for one user.

    Snapshots are append-only: every successful generation writes a new
    one and reads always pick the newest by ``created_at``.
    """

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    owner_id: str
    items: list[EnrichedRecommendation] = Field(default_factory=list)
    based_on_count: int = Field(ge=0)
    based_on_game_ids: list[int] = Field(default_factory=list)
    created_at: datetime


class ChatReply(BaseModel):
    """Conversational reply plus the titles it suggests.  Never persisted."""

    model_config = ConfigDict(frozen=True)

    message: str
    recommendations: list[EnrichedRecommendation] = Field(default_factory=list)

"""Pipeline outcome models for recommendation generation and retrieval.

``RecommendationPhase`` names every state the orchestrator logs while it
runs.  The two outcome models are what the orchestrator hands back to the
API and CLI layers; neither is persisted.

Generate lifecycle::

    LOADING_CONTEXT → GENERATING_CANDIDATES → ENRICHING_RESULTS → PERSISTING → DONE
                    ↘ INSUFFICIENT_DATA
    (any failure before PERSISTING) → FAILED

Read-latest lifecycle::

    READING → FOUND | EMPTY
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.models.recommendation import EnrichedRecommendation


class RecommendationPhase(str, Enum):  # noqa: UP042
    """States of a generate or read-latest call."""

    LOADING_CONTEXT = "LOADING_CONTEXT"
    GENERATING_CANDIDATES = "GENERATING_CANDIDATES"
    ENRICHING_RESULTS = "ENRICHING_RESULTS"
    PERSISTING = "PERSISTING"
    DONE = "DONE"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    FAILED = "FAILED"
    READING = "READING"
    FOUND = "FOUND"
    EMPTY = "EMPTY"


class GenerationOutcome(BaseModel):
    """Result of one generate call.

    ``status`` is ``DONE`` with fresh items, or ``INSUFFICIENT_DATA`` with
    an empty list and an explanatory ``message`` when the user has no saved
    games.  ``persisted`` is ``False`` when the snapshot write failed; the
    items are still returned.
    """

    model_config = ConfigDict(frozen=True)

    status: RecommendationPhase
    recommendations: list[EnrichedRecommendation] = Field(default_factory=list)
    based_on_count: int = 0
    generated_at: datetime | None = None
    persisted: bool = False
    message: str | None = None


class LatestRecommendations(BaseModel):
    """Result of a read-latest call: ``FOUND`` with a snapshot or ``EMPTY``."""

    model_config = ConfigDict(frozen=True)

    status: RecommendationPhase
    recommendations: list[EnrichedRecommendation] = Field(default_factory=list)
    based_on_count: int = 0
    generated_at: datetime | None = None
    cached: bool = False
    message: str | None = None

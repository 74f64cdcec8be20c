"""gameScout domain models, re-exported for ``from src.models import X``.

Submodules by concern:
    - catalog.py        : RAWG catalog records and search query/page shapes
    - library.py        : saved games and user profiles
    - recommendation.py : generation input, candidates, enriched items, snapshots
    - pipeline.py       : orchestrator phases and call outcomes
"""

from __future__ import annotations

from src.models.catalog import (
    CatalogGame,
    CatalogPage,
    CatalogSearchQuery,
    GameDetails,
    Genre,
    NamedRef,
    Screenshot,
    Trailer,
)
from src.models.library import (
    ProfileUpdate,
    SavedGame,
    SavedGameData,
    UserPreferences,
    UserProfile,
)
from src.models.pipeline import (
    GenerationOutcome,
    LatestRecommendations,
    RecommendationPhase,
)
from src.models.recommendation import (
    ChatReply,
    EnrichedRecommendation,
    OwnedGameSummary,
    RecommendationCandidate,
    RecommendationSnapshot,
    UserContext,
)

__all__ = [
    "CatalogGame",
    "CatalogPage",
    "CatalogSearchQuery",
    "ChatReply",
    "EnrichedRecommendation",
    "GameDetails",
    "GenerationOutcome",
    "Genre",
    "LatestRecommendations",
    "NamedRef",
    "OwnedGameSummary",
    "ProfileUpdate",
    "RecommendationCandidate",
    "RecommendationPhase",
    "RecommendationSnapshot",
    "SavedGame",
    "SavedGameData",
    "Screenshot",
    "Trailer",
    "UserContext",
    "UserPreferences",
    "UserProfile",
]

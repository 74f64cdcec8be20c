"""Recommendation orchestrator: the generate and read-latest workflows.

ARCHITECTURE NOTE:
    Two entry points, each a short state machine whose phases are logged
    as ``recommendation_phase`` events:

        generate(user_id)
            LOADING_CONTEXT → GENERATING_CANDIDATES → ENRICHING_RESULTS
            → PERSISTING → DONE
            LOADING_CONTEXT → INSUFFICIENT_DATA   (no saved games)
            any fatal generation error → FAILED  (exception propagates)

        get_latest(user_id)
            READING → FOUND | EMPTY

    Failure policy:
        - No saved games is not an error.  No LLM or catalog call is made.
        - Generation errors (unreachable model, unparsable reply) abort the
          call; nothing is persisted.
        - Enrichment never fails the call (see RecommendationEnricher).
        - Snapshot persistence is best-effort.  A failed write is logged
          and the fresh recommendations are still returned.  No storage
          exception ever escapes this class.

    Concurrent generate calls for the same user are not coalesced; each
    appends its own snapshot and reads return the newest.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from src.interfaces.library_provider import ILibraryProvider
from src.interfaces.recommendation_store import IRecommendationStore
from src.models.library import SavedGame, UserProfile
from src.models.pipeline import (
    GenerationOutcome,
    LatestRecommendations,
    RecommendationPhase,
)
from src.models.recommendation import OwnedGameSummary, UserContext
from src.services.recommendation_enricher import RecommendationEnricher
from src.services.recommendation_generator import GenerativeRecommender
from src.utils.errors import ContextLoadError, PersistenceError, UnauthenticatedError
from src.utils.logging import get_logger

INSUFFICIENT_DATA_MESSAGE = "Save some games to your library to get personalised recommendations."
EMPTY_MESSAGE = "No previous recommendations. Generate some to get started."


def build_user_context(saved_games: list[SavedGame], profile: UserProfile | None) -> UserContext:
    """Derive the generation input from a user's library and profile.

    Saved games keep their library order (newest first).  A game's rating
    is the user's own score when present, else the catalog rating; the
    catalog reports unrated games as 0, which is left out.
    """
    owned = []
    for saved in saved_games:
        data = saved.game_data
        rating = saved.rating if saved.rating is not None else (data.rating or None)
        owned.append(OwnedGameSummary(name=data.name, genres=data.genres, rating=rating))

    favorite_genres: list[str] = []
    display_name = None
    if profile is not None:
        favorite_genres = list(profile.preferences.favorite_genres)
        display_name = profile.username or profile.full_name

    return UserContext(
        owned_games=owned,
        favorite_genres=favorite_genres,
        display_name=display_name,
        owned_game_ids=[saved.game_id for saved in saved_games],
    )


class RecommendationOrchestrator:
    """Drives generator → enricher → store for one user at a time.

    All collaborators are injected; the orchestrator never creates them.
    """

    def __init__(
        self,
        library: ILibraryProvider,
        generator: GenerativeRecommender,
        enricher: RecommendationEnricher,
        store: IRecommendationStore,
    ) -> None:
        self._library = library
        self._generator = generator
        self._enricher = enricher
        self._store = store
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def _phase(self, user_id: str, phase: RecommendationPhase, **context: object) -> None:
        self._logger.info("recommendation_phase", user_id=user_id, phase=phase.value, **context)

    @staticmethod
    def _require_user(user_id: str | None) -> str:
        if not user_id:
            raise UnauthenticatedError()
        return user_id

    async def load_context(self, user_id: str) -> UserContext:
        """Read the user's saved games and profile into a :class:`UserContext`."""
        user_id = self._require_user(user_id)
        try:
            saved_games = await self._library.list_saved_games(user_id)
            profile = await self._library.get_profile(user_id)
        except PersistenceError as exc:
            raise ContextLoadError(
                message=f"Could not load saved games: {exc.message}",
                provider_name=exc.provider_name,
            ) from exc
        return build_user_context(saved_games, profile)

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    async def generate(self, user_id: str) -> GenerationOutcome:
        """Generate, enrich and persist a fresh set of recommendations.

        Raises
        ------
        UnauthenticatedError
            If *user_id* is empty.
        ContextLoadError
            If the library could not be read.
        GenerationUnavailableError / GenerationParseError
            If the model could not produce usable candidates.
        """
        user_id = self._require_user(user_id)

        self._phase(user_id, RecommendationPhase.LOADING_CONTEXT)
        context = await self.load_context(user_id)

        if context.is_empty:
            self._phase(user_id, RecommendationPhase.INSUFFICIENT_DATA)
            return GenerationOutcome(
                status=RecommendationPhase.INSUFFICIENT_DATA,
                based_on_count=0,
                message=INSUFFICIENT_DATA_MESSAGE,
            )

        based_on_count = len(context.owned_games)
        self._phase(
            user_id,
            RecommendationPhase.GENERATING_CANDIDATES,
            based_on_count=based_on_count,
        )
        try:
            candidates = await self._generator.generate(context)
        except Exception as exc:
            self._phase(
                user_id,
                RecommendationPhase.FAILED,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise

        self._phase(user_id, RecommendationPhase.ENRICHING_RESULTS, candidates=len(candidates))
        items = await self._enricher.enrich(candidates)

        self._phase(user_id, RecommendationPhase.PERSISTING)
        generated_at = datetime.now(tz=timezone.utc)  # noqa: UP017
        persisted = False
        try:
            snapshot = await self._store.append(
                user_id,
                items,
                based_on_count,
                context.owned_game_ids,
            )
            generated_at = snapshot.created_at
            persisted = True
        except PersistenceError as exc:
            self._logger.warning(
                "snapshot_persist_failed",
                user_id=user_id,
                error=str(exc),
            )

        self._phase(
            user_id,
            RecommendationPhase.DONE,
            items=len(items),
            persisted=persisted,
        )
        return GenerationOutcome(
            status=RecommendationPhase.DONE,
            recommendations=items,
            based_on_count=based_on_count,
            generated_at=generated_at,
            persisted=persisted,
        )

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def get_latest(self, user_id: str) -> LatestRecommendations:
        """Return the newest stored snapshot, or an empty result with guidance."""
        user_id = self._require_user(user_id)

        self._phase(user_id, RecommendationPhase.READING)
        try:
            snapshot = await self._store.read_latest(user_id)
        except PersistenceError as exc:
            self._logger.warning("snapshot_read_failed", user_id=user_id, error=str(exc))
            snapshot = None

        if snapshot is None:
            self._phase(user_id, RecommendationPhase.EMPTY)
            return LatestRecommendations(
                status=RecommendationPhase.EMPTY,
                message=EMPTY_MESSAGE,
            )

        self._phase(user_id, RecommendationPhase.FOUND, snapshot_id=snapshot.id)
        return LatestRecommendations(
            status=RecommendationPhase.FOUND,
            recommendations=snapshot.items,
            based_on_count=snapshot.based_on_count,
            generated_at=snapshot.created_at,
            cached=True,
        )

    # ------------------------------------------------------------------
    # Explanations
    # ------------------------------------------------------------------

    async def explain(self, user_id: str, game_name: str) -> str:
        """Explain why *game_name* suits the user, based on their saved games."""
        context = await self.load_context(user_id)
        return await self._generator.explain(
            game_name,
            [game.name for game in context.owned_games],
        )

"""Abstract base class for recommendation snapshot storage.

Snapshots are append-only and immutable.  The store never updates or
deletes a snapshot; "latest" means greatest ``created_at`` for the owner.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.recommendation import EnrichedRecommendation, RecommendationSnapshot


# Concrete implementation: SQLiteRecommendationStore (src/providers/store/)
class IRecommendationStore(ABC):
    """Contract for per-user recommendation snapshot persistence."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create backing tables/indexes if they do not exist."""

    @abstractmethod
    async def append(
        self,
        owner_id: str,
        items: list[EnrichedRecommendation],
        based_on_count: int,
        based_on_game_ids: list[int] | None = None,
    ) -> RecommendationSnapshot:
        """Write a new snapshot and return it.

        The store assigns ``created_at`` (UTC, now) and the storage id.

        Raises
        ------
        src.utils.errors.PersistenceError
            If the write fails.
        """

    @abstractmethod
    async def read_latest(self, owner_id: str) -> RecommendationSnapshot | None:
        """Return the newest snapshot for *owner_id*, or ``None``.

        A store that has never been written to (no table yet) reads as
        empty rather than failing.

        Raises
        ------
        src.utils.errors.PersistenceError
            If the read fails for any other reason.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the storage backend identifier."""

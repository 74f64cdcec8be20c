"""Abstract base class for user library and profile storage.

The library holds the games a user has saved (the input to recommendation
generation) and their profile, whose favourite genres also feed the
prompt.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.library import ProfileUpdate, SavedGame, SavedGameData, UserProfile


class ILibraryProvider(ABC):
    """Contract for saved-game and profile persistence.

    All operations are async to support network-backed stores.  Failures
    raise :class:`~src.utils.errors.PersistenceError`.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create backing tables/indexes if they do not exist."""

    @abstractmethod
    async def list_saved_games(self, user_id: str) -> list[SavedGame]:
        """Return *user_id*'s saved games, newest first."""

    @abstractmethod
    async def save_game(
        self,
        user_id: str,
        game_id: int,
        game_data: SavedGameData,
        rating: int | None = None,
        notes: str | None = None,
    ) -> SavedGame:
        """Insert or update a saved game and return the stored row.

        Saving a game that is already in the library replaces its data,
        rating and notes but keeps the original ``created_at``.
        """

    @abstractmethod
    async def remove_game(self, user_id: str, game_id: int) -> bool:
        """Remove a saved game.  Returns ``False`` if it was not saved."""

    @abstractmethod
    async def get_profile(self, user_id: str) -> UserProfile | None:
        """Return the user's profile, or ``None`` if none exists."""

    @abstractmethod
    async def update_profile(self, user_id: str, update: ProfileUpdate) -> UserProfile:
        """Create or partially update the user's profile.

        Raises ``ProfileConflictError`` when the username is taken.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the storage backend identifier."""

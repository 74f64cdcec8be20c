"""Abstract base class for game catalog providers.

The catalog gateway is the only code that talks to the external game
database.  It translates :class:`CatalogSearchQuery` into upstream request
parameters, injects the API key, and returns typed records.  It never
retries; every upstream failure surfaces as
:class:`~src.utils.errors.UpstreamUnavailableError` and the caller decides
whether to degrade.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.catalog import (
    CatalogGame,
    CatalogPage,
    CatalogSearchQuery,
    GameDetails,
    Genre,
    Screenshot,
    Trailer,
)


# Concrete implementation: RawgCatalogProvider (src/providers/catalog/)
class ICatalogProvider(ABC):
    """Contract for read-only game catalog services."""

    @abstractmethod
    async def search(self, query: CatalogSearchQuery) -> CatalogPage:
        """Search or list games.

        Parameters that are absent from *query* are omitted from the
        upstream request rather than sent empty.

        Raises
        ------
        src.utils.errors.UpstreamUnavailableError
            On any transport error, non-2xx status, or unreadable body.
        """

    @abstractmethod
    async def get_genres(self, page_size: int = 40) -> list[Genre]:
        """Return the catalog's genre list."""

    @abstractmethod
    async def get_game_details(self, game_id: int) -> GameDetails:
        """Return the full record for *game_id*."""

    @abstractmethod
    async def get_screenshots(self, game_id: int) -> list[Screenshot]:
        """Return screenshots for *game_id*."""

    @abstractmethod
    async def get_trailers(self, game_id: int) -> list[Trailer]:
        """Return trailers for *game_id*."""

    @abstractmethod
    async def get_game_series(self, game_id: int) -> list[CatalogGame]:
        """Return other games in the same series as *game_id*."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the catalog identifier, e.g. ``"rawg"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""

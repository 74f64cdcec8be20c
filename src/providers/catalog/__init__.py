"""Game catalog provider adapters."""

from src.providers.catalog.rawg_provider import (
    GENRE_SLUG_IDS,
    RawgCatalogProvider,
    genre_ids_from_slugs,
)

__all__ = ["GENRE_SLUG_IDS", "RawgCatalogProvider", "genre_ids_from_slugs"]

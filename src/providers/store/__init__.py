"""Recommendation snapshot store adapters."""

from src.providers.store.sqlite_recommendation_store import SQLiteRecommendationStore

__all__ = ["SQLiteRecommendationStore"]

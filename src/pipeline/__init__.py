"""Recommendation pipeline orchestration."""

from src.pipeline.orchestrator import RecommendationOrchestrator, build_user_context

__all__ = [
    "RecommendationOrchestrator",
    "build_user_context",
]

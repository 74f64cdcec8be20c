"""Shared pytest fixtures for the gameScout test suite."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

# Importing src.main configures structlog against the current sys.stdout. Do it
# once at session start so loggers are not bound to a per-test capsys stream
# that pytest closes when that test ends.
import src.main  # noqa: F401
from src.config.settings import Settings
from src.interfaces.catalog_provider import ICatalogProvider
from src.interfaces.llm_provider import ILLMProvider
from src.models.catalog import CatalogGame, CatalogPage, CatalogSearchQuery
from src.models.library import SavedGame, SavedGameData, UserPreferences, UserProfile
from src.models.recommendation import RecommendationCandidate

# ---------------------------------------------------------------------------
# Settings / config
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings with every provider configured and a throwaway database."""
    return Settings(
        openai_api_key="sk-test",
        anthropic_api_key="",
        rawg_api_key="rawg-test",
        database_path=str(tmp_path / "gamescout.db"),
        auth_jwt_secret="",
        _env_file=None,
    )


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Return the resolved configuration the API routes read."""
    return {
        "recommendations": {
            "count": 6,
            "temperature": 0.8,
            "max_tokens": 1500,
            "enrichment_timeout": 2.0,
        },
        "chat": {"max_message_length": 500, "temperature": 0.8, "max_tokens": 1500},
        "explain": {"temperature": 0.7, "max_tokens": 200},
        "catalog": {
            "browse_page_size": 40,
            "top_list_size": 50,
            "genres_page_size": 40,
            "request_timeout": 10.0,
        },
    }


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

SAMPLE_REPLY_ITEMS: list[dict[str, Any]] = [
    {
        "title": "Hollow Knight",
        "reasoning": "Tight combat and a huge interconnected world.",
        "genres": ["Action", "Metroidvania"],
        "estimatedRating": "4.6",
    },
    {
        "title": "Celeste",
        "reasoning": "Precise platforming with a great story.",
        "genres": ["Platformer"],
        "estimatedRating": "4.5",
    },
]


@pytest.fixture
def sample_reply() -> str:
    """A model reply in the wrapped ``{"recommendations": [...]}`` shape."""
    return json.dumps({"recommendations": SAMPLE_REPLY_ITEMS})


@pytest.fixture
def sample_candidates() -> list[RecommendationCandidate]:
    return [RecommendationCandidate.model_validate(item) for item in SAMPLE_REPLY_ITEMS]


def make_saved_game(
    game_id: int,
    name: str,
    genres: list[str] | None = None,
    catalog_rating: float | None = None,
    rating: int | None = None,
    user_id: str = "user-1",
) -> SavedGame:
    now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)  # noqa: UP017
    return SavedGame(
        id=game_id,
        user_id=user_id,
        game_id=game_id,
        game_data=SavedGameData(
            name=name,
            genres=genres or [],
            rating=catalog_rating,
        ),
        rating=rating,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def sample_saved_games() -> list[SavedGame]:
    return [
        make_saved_game(3328, "The Witcher 3: Wild Hunt", ["RPG", "Action"], 4.66),
        make_saved_game(4200, "Portal 2", ["Puzzle", "Shooter"], 4.61, rating=5),
    ]


@pytest.fixture
def sample_profile() -> UserProfile:
    return UserProfile(
        id="user-1",
        username="ana",
        preferences=UserPreferences(favorite_genres=["RPG", "Puzzle"]),
    )


# ---------------------------------------------------------------------------
# Mock provider fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm_provider(sample_reply: str) -> ILLMProvider:
    """Mock ILLMProvider that returns configurable responses.

    Default complete() returns a valid wrapped recommendation reply.
    Override with mock_llm_provider.complete.return_value = "custom" or
    mock_llm_provider.complete.side_effect = [...] for specific tests.
    """
    mock = MagicMock(spec=ILLMProvider)
    mock.get_provider_name.return_value = "mock-llm"
    mock.is_available.return_value = True
    mock.validate_credentials = AsyncMock(return_value=True)
    mock.complete = AsyncMock(return_value=sample_reply)
    return mock


class FakeCatalog(ICatalogProvider):
    """In-memory catalog: each title maps to at most one game.

    ``delays`` makes a title's lookup sleep; ``failures`` makes it raise.
    """

    def __init__(
        self,
        games: dict[str, CatalogGame] | None = None,
        delays: dict[str, float] | None = None,
        failures: dict[str, Exception] | None = None,
    ) -> None:
        self.games = games or {}
        self.delays = delays or {}
        self.failures = failures or {}
        self.queries: list[CatalogSearchQuery] = []

    async def search(self, query: CatalogSearchQuery) -> CatalogPage:
        self.queries.append(query)
        title = query.text or ""
        if title in self.delays:
            await asyncio.sleep(self.delays[title])
        if title in self.failures:
            raise self.failures[title]
        game = self.games.get(title)
        items = [game] if game else []
        return CatalogPage(items=items, total_count=len(items))

    async def get_genres(self, page_size: int = 40):
        return []

    async def get_game_details(self, game_id: int):
        raise NotImplementedError

    async def get_screenshots(self, game_id: int):
        return []

    async def get_trailers(self, game_id: int):
        return []

    async def get_game_series(self, game_id: int):
        return []

    def get_provider_name(self) -> str:
        return "fake-catalog"

    def is_available(self) -> bool:
        return True


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    return FakeCatalog(
        games={
            "Hollow Knight": CatalogGame(
                id=9767,
                name="Hollow Knight",
                background_image="https://media.example/hollow-knight.jpg",
                rating=4.4,
            ),
            "Celeste": CatalogGame(
                id=28199,
                name="Celeste",
                background_image="https://media.example/celeste.jpg",
                rating=4.3,
            ),
        }
    )


@pytest.fixture
def catalog_factory() -> type[FakeCatalog]:
    """Return the FakeCatalog class for tests that need custom delays or failures."""
    return FakeCatalog


@pytest.fixture
def saved_game_factory():
    """Return the ``make_saved_game`` helper."""
    return make_saved_game

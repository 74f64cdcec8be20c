"""User library models: saved games and profiles.

A user's saved games are the input to recommendation generation - the
orchestrator turns them into a transient ``UserContext``.  The profile
contributes an optional display name and favourite genres.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SavedGameData(BaseModel):
    """Catalog snapshot stored alongside a saved game.

    Copied from the catalog at save time so the library renders (and
    recommendations generate) without re-querying the catalog.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str
    background_image: str = ""
    genres: list[str] = Field(default_factory=list)
    rating: float | None = None
    released: str | None = None


class SavedGame(BaseModel):
    """One row of a user's library."""

    model_config = ConfigDict(frozen=True)

    id: int
    user_id: str
    game_id: int
    game_data: SavedGameData
    # The user's own 1-5 score, distinct from the catalog rating in game_data.
    rating: int | None = Field(default=None, ge=1, le=5)
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class UserPreferences(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    favorite_genres: list[str] = Field(default_factory=list)
    platform: str | None = None
    language: str | None = None


class UserProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProfileUpdate(BaseModel):
    """Partial profile update; ``None`` fields are left unchanged."""

    username: str | None = Field(default=None, max_length=50)
    full_name: str | None = Field(default=None, max_length=120)
    avatar_url: str | None = None
    preferences: dict[str, Any] | None = None

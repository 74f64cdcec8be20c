"""SQLite-backed saved-games library and user profiles.

Two tables share the application database file:

* ``saved_games``: one row per (user, game), with the catalog snapshot
  stored as JSON in ``game_data``.  Saving an already-saved game updates
  its data, rating and notes in place.
* ``profiles``: one row per user, with free-form ``preferences`` JSON
  (``favorite_genres`` feeds the recommendation prompt).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiosqlite
import structlog
from pydantic import ValidationError

from src.interfaces.library_provider import ILibraryProvider
from src.models.library import (
    ProfileUpdate,
    SavedGame,
    SavedGameData,
    UserPreferences,
    UserProfile,
)
from src.utils.errors import PersistenceError, ProfileConflictError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/gamescout.db")

_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ', 'now')"

_CREATE_TABLES_SQL = [
    f"""\
CREATE TABLE IF NOT EXISTS saved_games (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id     TEXT    NOT NULL,
    game_id     INTEGER NOT NULL,
    game_data   TEXT    NOT NULL,
    rating      INTEGER CHECK (rating IS NULL OR (rating BETWEEN 1 AND 5)),
    notes       TEXT,
    created_at  TEXT    NOT NULL DEFAULT ({_NOW_SQL}),
    updated_at  TEXT    NOT NULL DEFAULT ({_NOW_SQL}),
    UNIQUE(user_id, game_id)
);
""",
    f"""\
CREATE TABLE IF NOT EXISTS profiles (
    id           TEXT PRIMARY KEY,
    username     TEXT UNIQUE,
    full_name    TEXT,
    avatar_url   TEXT,
    preferences  TEXT NOT NULL DEFAULT '{{}}',
    created_at   TEXT NOT NULL DEFAULT ({_NOW_SQL}),
    updated_at   TEXT NOT NULL DEFAULT ({_NOW_SQL})
);
""",
]

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_saved_games_user_created "
    "ON saved_games(user_id, created_at);",
]

_UPSERT_GAME_SQL = f"""\
INSERT INTO saved_games (user_id, game_id, game_data, rating, notes)
VALUES (?, ?, ?, ?, ?)
ON CONFLICT(user_id, game_id)
DO UPDATE SET game_data  = excluded.game_data,
              rating     = excluded.rating,
              notes      = excluded.notes,
              updated_at = {_NOW_SQL};
"""

_SELECT_GAMES_SQL = """\
SELECT id, user_id, game_id, game_data, rating, notes, created_at, updated_at
FROM saved_games
WHERE user_id = ?
ORDER BY created_at DESC, id DESC;
"""

_SELECT_ONE_GAME_SQL = """\
SELECT id, user_id, game_id, game_data, rating, notes, created_at, updated_at
FROM saved_games
WHERE user_id = ? AND game_id = ?;
"""

_SELECT_PROFILE_SQL = """\
SELECT id, username, full_name, avatar_url, preferences, created_at, updated_at
FROM profiles
WHERE id = ?;
"""

_UPSERT_PROFILE_SQL = f"""\
INSERT INTO profiles (id, username, full_name, avatar_url, preferences)
VALUES (?, ?, ?, ?, ?)
ON CONFLICT(id)
DO UPDATE SET username    = excluded.username,
              full_name   = excluded.full_name,
              avatar_url  = excluded.avatar_url,
              preferences = excluded.preferences,
              updated_at  = {_NOW_SQL};
"""


def _row_to_saved_game(row: aiosqlite.Row) -> SavedGame:
    data = dict(row)
    data["game_data"] = SavedGameData.model_validate(json.loads(data["game_data"]))
    return SavedGame.model_validate(data)


def _row_to_profile(row: aiosqlite.Row) -> UserProfile:
    data = dict(row)
    data["preferences"] = json.loads(data["preferences"] or "{}")
    return UserProfile.model_validate(data)


class SQLiteLibraryProvider(ILibraryProvider):
    """Saved games and profiles in a local SQLite file."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    def _error(self, action: str, exc: Exception) -> PersistenceError:
        return PersistenceError(
            message=f"Failed to {action}: {exc}",
            provider_name=self.get_provider_name(),
        )

    async def initialize(self) -> None:
        """Create the library tables and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            for table_sql in _CREATE_TABLES_SQL:
                await db.execute(table_sql)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("library_db_initialized", path=str(self._db_path))

    # ------------------------------------------------------------------
    # Saved games
    # ------------------------------------------------------------------

    async def list_saved_games(self, user_id: str) -> list[SavedGame]:
        """Return the user's saved games, newest first."""
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(_SELECT_GAMES_SQL, (user_id,))
                rows = await cursor.fetchall()
            return [_row_to_saved_game(r) for r in rows]
        except (aiosqlite.Error, OSError, ValueError, ValidationError) as exc:
            raise self._error("list saved games", exc) from exc

    async def save_game(
        self,
        user_id: str,
        game_id: int,
        game_data: SavedGameData,
        rating: int | None = None,
        notes: str | None = None,
    ) -> SavedGame:
        """Insert or update a saved game.  Returns the stored row."""
        if rating is not None and not 1 <= rating <= 5:
            msg = f"Rating must be between 1 and 5, got {rating}"
            raise ValueError(msg)

        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                await db.execute(
                    _UPSERT_GAME_SQL,
                    (user_id, game_id, game_data.model_dump_json(), rating, notes),
                )
                await db.commit()
                cursor = await db.execute(_SELECT_ONE_GAME_SQL, (user_id, game_id))
                row = await cursor.fetchone()
            saved = _row_to_saved_game(row)
        except (aiosqlite.Error, OSError, ValidationError) as exc:
            raise self._error("save game", exc) from exc

        logger.info("game_saved", user_id=user_id, game_id=game_id, rating=rating)
        return saved

    async def remove_game(self, user_id: str, game_id: int) -> bool:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    "DELETE FROM saved_games WHERE user_id = ? AND game_id = ?",
                    (user_id, game_id),
                )
                await db.commit()
                removed = cursor.rowcount > 0
        except (aiosqlite.Error, OSError) as exc:
            raise self._error("remove game", exc) from exc

        logger.info("game_removed", user_id=user_id, game_id=game_id, removed=removed)
        return removed

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    async def get_profile(self, user_id: str) -> UserProfile | None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(_SELECT_PROFILE_SQL, (user_id,))
                row = await cursor.fetchone()
            return _row_to_profile(row) if row is not None else None
        except (aiosqlite.Error, OSError, ValueError, ValidationError) as exc:
            raise self._error("load profile", exc) from exc

    async def update_profile(self, user_id: str, update: ProfileUpdate) -> UserProfile:
        """Create the profile if needed, then apply the non-``None`` fields.

        ``preferences`` is merged key-by-key into the stored preferences and
        the result is validated before anything is written, so a bad update
        leaves the stored profile untouched.

        Raises
        ------
        ValueError
            If the merged preferences do not form valid ``UserPreferences``.
        ProfileConflictError
            If the requested username belongs to another user.
        """
        current = await self.get_profile(user_id)
        merged: dict[str, Any] = {
            "username": current.username if current else None,
            "full_name": current.full_name if current else None,
            "avatar_url": current.avatar_url if current else None,
            "preferences": current.preferences.model_dump() if current else {},
        }
        changes = update.model_dump(exclude_none=True)
        if "preferences" in changes:
            merged["preferences"].update(changes.pop("preferences"))
        merged.update(changes)

        try:
            preferences = UserPreferences.model_validate(merged["preferences"])
        except ValidationError as exc:
            msg = f"Invalid profile preferences: {exc.errors(include_url=False)}"
            raise ValueError(msg) from exc

        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                await db.execute(
                    _UPSERT_PROFILE_SQL,
                    (
                        user_id,
                        merged["username"],
                        merged["full_name"],
                        merged["avatar_url"],
                        preferences.model_dump_json(),
                    ),
                )
                await db.commit()
                cursor = await db.execute(_SELECT_PROFILE_SQL, (user_id,))
                row = await cursor.fetchone()
            profile = _row_to_profile(row)
        except aiosqlite.IntegrityError as exc:
            logger.info("profile_username_taken", user_id=user_id, username=merged["username"])
            raise ProfileConflictError(
                message=f"Username {merged['username']!r} is already taken",
                provider_name=self.get_provider_name(),
            ) from exc
        except (aiosqlite.Error, OSError, ValueError, ValidationError) as exc:
            raise self._error("update profile", exc) from exc

        logger.info("profile_updated", user_id=user_id, fields=sorted(update.model_fields_set))
        return profile

    def get_provider_name(self) -> str:
        return "sqlite_library"

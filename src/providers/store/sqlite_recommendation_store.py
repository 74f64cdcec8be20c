"""SQLite-backed recommendation snapshot store.

Appends one immutable row per successful generation to the
``recommendation_snapshots`` table and reads back the newest row per
owner.  Uses ``aiosqlite`` for async I/O.

Items are stored as a JSON array in their wire form (camelCase keys), the
same shape the API returns, so a row can be inspected with plain
``sqlite3`` and read back without translation.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite
import structlog
from pydantic import ValidationError

from src.interfaces.recommendation_store import IRecommendationStore
from src.models.recommendation import EnrichedRecommendation, RecommendationSnapshot
from src.utils.errors import PersistenceError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/gamescout.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS recommendation_snapshots (
    id                 INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id           TEXT    NOT NULL,
    recommendations    TEXT    NOT NULL,
    based_on_game_ids  TEXT    NOT NULL DEFAULT '[]',
    based_on_count     INTEGER NOT NULL,
    created_at         TEXT    NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_snapshots_owner_created "
    "ON recommendation_snapshots(owner_id, created_at);",
]

_INSERT_SQL = """\
INSERT INTO recommendation_snapshots
    (owner_id, recommendations, based_on_game_ids, based_on_count, created_at)
VALUES (?, ?, ?, ?, ?);
"""

# id breaks ties between snapshots written within the same microsecond.
_SELECT_LATEST_SQL = """\
SELECT id, owner_id, recommendations, based_on_game_ids, based_on_count, created_at
FROM recommendation_snapshots
WHERE owner_id = ?
ORDER BY created_at DESC, id DESC
LIMIT 1;
"""


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


class SQLiteRecommendationStore(IRecommendationStore):
    """Append-only snapshot persistence in a local SQLite file."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the snapshots table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("recommendation_store_initialized", path=str(self._db_path))

    async def append(
        self,
        owner_id: str,
        items: list[EnrichedRecommendation],
        based_on_count: int,
        based_on_game_ids: list[int] | None = None,
    ) -> RecommendationSnapshot:
        created_at = _utc_now()
        game_ids = list(based_on_game_ids or [])
        payload = json.dumps([item.model_dump(by_alias=True) for item in items])

        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    _INSERT_SQL,
                    (
                        owner_id,
                        payload,
                        json.dumps(game_ids),
                        based_on_count,
                        created_at.isoformat(timespec="microseconds"),
                    ),
                )
                await db.commit()
                snapshot_id = cursor.lastrowid
        except (aiosqlite.Error, OSError) as exc:
            raise PersistenceError(
                message=f"Failed to write recommendation snapshot: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "snapshot_appended",
            owner_id=owner_id,
            snapshot_id=snapshot_id,
            items=len(items),
            based_on_count=based_on_count,
        )
        return RecommendationSnapshot(
            id=snapshot_id,
            owner_id=owner_id,
            items=list(items),
            based_on_count=based_on_count,
            based_on_game_ids=game_ids,
            created_at=created_at,
        )

    async def read_latest(self, owner_id: str) -> RecommendationSnapshot | None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(_SELECT_LATEST_SQL, (owner_id,))
                row = await cursor.fetchone()
        except aiosqlite.OperationalError as exc:
            # Nothing has ever been written: same as "no snapshot".
            if "no such table" in str(exc):
                logger.debug("snapshot_table_missing", path=str(self._db_path))
                return None
            raise PersistenceError(
                message=f"Failed to read recommendation snapshot: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except (aiosqlite.Error, OSError) as exc:
            raise PersistenceError(
                message=f"Failed to read recommendation snapshot: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if row is None:
            return None

        try:
            return RecommendationSnapshot(
                id=row["id"],
                owner_id=row["owner_id"],
                items=[
                    EnrichedRecommendation.model_validate(item)
                    for item in json.loads(row["recommendations"])
                ],
                based_on_count=row["based_on_count"],
                based_on_game_ids=json.loads(row["based_on_game_ids"] or "[]"),
                created_at=datetime.fromisoformat(row["created_at"]),
            )
        except (ValueError, ValidationError) as exc:
            raise PersistenceError(
                message=f"Stored snapshot {row['id']} is corrupt",
                provider_name=self.get_provider_name(),
            ) from exc

    def get_provider_name(self) -> str:
        return "sqlite_recommendations"

"""SQLite-backed feedback provider.

Persists 1-5 chat ratings to a local SQLite database at
``data/feedback.db``.  Uses ``aiosqlite`` for async I/O.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from supportkb.interfaces.feedback_provider import MAX_RATING, MIN_RATING, IFeedbackProvider
from supportkb.utils.errors import ValidationError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/feedback.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS ratings (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id  TEXT,
    rating      INTEGER NOT NULL,
    created_at  TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_ratings_session ON ratings(session_id);",
]

_INSERT_SQL = "INSERT INTO ratings (session_id, rating) VALUES (?, ?);"

_SELECT_BY_ID_SQL = "SELECT id, session_id, rating, created_at FROM ratings WHERE id = ?;"

_SUMMARY_SQL = "SELECT rating, COUNT(*) AS total FROM ratings GROUP BY rating;"


class SQLiteFeedbackProvider(IFeedbackProvider):
    """SQLite-backed rating persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the ratings table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("feedback_db_initialized", path=str(self._db_path))

    async def submit_rating(self, rating: int, session_id: str | None = None) -> dict[str, Any]:
        """Store a rating and return the inserted row."""
        # bool is an int subclass; True must not count as a rating of 1.
        if (
            not isinstance(rating, int)
            or isinstance(rating, bool)
            or not MIN_RATING <= rating <= MAX_RATING
        ):
            raise ValidationError(message="Invalid rating value")

        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_INSERT_SQL, (session_id, rating))
            row_id = cursor.lastrowid
            await db.commit()
            cursor = await db.execute(_SELECT_BY_ID_SQL, (row_id,))
            row = await cursor.fetchone()

        result = dict(row)
        logger.info("rating_submitted", session_id=session_id, rating=rating)
        return result

    async def get_rating_summary(self) -> dict[str, Any]:
        """Return the rating count, mean and per-value histogram."""
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SUMMARY_SQL)
            rows = await cursor.fetchall()

        by_value = {str(v): 0 for v in range(MIN_RATING, MAX_RATING + 1)}
        total = 0
        weighted = 0
        for row in rows:
            by_value[str(row["rating"])] = row["total"]
            total += row["total"]
            weighted += row["rating"] * row["total"]

        return {
            "total_ratings": total,
            "average": round(weighted / total, 2) if total else None,
            "by_value": by_value,
        }

    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
        return "sqlite_feedback"

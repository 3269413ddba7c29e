"""Key/value store for saved progress and player settings."""

import json
import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import aiosqlite

from stop_recall.models.transit import StopId, stop_id_sort_key

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "memorypourcaen_"
FOUND_STOPS_KEY = "found_stops"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS storage (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class ProgressStore:
    """JSON values in a SQLite table, keys namespaced by an application prefix.

    Storage problems never reach the game: failed reads return None and failed
    writes are logged and dropped.
    """

    def __init__(self, db_path: Path, prefix: str = DEFAULT_PREFIX):
        self.db_path = Path(db_path)
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return self.prefix + key

    @asynccontextmanager
    async def _open(self) -> AsyncIterator[aiosqlite.Connection]:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.db_path) as db:
            await db.executescript(SCHEMA_SQL)
            yield db

    async def load(self, key: str) -> Any | None:
        """Load and decode a stored value.

        Returns:
            The decoded value, or None if missing, unreadable or corrupt.
        """
        try:
            async with self._open() as db:
                async with db.execute(
                    "SELECT value FROM storage WHERE key = ?", (self._key(key),)
                ) as cursor:
                    row = await cursor.fetchone()
            return json.loads(row[0]) if row else None
        except (OSError, aiosqlite.Error, ValueError) as e:
            logger.error(f"Failed to retrieve data for key {key}: {e}")
            return None

    async def save(self, key: str, value: Any) -> None:
        """Encode and store a value, replacing any previous one."""
        try:
            encoded = json.dumps(value)
            async with self._open() as db:
                await db.execute(
                    "INSERT OR REPLACE INTO storage (key, value) VALUES (?, ?)",
                    (self._key(key), encoded),
                )
                await db.commit()
        except (OSError, aiosqlite.Error, TypeError, ValueError) as e:
            logger.error(f"Failed to store data for key {key}: {e}")

    async def clear(self) -> None:
        """Remove every key under this store's prefix."""
        try:
            async with self._open() as db:
                await db.execute(
                    "DELETE FROM storage WHERE substr(key, 1, ?) = ?",
                    (len(self.prefix), self.prefix),
                )
                await db.commit()
        except (OSError, aiosqlite.Error) as e:
            logger.error(f"Failed to clear data: {e}")


def export_found_stops(found_stop_ids: Iterable[StopId]) -> str:
    """Export found stop ids as pretty JSON for debugging."""
    return json.dumps(sorted(found_stop_ids, key=stop_id_sort_key), indent=2)

"""Key-value stores backing the persisted state."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiosqlite

from ..config import settings

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Abstract string-to-string store the persisted state is written to."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value stored under ``key``, or None."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove ``key``; returns True if it existed."""
        pass

    async def initialize(self):
        pass

    async def close(self):
        pass


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store for tests and throwaway sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-based key-value store."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path or settings.database_path)
        self._connection: Optional[aiosqlite.Connection] = None

    async def initialize(self):
        """Open the database and create the table."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(str(self.db_path))

        await self._connection.executescript(
            """
            CREATE TABLE IF NOT EXISTS kv_entries (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        await self._connection.commit()
        logger.info(f"SQLiteKeyValueStore initialized at {self.db_path}")

    async def close(self):
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def get(self, key: str) -> Optional[str]:
        async with self._connection.execute(
            "SELECT value FROM kv_entries WHERE key = ?", (key,)
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return row[0]
        return None

    async def set(self, key: str, value: str) -> None:
        await self._connection.execute(
            """
            INSERT OR REPLACE INTO kv_entries (key, value, updated_at)
            VALUES (?, ?, ?)
            """,
            (key, value, datetime.now(timezone.utc).isoformat()),
        )
        await self._connection.commit()

    async def delete(self, key: str) -> bool:
        cursor = await self._connection.execute(
            "DELETE FROM kv_entries WHERE key = ?", (key,)
        )
        await self._connection.commit()
        return cursor.rowcount > 0

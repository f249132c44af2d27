import os

import aiosqlite

from remindly.logger import logger

__all__ = ["KeyValueStore"]

_SCHEMA_V1 = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at_utc TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""


class KeyValueStore:
    """Durable string key-value storage in a single SQLite table."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self.conn: aiosqlite.Connection | None = None

    def _ensure_conn(self) -> aiosqlite.Connection:
        if self.conn is None:
            raise RuntimeError("Key-value store is not open, call open() first")
        return self.conn

    async def open(self) -> None:
        db_dir = os.path.dirname(self.db_path)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)
        self.conn = await aiosqlite.connect(self.db_path)

        async with self.conn.execute("PRAGMA user_version") as cursor:
            row = await cursor.fetchone()
            user_version = row[0]

        if user_version == 0:
            await self.conn.executescript(_SCHEMA_V1)
            await self.conn.execute("PRAGMA user_version = 1")

        # schema upgrades go here
        await self.conn.commit()
        logger.debug(f"Key-value store opened: {self.db_path} (schema v{max(user_version, 1)})")

    async def close(self) -> None:
        if self.conn is not None:
            await self.conn.close()
            self.conn = None

    async def get(self, key: str) -> str | None:
        conn = self._ensure_conn()
        async with conn.execute("SELECT value FROM kv WHERE key = ?", (key,)) as cursor:
            row = await cursor.fetchone()
        return None if row is None else row[0]

    async def set(self, key: str, value: str) -> None:
        conn = self._ensure_conn()
        await conn.execute(
            "INSERT INTO kv (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at_utc = CURRENT_TIMESTAMP",
            (key, value),
        )
        await conn.commit()
        logger.trace(f"kv set: key={key}, {len(value)} bytes")

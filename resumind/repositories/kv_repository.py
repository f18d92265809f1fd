import asyncio
import logging

from resumind.db.connection import get_connection
from resumind.repositories.base import AbstractKeyValueStore

logger = logging.getLogger(__name__)


class SqliteKeyValueStore(AbstractKeyValueStore):
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _set(self, key: str, value: str) -> None:
        with get_connection(self._db_path) as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value      = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, value),
            )
            conn.commit()

    def _get(self, key: str) -> str | None:
        with get_connection(self._db_path) as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None

    async def set(self, key: str, value: str) -> bool:
        await asyncio.to_thread(self._set, key, value)
        logger.info("[kv] set | key=%s | bytes=%d", key, len(value))
        return True

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get, key)

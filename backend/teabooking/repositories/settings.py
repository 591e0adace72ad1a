from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from teabooking.core.document_store import translate_errors
from teabooking.repositories.base import BaseRepository, MongoRepository


class SettingsRepository(ABC):
    """Key/value store for singleton records (admin credential, shop status)."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value stored under *key*, or ``None``."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Create or replace the value under *key*."""

    @abstractmethod
    async def set_if_absent(self, key: str, value: str) -> bool:
        """Store *value* only when *key* has no value yet.

        Returns ``True`` when the value was written.
        """

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove *key*; returns whether a value was removed."""


class SqliteSettingsRepository(BaseRepository, SettingsRepository):
    """Read/write helpers for the ``settings`` table."""

    _table_name = "settings"

    async def get(self, key: str) -> Optional[str]:
        row = await self.fetch_one(
            "SELECT value FROM settings WHERE key = ?", (key,)
        )
        if row is None:
            return None
        return row["value"]

    async def set(self, key: str, value: str) -> None:
        await self.execute_write(
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )

    async def set_if_absent(self, key: str, value: str) -> bool:
        changed = await self.execute_write(
            "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?)",
            (key, value),
        )
        return changed > 0

    async def delete(self, key: str) -> bool:
        removed = await self.execute_write(
            "DELETE FROM settings WHERE key = ?", (key,)
        )
        return removed > 0


class MongoSettingsRepository(MongoRepository, SettingsRepository):
    """Read/write helpers for the ``settings`` collection."""

    _collection_name = "settings"

    async def get(self, key: str) -> Optional[str]:
        with translate_errors("settings.get"):
            doc = await self._collection.find_one({"key": key})
        if doc is None:
            return None
        return doc["value"]

    async def set(self, key: str, value: str) -> None:
        with translate_errors("settings.set"):
            await self._collection.update_one(
                {"key": key}, {"$set": {"value": value}}, upsert=True
            )

    async def set_if_absent(self, key: str, value: str) -> bool:
        with translate_errors("settings.set_if_absent"):
            result = await self._collection.update_one(
                {"key": key}, {"$setOnInsert": {"value": value}}, upsert=True
            )
        return result.upserted_id is not None

    async def delete(self, key: str) -> bool:
        with translate_errors("settings.delete"):
            result = await self._collection.delete_one({"key": key})
        return result.deleted_count > 0

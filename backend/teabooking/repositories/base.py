from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection

from teabooking.core.database import Database
from teabooking.core.document_store import DocumentStore


def to_iso(value: datetime) -> str:
    """Render *value* as a UTC ISO-8601 string with millisecond precision.

    The fixed ``YYYY-MM-DDTHH:MM:SS.mmmZ`` shape keeps string comparison in
    SQL equivalent to time comparison.
    """
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def truncate_ms(value: datetime) -> datetime:
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def utc_now_ms() -> datetime:
    """Current UTC time at the millisecond precision timestamps are stored with."""
    return truncate_ms(datetime.now(timezone.utc))


def from_iso(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class BaseRepository:
    """Thin convenience wrapper around :class:`Database`.

    Subclasses set ``_table_name`` and build domain-specific queries.
    All SQL uses parameter binding -- **never** f-string interpolation.
    """

    _table_name: str = ""

    def __init__(self, db: Database) -> None:
        self._db = db

    # ------------------------------------------------------------------
    # Delegated helpers
    # ------------------------------------------------------------------

    async def execute_write(self, sql: str, params: tuple[Any, ...] = ()) -> int:
        return await self._db.execute_write(sql, params)

    async def fetch_one(
        self, sql: str, params: tuple[Any, ...] = ()
    ) -> Optional[dict[str, Any]]:
        return await self._db.fetch_one(sql, params)

    async def fetch_all(
        self, sql: str, params: tuple[Any, ...] = ()
    ) -> list[dict[str, Any]]:
        return await self._db.fetch_all(sql, params)


class MongoRepository:
    """Base for repositories backed by a MongoDB collection.

    Subclasses set ``_collection_name``.  Documents use the driver's
    ``ObjectId`` as ``_id``; it is exposed to callers as a hex string ``id``.
    """

    _collection_name: str = ""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    @property
    def _collection(self) -> AsyncIOMotorCollection:
        return self._store.collection(self._collection_name)

    @staticmethod
    def _object_id(id: str) -> Optional[ObjectId]:
        if not ObjectId.is_valid(id):
            return None
        return ObjectId(id)

    @staticmethod
    def _with_string_id(doc: dict[str, Any]) -> dict[str, Any]:
        doc = dict(doc)
        if "_id" in doc:
            doc["id"] = str(doc.pop("_id"))
        return doc

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from pymongo import DESCENDING, ReturnDocument

from teabooking.core.constants import NOTIFICATION_RETENTION_COUNT
from teabooking.core.document_store import translate_errors
from teabooking.models.notification import Notification, NotificationCreate
from teabooking.repositories.base import (
    BaseRepository,
    MongoRepository,
    from_iso,
    utc_now_ms,
    to_iso,
)

_UPDATABLE_FIELDS: frozenset[str] = frozenset({"message", "location"})


class NotificationRepository(ABC):
    """Persistence for shop-wide notifications shown to customers.

    Only the newest ``NOTIFICATION_RETENTION_COUNT`` entries are kept.
    """

    @abstractmethod
    async def list_recent(self, limit: int) -> list[Notification]:
        ...

    @abstractmethod
    async def add(self, item: NotificationCreate) -> Notification:
        ...

    @abstractmethod
    async def update(
        self, id: str, changes: dict[str, Optional[str]]
    ) -> Optional[Notification]:
        ...

    @abstractmethod
    async def delete(self, id: str) -> bool:
        ...


def _row_to_notification(row: dict[str, Any]) -> Notification:
    return Notification(
        id=str(row["id"]),
        message=row["message"],
        location=row.get("location"),
        created_at=from_iso(row["createdAt"]),
    )


class SqliteNotificationRepository(BaseRepository, NotificationRepository):
    """CRUD helpers for the ``notifications`` table."""

    _table_name = "notifications"

    async def list_recent(self, limit: int) -> list[Notification]:
        rows = await self.fetch_all(
            "SELECT * FROM notifications ORDER BY createdAt DESC, rowid DESC LIMIT ?",
            (limit,),
        )
        return [_row_to_notification(r) for r in rows]

    async def get_by_id(self, id: str) -> Optional[Notification]:
        row = await self.fetch_one(
            "SELECT * FROM notifications WHERE id = ?", (id,)
        )
        if row is None:
            return None
        return _row_to_notification(row)

    async def add(self, item: NotificationCreate) -> Notification:
        notification = Notification(
            id=uuid.uuid4().hex,
            message=item.message,
            location=item.location,
            created_at=utc_now_ms(),
        )
        await self._db.execute_write_transaction(
            [
                (
                    "INSERT INTO notifications (id, message, location, createdAt) "
                    "VALUES (?, ?, ?, ?)",
                    (
                        notification.id,
                        notification.message,
                        notification.location,
                        to_iso(notification.created_at),
                    ),
                ),
                (
                    "DELETE FROM notifications WHERE id NOT IN ("
                    "SELECT id FROM notifications ORDER BY createdAt DESC, rowid DESC LIMIT ?)",
                    (NOTIFICATION_RETENTION_COUNT,),
                ),
            ]
        )
        return notification

    async def update(
        self, id: str, changes: dict[str, Optional[str]]
    ) -> Optional[Notification]:
        existing = await self.get_by_id(id)
        if existing is None:
            return None

        fields = [f for f in changes if f in _UPDATABLE_FIELDS]
        if fields:
            assignments = ", ".join(f"{f} = ?" for f in fields)
            await self.execute_write(
                f"UPDATE notifications SET {assignments} WHERE id = ?",  # noqa: S608
                (*(changes[f] for f in fields), id),
            )
        return await self.get_by_id(id)

    async def delete(self, id: str) -> bool:
        removed = await self.execute_write(
            "DELETE FROM notifications WHERE id = ?", (id,)
        )
        return removed > 0


class MongoNotificationRepository(MongoRepository, NotificationRepository):
    """CRUD helpers for the ``notifications`` collection."""

    _collection_name = "notifications"

    async def list_recent(self, limit: int) -> list[Notification]:
        with translate_errors("notifications.list_recent"):
            docs = (
                await self._collection.find()
                .sort("createdAt", DESCENDING)
                .limit(limit)
                .to_list(None)
            )
        return [_row_to_notification(self._with_string_id(d)) for d in docs]

    async def add(self, item: NotificationCreate) -> Notification:
        doc = {
            "message": item.message,
            "location": item.location,
            "createdAt": utc_now_ms(),
        }
        with translate_errors("notifications.add"):
            result = await self._collection.insert_one(doc)
            stale = (
                await self._collection.find({}, {"_id": 1})
                .sort("createdAt", DESCENDING)
                .skip(NOTIFICATION_RETENTION_COUNT)
                .to_list(None)
            )
            if stale:
                await self._collection.delete_many(
                    {"_id": {"$in": [d["_id"] for d in stale]}}
                )
        doc["_id"] = result.inserted_id
        return _row_to_notification(self._with_string_id(doc))

    async def update(
        self, id: str, changes: dict[str, Optional[str]]
    ) -> Optional[Notification]:
        oid = self._object_id(id)
        if oid is None:
            return None
        updates = {f: v for f, v in changes.items() if f in _UPDATABLE_FIELDS}
        with translate_errors("notifications.update"):
            if updates:
                doc = await self._collection.find_one_and_update(
                    {"_id": oid}, {"$set": updates}, return_document=ReturnDocument.AFTER
                )
            else:
                doc = await self._collection.find_one({"_id": oid})
        if doc is None:
            return None
        return _row_to_notification(self._with_string_id(doc))

    async def delete(self, id: str) -> bool:
        oid = self._object_id(id)
        if oid is None:
            return False
        with translate_errors("notifications.delete"):
            result = await self._collection.delete_one({"_id": oid})
        return result.deleted_count > 0

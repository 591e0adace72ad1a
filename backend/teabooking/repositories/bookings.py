from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from pymongo import DESCENDING, ReturnDocument

from teabooking.core.constants import BookingStatus
from teabooking.core.document_store import translate_errors
from teabooking.models.booking import Booking, BookingCreate
from teabooking.repositories.base import (
    BaseRepository,
    MongoRepository,
    from_iso,
    utc_now_ms,
    to_iso,
)

# Column names allowed in UPDATE statements.
_UPDATABLE_FIELDS: frozenset[str] = frozenset({"status", "eta"})


class BookingRepository(ABC):
    """Persistence for customer bookings."""

    @abstractmethod
    async def list_all(self) -> list[Booking]:
        """Return every booking, newest first."""

    @abstractmethod
    async def get_by_id(self, id: str) -> Optional[Booking]:
        ...

    @abstractmethod
    async def add(self, item: BookingCreate) -> Booking:
        ...

    @abstractmethod
    async def update(
        self, id: str, changes: dict[str, str], phone: Optional[str] = None
    ) -> Optional[Booking]:
        """Apply *changes* and return the updated booking.

        When *phone* is given the booking must also match it.  Returns
        ``None`` when no booking matches.
        """

    @abstractmethod
    async def delete(self, id: str) -> bool:
        ...

    @abstractmethod
    async def delete_created_before(self, cutoff: datetime) -> int:
        ...


def _row_to_booking(row: dict[str, Any]) -> Booking:
    return Booking(
        id=str(row["id"]),
        name=row["name"],
        phone=row["phone"],
        location=row["location"],
        custom_location=row.get("customLocation"),
        notes=row.get("notes"),
        status=row.get("status") or BookingStatus.PENDING.value,
        eta=row.get("eta") or "",
        created_at=from_iso(row["createdAt"]),
    )


class SqliteBookingRepository(BaseRepository, BookingRepository):
    """CRUD helpers for the ``bookings`` table."""

    _table_name = "bookings"

    async def list_all(self) -> list[Booking]:
        rows = await self.fetch_all(
            "SELECT * FROM bookings ORDER BY createdAt DESC, rowid DESC"
        )
        return [_row_to_booking(r) for r in rows]

    async def get_by_id(self, id: str) -> Optional[Booking]:
        row = await self.fetch_one("SELECT * FROM bookings WHERE id = ?", (id,))
        if row is None:
            return None
        return _row_to_booking(row)

    async def add(self, item: BookingCreate) -> Booking:
        booking = Booking(
            id=uuid.uuid4().hex,
            name=item.name,
            phone=item.phone,
            location=item.location,
            custom_location=item.custom_location,
            notes=item.notes,
            created_at=utc_now_ms(),
        )
        await self.execute_write(
            "INSERT INTO bookings "
            "(id, name, phone, location, customLocation, notes, status, eta, createdAt) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                booking.id,
                booking.name,
                booking.phone,
                booking.location,
                booking.custom_location,
                booking.notes,
                booking.status,
                booking.eta,
                to_iso(booking.created_at),
            ),
        )
        return booking

    async def update(
        self, id: str, changes: dict[str, str], phone: Optional[str] = None
    ) -> Optional[Booking]:
        existing = await self.get_by_id(id)
        if existing is None:
            return None
        if phone and existing.phone != phone:
            return None

        fields = [f for f in changes if f in _UPDATABLE_FIELDS]
        if fields:
            assignments = ", ".join(f"{f} = ?" for f in fields)
            await self.execute_write(
                f"UPDATE bookings SET {assignments} WHERE id = ?",  # noqa: S608
                (*(changes[f] for f in fields), id),
            )
        return await self.get_by_id(id)

    async def delete(self, id: str) -> bool:
        removed = await self.execute_write("DELETE FROM bookings WHERE id = ?", (id,))
        return removed > 0

    async def delete_created_before(self, cutoff: datetime) -> int:
        return await self.execute_write(
            "DELETE FROM bookings WHERE createdAt < ?", (to_iso(cutoff),)
        )


class MongoBookingRepository(MongoRepository, BookingRepository):
    """CRUD helpers for the ``bookings`` collection."""

    _collection_name = "bookings"

    async def list_all(self) -> list[Booking]:
        with translate_errors("bookings.list_all"):
            docs = await self._collection.find().sort("createdAt", DESCENDING).to_list(None)
        return [_row_to_booking(self._with_string_id(d)) for d in docs]

    async def get_by_id(self, id: str) -> Optional[Booking]:
        oid = self._object_id(id)
        if oid is None:
            return None
        with translate_errors("bookings.get_by_id"):
            doc = await self._collection.find_one({"_id": oid})
        if doc is None:
            return None
        return _row_to_booking(self._with_string_id(doc))

    async def add(self, item: BookingCreate) -> Booking:
        doc = {
            "name": item.name,
            "phone": item.phone,
            "location": item.location,
            "customLocation": item.custom_location,
            "notes": item.notes,
            "status": BookingStatus.PENDING.value,
            "eta": "",
            "createdAt": utc_now_ms(),
        }
        with translate_errors("bookings.add"):
            result = await self._collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return _row_to_booking(self._with_string_id(doc))

    async def update(
        self, id: str, changes: dict[str, str], phone: Optional[str] = None
    ) -> Optional[Booking]:
        oid = self._object_id(id)
        if oid is None:
            return None
        query: dict[str, Any] = {"_id": oid}
        if phone:
            query["phone"] = phone

        updates = {f: v for f, v in changes.items() if f in _UPDATABLE_FIELDS}
        with translate_errors("bookings.update"):
            if updates:
                doc = await self._collection.find_one_and_update(
                    query, {"$set": updates}, return_document=ReturnDocument.AFTER
                )
            else:
                doc = await self._collection.find_one(query)
        if doc is None:
            return None
        return _row_to_booking(self._with_string_id(doc))

    async def delete(self, id: str) -> bool:
        oid = self._object_id(id)
        if oid is None:
            return False
        with translate_errors("bookings.delete"):
            result = await self._collection.delete_one({"_id": oid})
        return result.deleted_count > 0

    async def delete_created_before(self, cutoff: datetime) -> int:
        with translate_errors("bookings.delete_created_before"):
            result = await self._collection.delete_many({"createdAt": {"$lt": cutoff}})
        return result.deleted_count

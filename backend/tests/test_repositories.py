from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from teabooking.core.constants import NOTIFICATION_RETENTION_COUNT
from teabooking.core.exceptions import DuplicateKeyError
from teabooking.core.storage import Storage
from teabooking.models.auth import SessionToken
from teabooking.models.booking import BookingCreate
from teabooking.models.notification import NotificationCreate


def _booking(name: str = "Bruce Wayne", phone: str = "+91 98765 43210") -> BookingCreate:
    return BookingCreate(name=name, phone=phone, location="Gate 2")


# ------------------------------------------------------------------
# Settings
# ------------------------------------------------------------------


async def test_settings_set_overwrites(storage: Storage) -> None:
    assert await storage.settings.get("shopStatus") is None
    await storage.settings.set("shopStatus", '{"isOpen": true}')
    await storage.settings.set("shopStatus", '{"isOpen": false}')
    assert await storage.settings.get("shopStatus") == '{"isOpen": false}'


async def test_settings_set_if_absent(storage: Storage) -> None:
    assert await storage.settings.set_if_absent("k", "v1")
    assert not await storage.settings.set_if_absent("k", "v2")
    assert await storage.settings.get("k") == "v1"


# ------------------------------------------------------------------
# Tokens
# ------------------------------------------------------------------


async def test_token_duplicate_rejected(storage: Storage) -> None:
    now = datetime.now(timezone.utc)
    session = SessionToken(token="ab" * 32, created_at=now, expires_at=now + timedelta(days=7))
    await storage.tokens.add(session)
    with pytest.raises(DuplicateKeyError):
        await storage.tokens.add(session)


async def test_token_timestamps_roundtrip_at_ms_precision(storage: Storage) -> None:
    created = datetime(2024, 3, 1, 12, 0, 0, 123000, tzinfo=timezone.utc)
    session = SessionToken(token="cd" * 32, created_at=created, expires_at=created + timedelta(days=7))
    await storage.tokens.add(session)

    loaded = await storage.tokens.get(session.token)
    assert loaded == session


async def test_token_delete_reports_removal(storage: Storage) -> None:
    now = datetime.now(timezone.utc)
    session = SessionToken(token="ef" * 32, created_at=now, expires_at=now + timedelta(days=7))
    await storage.tokens.add(session)

    assert await storage.tokens.delete(session.token)
    assert not await storage.tokens.delete(session.token)


# ------------------------------------------------------------------
# Bookings
# ------------------------------------------------------------------


async def test_booking_defaults(storage: Storage) -> None:
    booking = await storage.bookings.add(_booking())
    assert booking.status == "pending"
    assert booking.eta == ""
    assert booking.custom_location is None

    loaded = await storage.bookings.get_by_id(booking.id)
    assert loaded == booking


async def test_bookings_listed_newest_first(storage: Storage) -> None:
    first = await storage.bookings.add(_booking(name="First"))
    await asyncio.sleep(0.002)
    second = await storage.bookings.add(_booking(name="Second"))

    listed = await storage.bookings.list_all()
    assert [b.id for b in listed] == [second.id, first.id]


async def test_booking_update_status_and_eta(storage: Storage) -> None:
    booking = await storage.bookings.add(_booking())
    updated = await storage.bookings.update(
        booking.id, {"status": "confirmed", "eta": "10 min", "name": "ignored"}
    )
    assert updated.status == "confirmed"
    assert updated.eta == "10 min"
    assert updated.name == booking.name


async def test_booking_update_phone_mismatch(storage: Storage) -> None:
    booking = await storage.bookings.add(_booking())
    assert await storage.bookings.update(booking.id, {"status": "delivered"}, phone="0000000000") is None
    assert (await storage.bookings.get_by_id(booking.id)).status == "pending"

    matched = await storage.bookings.update(booking.id, {"status": "delivered"}, phone=booking.phone)
    assert matched.status == "delivered"


async def test_booking_update_and_delete_missing(storage: Storage) -> None:
    assert await storage.bookings.update("missing", {"status": "confirmed"}) is None
    assert not await storage.bookings.delete("missing")


async def test_delete_bookings_created_before(storage: Storage, db) -> None:
    old = await storage.bookings.add(_booking(name="Yesterday"))
    await db.execute_write(
        "UPDATE bookings SET createdAt = ? WHERE id = ?",
        ("2024-01-01T10:00:00.000Z", old.id),
    )
    recent = await storage.bookings.add(_booking(name="Today"))

    removed = await storage.bookings.delete_created_before(
        datetime(2024, 1, 2, tzinfo=timezone.utc)
    )
    assert removed == 1
    assert await storage.bookings.get_by_id(old.id) is None
    assert await storage.bookings.get_by_id(recent.id) is not None


# ------------------------------------------------------------------
# Notifications
# ------------------------------------------------------------------


async def test_notifications_trimmed_to_retention_count(storage: Storage) -> None:
    created = []
    for i in range(NOTIFICATION_RETENTION_COUNT + 5):
        created.append(await storage.notifications.add(NotificationCreate(message=f"Update {i}")))

    kept = await storage.notifications.list_recent(1000)
    assert len(kept) == NOTIFICATION_RETENTION_COUNT
    kept_ids = {n.id for n in kept}
    assert created[-1].id in kept_ids
    assert not kept_ids & {n.id for n in created[:5]}


async def test_notification_list_limit_and_order(storage: Storage) -> None:
    for i in range(3):
        await storage.notifications.add(NotificationCreate(message=f"Update {i}"))

    latest = await storage.notifications.list_recent(2)
    assert [n.message for n in latest] == ["Update 2", "Update 1"]


async def test_notification_update_and_delete(storage: Storage) -> None:
    notification = await storage.notifications.add(
        NotificationCreate(message="Closed today", location="Main gate")
    )
    updated = await storage.notifications.update(notification.id, {"location": None})
    assert updated.message == "Closed today"
    assert updated.location is None

    assert await storage.notifications.delete(notification.id)
    assert await storage.notifications.update(notification.id, {"message": "x"}) is None

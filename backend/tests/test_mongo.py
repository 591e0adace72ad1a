"""Document-store repository tests; need a reachable MongoDB."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest

from teabooking.core.document_store import DocumentStore
from teabooking.core.exceptions import DuplicateKeyError
from teabooking.core.storage import Storage
from teabooking.models.auth import SessionToken
from teabooking.models.booking import BookingCreate
from teabooking.models.notification import NotificationCreate
from teabooking.services.credentials import CredentialStore
from teabooking.services.session import SessionService

_COLLECTIONS = ("settings", "auth_tokens", "bookings", "notifications")


@pytest.fixture
async def mongo_storage(mongodb_uri: str) -> AsyncGenerator[Storage, None]:
    store = await DocumentStore.connect(mongodb_uri)
    for name in _COLLECTIONS:
        await store.collection(name).delete_many({})
    await store.ensure_indexes()
    yield Storage.for_mongo(store)
    for name in _COLLECTIONS:
        await store.collection(name).delete_many({})
    await store.close()


async def test_ping(mongo_storage: Storage) -> None:
    assert await mongo_storage.ping()


async def test_settings_set_if_absent(mongo_storage: Storage) -> None:
    assert await mongo_storage.settings.set_if_absent("adminPassword", "a:b")
    assert not await mongo_storage.settings.set_if_absent("adminPassword", "c:d")
    await mongo_storage.settings.set("adminPassword", "e:f")
    assert await mongo_storage.settings.get("adminPassword") == "e:f"


async def test_token_unique_and_expiry(mongo_storage: Storage) -> None:
    now = datetime.now(timezone.utc).replace(microsecond=0)
    session = SessionToken(token="ab" * 32, created_at=now, expires_at=now + timedelta(days=7))
    await mongo_storage.tokens.add(session)
    with pytest.raises(DuplicateKeyError):
        await mongo_storage.tokens.add(session)

    assert await mongo_storage.tokens.get(session.token) == session
    assert await mongo_storage.tokens.delete_expired(now + timedelta(days=8)) == 1


async def test_session_lifecycle(mongo_storage: Storage) -> None:
    service = SessionService(CredentialStore(mongo_storage.settings), mongo_storage.tokens)
    assert await service.bootstrap("teatime")

    token = await service.login("teatime")
    assert await service.verify_token(token)
    assert await service.update_admin_password("new-password")
    assert not await service.verify_token(token)


async def test_bookings(mongo_storage: Storage) -> None:
    booking = await mongo_storage.bookings.add(
        BookingCreate(name="Selina", phone="9876543210", location="Rooftop")
    )
    assert len(booking.id) == 24

    updated = await mongo_storage.bookings.update(booking.id, {"status": "confirmed"})
    assert updated.status == "confirmed"
    assert await mongo_storage.bookings.get_by_id("not-an-object-id") is None
    assert await mongo_storage.bookings.delete(booking.id)
    assert not await mongo_storage.bookings.delete(booking.id)


async def test_notifications_trimmed(mongo_storage: Storage) -> None:
    for i in range(55):
        await mongo_storage.notifications.add(NotificationCreate(message=f"Update {i}"))
    assert len(await mongo_storage.notifications.list_recent(100)) == 50

"""Explicitly opened store handle bundling the repositories of one backend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from teabooking.core.config import Config
from teabooking.core.constants import StorageBackend
from teabooking.core.database import Database
from teabooking.core.document_store import DocumentStore
from teabooking.core.logging import get_logger
from teabooking.repositories.bookings import (
    BookingRepository,
    MongoBookingRepository,
    SqliteBookingRepository,
)
from teabooking.repositories.notification import (
    MongoNotificationRepository,
    NotificationRepository,
    SqliteNotificationRepository,
)
from teabooking.repositories.settings import (
    MongoSettingsRepository,
    SettingsRepository,
    SqliteSettingsRepository,
)
from teabooking.repositories.tokens import (
    MongoTokenRepository,
    SqliteTokenRepository,
    TokenRepository,
)

logger = get_logger(__name__)


@dataclass
class Storage:
    """Repositories for the configured backend plus its lifecycle hooks."""

    backend: StorageBackend
    settings: SettingsRepository
    tokens: TokenRepository
    bookings: BookingRepository
    notifications: NotificationRepository
    _ping: Callable[[], Awaitable[bool]]
    _close: Callable[[], Awaitable[None]]

    @classmethod
    def for_sqlite(cls, db: Database) -> Storage:
        return cls(
            backend=StorageBackend.SQLITE,
            settings=SqliteSettingsRepository(db),
            tokens=SqliteTokenRepository(db),
            bookings=SqliteBookingRepository(db),
            notifications=SqliteNotificationRepository(db),
            _ping=db.ping,
            _close=db.close,
        )

    @classmethod
    def for_mongo(cls, store: DocumentStore) -> Storage:
        return cls(
            backend=StorageBackend.MONGO,
            settings=MongoSettingsRepository(store),
            tokens=MongoTokenRepository(store),
            bookings=MongoBookingRepository(store),
            notifications=MongoNotificationRepository(store),
            _ping=store.ping,
            _close=store.close,
        )

    async def ping(self) -> bool:
        return await self._ping()

    async def close(self) -> None:
        await self._close()


async def open_storage(config: Config) -> Storage:
    """Connect to the configured backend and prepare its schema.

    Raises ``DatabaseError`` when the backend is unreachable.
    """
    if config.database.backend is StorageBackend.MONGO:
        store = await DocumentStore.connect(config.database.mongodb_uri)
        await store.ensure_indexes()
        logger.info("Storage opened: backend=mongo")
        return Storage.for_mongo(store)

    db = await Database.initialize(config.database.sqlite_path)
    await db.run_migrations()
    logger.info("Storage opened: backend=sqlite path=%s", config.database.sqlite_path)
    return Storage.for_sqlite(db)

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING, DESCENDING
from pymongo import errors as mongo_errors

from teabooking.core.constants import MONGO_SERVER_SELECTION_TIMEOUT_MS
from teabooking.core.exceptions import DatabaseError, DuplicateKeyError
from teabooking.core.logging import get_logger

logger = get_logger(__name__)

_DEFAULT_DB_NAME = "teabooking"


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise driver errors as project exceptions."""
    try:
        yield
    except mongo_errors.DuplicateKeyError as exc:
        raise DuplicateKeyError(f"{operation}: duplicate key") from exc
    except mongo_errors.PyMongoError as exc:
        raise DatabaseError(f"{operation} failed: {exc}") from exc


class DocumentStore:
    """MongoDB connection handle used by the document-store repositories.

    The client is created with ``tz_aware=True`` so datetimes read back are
    UTC-aware, matching what the SQLite backend produces.
    """

    def __init__(self, client: AsyncIOMotorClient, db: AsyncIOMotorDatabase) -> None:
        self._client = client
        self._db = db

    @classmethod
    async def connect(cls, uri: str) -> DocumentStore:
        client: AsyncIOMotorClient = AsyncIOMotorClient(
            uri,
            tz_aware=True,
            serverSelectionTimeoutMS=MONGO_SERVER_SELECTION_TIMEOUT_MS,
        )
        try:
            await client.admin.command("ping")
        except mongo_errors.PyMongoError as exc:
            client.close()
            raise DatabaseError(f"Failed to connect to MongoDB: {exc}") from exc

        db = client.get_default_database(default=_DEFAULT_DB_NAME)
        logger.info("MongoDB connected: database=%s", db.name)
        return cls(client, db)

    async def ensure_indexes(self) -> None:
        with translate_errors("ensure_indexes"):
            await self._db.settings.create_index([("key", ASCENDING)], unique=True)
            await self._db.auth_tokens.create_index([("token", ASCENDING)], unique=True)
            await self._db.auth_tokens.create_index([("expiresAt", ASCENDING)])
            await self._db.bookings.create_index([("phone", ASCENDING)])
            await self._db.bookings.create_index([("status", ASCENDING)])
            await self._db.bookings.create_index([("createdAt", DESCENDING)])
            await self._db.notifications.create_index([("createdAt", DESCENDING)])

    def collection(self, name: str) -> AsyncIOMotorCollection:
        return self._db[name]

    async def ping(self) -> bool:
        try:
            await self._client.admin.command("ping")
        except mongo_errors.PyMongoError:
            return False
        return True

    async def close(self) -> None:
        self._client.close()
        logger.info("MongoDB connection closed")

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from teabooking.core.document_store import translate_errors
from teabooking.models.auth import SessionToken
from teabooking.repositories.base import (
    BaseRepository,
    MongoRepository,
    from_iso,
    to_iso,
)


class TokenRepository(ABC):
    """Persistence for session tokens, keyed by the token string."""

    @abstractmethod
    async def add(self, session: SessionToken) -> None:
        """Insert *session*; raises ``DuplicateKeyError`` if the token exists."""

    @abstractmethod
    async def get(self, token: str) -> Optional[SessionToken]:
        ...

    @abstractmethod
    async def delete(self, token: str) -> bool:
        """Delete *token*; returns whether a record was removed."""

    @abstractmethod
    async def delete_all(self) -> int:
        ...

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        ...


class SqliteTokenRepository(BaseRepository, TokenRepository):
    """CRUD helpers for the ``auth_tokens`` table."""

    _table_name = "auth_tokens"

    async def add(self, session: SessionToken) -> None:
        await self.execute_write(
            "INSERT INTO auth_tokens (token, createdAt, expiresAt) VALUES (?, ?, ?)",
            (session.token, to_iso(session.created_at), to_iso(session.expires_at)),
        )

    async def get(self, token: str) -> Optional[SessionToken]:
        row = await self.fetch_one(
            "SELECT token, createdAt, expiresAt FROM auth_tokens WHERE token = ?",
            (token,),
        )
        if row is None:
            return None
        return SessionToken(
            token=row["token"],
            created_at=from_iso(row["createdAt"]),
            expires_at=from_iso(row["expiresAt"]),
        )

    async def delete(self, token: str) -> bool:
        removed = await self.execute_write(
            "DELETE FROM auth_tokens WHERE token = ?", (token,)
        )
        return removed > 0

    async def delete_all(self) -> int:
        return await self.execute_write("DELETE FROM auth_tokens")

    async def delete_expired(self, now: datetime) -> int:
        return await self.execute_write(
            "DELETE FROM auth_tokens WHERE expiresAt < ?", (to_iso(now),)
        )


class MongoTokenRepository(MongoRepository, TokenRepository):
    """CRUD helpers for the ``auth_tokens`` collection."""

    _collection_name = "auth_tokens"

    async def add(self, session: SessionToken) -> None:
        with translate_errors("auth_tokens.add"):
            await self._collection.insert_one(
                {
                    "token": session.token,
                    "createdAt": session.created_at,
                    "expiresAt": session.expires_at,
                }
            )

    async def get(self, token: str) -> Optional[SessionToken]:
        with translate_errors("auth_tokens.get"):
            doc = await self._collection.find_one({"token": token})
        if doc is None:
            return None
        return SessionToken(
            token=doc["token"],
            created_at=from_iso(doc["createdAt"]),
            expires_at=from_iso(doc["expiresAt"]),
        )

    async def delete(self, token: str) -> bool:
        with translate_errors("auth_tokens.delete"):
            result = await self._collection.delete_one({"token": token})
        return result.deleted_count > 0

    async def delete_all(self) -> int:
        with translate_errors("auth_tokens.delete_all"):
            result = await self._collection.delete_many({})
        return result.deleted_count

    async def delete_expired(self, now: datetime) -> int:
        with translate_errors("auth_tokens.delete_expired"):
            result = await self._collection.delete_many({"expiresAt": {"$lt": now}})
        return result.deleted_count

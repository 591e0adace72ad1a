from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import Optional

from teabooking.core.constants import (
    ADMIN_PASSWORD_KEY,
    PASSWORD_HASH_ALGORITHM,
    PASSWORD_HASH_ITERATIONS,
    PASSWORD_HASH_KEY_LENGTH,
    PASSWORD_SALT_BYTES,
)
from teabooking.repositories.settings import SettingsRepository


def _derive(password: str, salt: str) -> str:
    # The hex salt string itself (not its decoded bytes) is the PBKDF2 salt,
    # which keeps hashes interchangeable with existing stored credentials.
    return hashlib.pbkdf2_hmac(
        PASSWORD_HASH_ALGORITHM,
        password.encode("utf-8"),
        salt.encode("utf-8"),
        PASSWORD_HASH_ITERATIONS,
        dklen=PASSWORD_HASH_KEY_LENGTH,
    ).hex()


def hash_password(password: str) -> str:
    """Return ``salt_hex:hash_hex`` using PBKDF2-HMAC-SHA512 and a fresh salt."""
    salt = secrets.token_hex(PASSWORD_SALT_BYTES)
    return f"{salt}:{_derive(password, salt)}"


def verify_password(password: str, stored_hash: str) -> bool:
    """Verify *password* against a ``salt_hex:hash_hex`` string."""
    salt, sep, expected = stored_hash.partition(":")
    if not sep or not salt or not expected:
        return False
    return hmac.compare_digest(_derive(password, salt), expected)


class CredentialStore:
    """Holds the single admin credential in the settings store."""

    def __init__(self, settings_repo: SettingsRepository) -> None:
        self._settings = settings_repo

    async def get_admin_credential(self) -> Optional[str]:
        return await self._settings.get(ADMIN_PASSWORD_KEY)

    async def set_admin_credential(self, stored_hash: str) -> None:
        await self._settings.set(ADMIN_PASSWORD_KEY, stored_hash)

    async def create_admin_credential_if_absent(self, stored_hash: str) -> bool:
        return await self._settings.set_if_absent(ADMIN_PASSWORD_KEY, stored_hash)

    async def clear_admin_credential(self) -> None:
        await self._settings.delete(ADMIN_PASSWORD_KEY)

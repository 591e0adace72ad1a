from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from teabooking.core.constants import TOKEN_BYTES, TOKEN_LIFETIME_DAYS
from teabooking.core.exceptions import DatabaseError, DuplicateKeyError, TokenIssueError
from teabooking.core.logging import get_logger
from teabooking.models.auth import (
    AuthOutcome,
    AuthResult,
    PasswordStatus,
    SessionToken,
    TokenStatus,
)
from teabooking.repositories.base import truncate_ms
from teabooking.repositories.tokens import TokenRepository
from teabooking.services.credentials import (
    CredentialStore,
    hash_password,
    verify_password,
)

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionService:
    """Issues, verifies and revokes admin session tokens.

    Tokens expire lazily: an expired token is deleted the first time it is
    presented, there is no background sweep.  The public methods collapse
    every failure to ``False``/``None``; ``check_token``,
    ``check_admin_password`` and the ``attempt_*`` methods expose the
    underlying cause.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        tokens: TokenRepository,
        clock: Clock = utc_now,
    ) -> None:
        self._credentials = credentials
        self._tokens = tokens
        self._clock = clock

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    async def create_token(self) -> str:
        """Issue and persist a new token valid for ``TOKEN_LIFETIME_DAYS``.

        Raises ``TokenIssueError`` when the token cannot be stored.
        """
        now = truncate_ms(self._clock())
        session = SessionToken(
            token=secrets.token_hex(TOKEN_BYTES),
            created_at=now,
            expires_at=now + timedelta(days=TOKEN_LIFETIME_DAYS),
        )
        try:
            await self._tokens.add(session)
        except DuplicateKeyError as exc:
            raise TokenIssueError("Token collision while issuing session") from exc
        except DatabaseError as exc:
            raise TokenIssueError(f"Failed to store session token: {exc}") from exc
        logger.info("Session created: %s...", session.token[:8])
        return session.token

    async def check_token(self, token: str) -> TokenStatus:
        if not token:
            return TokenStatus.NOT_FOUND
        try:
            session = await self._tokens.get(token)
            if session is None:
                return TokenStatus.NOT_FOUND
            if self._clock() > session.expires_at:
                await self._tokens.delete(token)
                logger.info("Session expired: %s...", token[:8])
                return TokenStatus.EXPIRED
        except DatabaseError as exc:
            logger.error("Token lookup failed: %s", exc)
            return TokenStatus.STORE_UNAVAILABLE
        return TokenStatus.VALID

    async def verify_token(self, token: str) -> bool:
        return await self.check_token(token) is TokenStatus.VALID

    async def delete_token(self, token: str) -> bool:
        """Remove *token*.  Idempotent; ``False`` only if the store fails."""
        try:
            removed = await self._tokens.delete(token)
        except DatabaseError as exc:
            logger.error("Token delete failed: %s", exc)
            return False
        if removed:
            logger.info("Session invalidated: %s...", token[:8])
        return True

    async def purge_expired_tokens(self) -> int:
        try:
            removed = await self._tokens.delete_expired(self._clock())
        except DatabaseError as exc:
            logger.error("Expired token purge failed: %s", exc)
            return 0
        if removed:
            logger.info("Purged %d expired session tokens", removed)
        return removed

    # ------------------------------------------------------------------
    # Admin credential
    # ------------------------------------------------------------------

    async def check_admin_password(self, password: str) -> PasswordStatus:
        try:
            stored = await self._credentials.get_admin_credential()
        except DatabaseError as exc:
            logger.error("Credential lookup failed: %s", exc)
            return PasswordStatus.STORE_UNAVAILABLE
        if stored is None:
            return PasswordStatus.NOT_FOUND
        if verify_password(password, stored):
            return PasswordStatus.VALID
        return PasswordStatus.INVALID

    async def verify_admin_password(self, password: str) -> bool:
        return await self.check_admin_password(password) is PasswordStatus.VALID

    async def update_admin_password(self, new_password: str) -> bool:
        """Replace the admin credential, then revoke every session.

        If revocation fails the previous credential is put back, so a
        reported failure leaves the old password and its sessions in place.
        """
        try:
            previous = await self._credentials.get_admin_credential()
            await self._credentials.set_admin_credential(hash_password(new_password))
        except DatabaseError as exc:
            logger.error("Password update failed: %s", exc)
            return False
        try:
            revoked = await self._tokens.delete_all()
        except DatabaseError as exc:
            logger.error("Session revocation failed, restoring previous password: %s", exc)
            await self._restore_admin_credential(previous)
            return False
        logger.info("Admin password updated, %d sessions revoked", revoked)
        return True

    async def _restore_admin_credential(self, previous: Optional[str]) -> None:
        try:
            if previous is None:
                await self._credentials.clear_admin_credential()
            else:
                await self._credentials.set_admin_credential(previous)
        except DatabaseError as exc:
            logger.critical("Could not restore the previous admin password: %s", exc)

    async def bootstrap(self, default_password: str) -> bool:
        """Create the admin credential from *default_password* if none exists.

        Returns ``True`` when a credential was created.  Store errors
        propagate so startup fails loudly.
        """
        created = await self._credentials.create_admin_credential_if_absent(
            hash_password(default_password)
        )
        if created:
            logger.warning("Admin credential initialised from the default password")
        return created

    # ------------------------------------------------------------------
    # Login flow
    # ------------------------------------------------------------------

    async def attempt_login(self, password: str) -> AuthResult:
        status = await self.check_admin_password(password)
        if status is PasswordStatus.STORE_UNAVAILABLE:
            return AuthResult(outcome=AuthOutcome.STORE_UNAVAILABLE)
        if status is not PasswordStatus.VALID:
            logger.warning("Failed login attempt")
            return AuthResult(outcome=AuthOutcome.REJECTED)
        try:
            token = await self.create_token()
        except TokenIssueError as exc:
            logger.error("Login failed: %s", exc)
            return AuthResult(outcome=AuthOutcome.STORE_UNAVAILABLE)
        return AuthResult(outcome=AuthOutcome.SUCCESS, token=token)

    async def login(self, password: str) -> Optional[str]:
        return (await self.attempt_login(password)).token

    async def logout(self, token: Optional[str]) -> bool:
        if not token:
            return True
        return await self.delete_token(token)

    async def attempt_change_password(
        self, token: str, current_password: str, new_password: str
    ) -> AuthResult:
        """Change the admin password and issue a fresh token.

        Requires a valid *token* and the correct *current_password*.  All
        existing sessions, including the caller's, are revoked.  Store
        failures at any step come back as ``STORE_UNAVAILABLE``, never as
        ``REJECTED``.
        """
        token_status = await self.check_token(token)
        if token_status is TokenStatus.STORE_UNAVAILABLE:
            return AuthResult(outcome=AuthOutcome.STORE_UNAVAILABLE)
        if token_status is not TokenStatus.VALID:
            return AuthResult(outcome=AuthOutcome.REJECTED)

        password_status = await self.check_admin_password(current_password)
        if password_status is PasswordStatus.STORE_UNAVAILABLE:
            return AuthResult(outcome=AuthOutcome.STORE_UNAVAILABLE)
        if password_status is not PasswordStatus.VALID:
            logger.warning("Password change rejected: wrong current password")
            return AuthResult(outcome=AuthOutcome.REJECTED)

        if not await self.update_admin_password(new_password):
            return AuthResult(outcome=AuthOutcome.STORE_UNAVAILABLE)
        try:
            fresh = await self.create_token()
        except TokenIssueError as exc:
            logger.error("Token issue after password change failed: %s", exc)
            return AuthResult(outcome=AuthOutcome.STORE_UNAVAILABLE)
        return AuthResult(outcome=AuthOutcome.SUCCESS, token=fresh)

    async def change_password(
        self, token: str, current_password: str, new_password: str
    ) -> Optional[str]:
        result = await self.attempt_change_password(token, current_password, new_password)
        return result.token

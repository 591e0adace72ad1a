from __future__ import annotations

import re
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from teabooking.core.logging import get_logger

logger = get_logger(__name__)

# (method, path pattern) pairs that require a staff session.
_PROTECTED_ROUTES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("PUT", re.compile(r"^/api/bookings/[^/]+/?$")),
    ("DELETE", re.compile(r"^/api/bookings/[^/]+/?$")),
    ("POST", re.compile(r"^/api/notifications/?$")),
    ("PUT", re.compile(r"^/api/notifications/[^/]+/?$")),
    ("DELETE", re.compile(r"^/api/notifications/[^/]+/?$")),
    ("POST", re.compile(r"^/api/shop-status/?$")),
)


class AuthMiddleware(BaseHTTPMiddleware):
    """Requires a bearer token on the staff-only routes.

    Customer routes (booking creation, listings, shop status reads) and the
    auth endpoints themselves pass through untouched.  For protected routes
    the ``Authorization: Bearer <token>`` header is checked against the
    ``SessionService`` on ``request.app.state``; the token is stored on
    ``request.state.token`` for handlers that need it.

    The guard is skipped entirely when
    ``config.web_security.protect_admin_routes`` is off.
    """

    async def dispatch(self, request: Request, call_next: Callable[..., Response]) -> Response:
        if not self._is_protected(request.method, request.url.path):
            return await call_next(request)

        config = getattr(request.app.state, "config", None)
        if config is not None and not config.web_security.protect_admin_routes:
            return await call_next(request)

        session_service = getattr(request.app.state, "session_service", None)
        if session_service is None:
            return JSONResponse(
                status_code=503,
                content={"success": False, "message": "Service initializing"},
            )

        token = self._extract_token(request)
        if token is None:
            return self._unauthorized("Authentication required")

        if not await session_service.verify_token(token):
            logger.info(
                "Rejected staff request: %s %s token=%s...",
                request.method,
                request.url.path,
                token[:8],
            )
            return self._unauthorized("Invalid or expired token")

        request.state.token = token
        return await call_next(request)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _is_protected(method: str, path: str) -> bool:
        return any(m == method and p.match(path) for m, p in _PROTECTED_ROUTES)

    @staticmethod
    def _extract_token(request: Request) -> Optional[str]:
        auth_header = request.headers.get("authorization", "")
        if auth_header.lower().startswith("bearer "):
            token = auth_header[7:].strip()
            return token or None
        return None

    @staticmethod
    def _unauthorized(message: str) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"success": False, "message": message},
        )

"""IP-based sliding-window rate limiting middleware."""

from __future__ import annotations

import time
from collections import defaultdict
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from teabooking.core.constants import (
    DEFAULT_API_RATE_LIMIT,
    DEFAULT_LOGIN_RATE_LIMIT,
    RATE_LIMIT_WINDOW_SECONDS,
)
from teabooking.core.logging import get_logger
from teabooking.core.network import get_client_ip

logger = get_logger(__name__)

_LOGIN_PATH = "/api/auth/login"
_API_PREFIX = "/api/"

_LOGIN_MESSAGE = "Too many login attempts, please try again later."
_API_MESSAGE = "Too many requests, please slow down."


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Enforce per-IP request rate limits using a sliding window.

    Login attempts and general API calls are counted in separate windows,
    so a login request counts against both limits.  Limits are read from
    ``config.web_security`` at request time.
    """

    def __init__(self, app: object) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        # (bucket, ip) -> list of request timestamps
        self._windows: dict[tuple[str, str], list[float]] = defaultdict(list)

    async def dispatch(self, request: Request, call_next: Callable[..., Response]) -> Response:
        path = request.url.path
        if not path.startswith(_API_PREFIX):
            return await call_next(request)

        config = getattr(request.app.state, "config", None)
        trusted = config.web_security.trusted_proxies if config else ()
        client_ip = get_client_ip(request, trusted_proxies=trusted)
        api_limit = config.web_security.api_rate_limit if config else DEFAULT_API_RATE_LIMIT
        login_limit = (
            config.web_security.login_rate_limit if config else DEFAULT_LOGIN_RATE_LIMIT
        )

        now = time.monotonic()
        blocked = self._hit("api", client_ip, api_limit, now)
        if blocked is not None:
            return self._too_many(_API_MESSAGE, blocked, client_ip, path)

        if path.rstrip("/") == _LOGIN_PATH:
            blocked = self._hit("login", client_ip, login_limit, now)
            if blocked is not None:
                return self._too_many(_LOGIN_MESSAGE, blocked, client_ip, path)

        self._prune()
        return await call_next(request)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _hit(self, bucket: str, ip: str, limit: int, now: float) -> int | None:
        """Record a request; return the Retry-After seconds if over *limit*."""
        key = (bucket, ip)
        cutoff = now - RATE_LIMIT_WINDOW_SECONDS
        self._windows[key] = window = [t for t in self._windows[key] if t > cutoff]

        if len(window) >= limit:
            return int(RATE_LIMIT_WINDOW_SECONDS - (now - window[0])) + 1

        window.append(now)
        return None

    def _prune(self) -> None:
        # Cap dictionary size to prevent memory growth.
        if len(self._windows) > 10_000:
            oldest = sorted(
                self._windows, key=lambda k: self._windows[k][-1] if self._windows[k] else 0
            )[:5000]
            for key in oldest:
                del self._windows[key]

    @staticmethod
    def _too_many(message: str, retry_after: int, ip: str, path: str) -> JSONResponse:
        logger.warning("Rate limit exceeded: ip=%s path=%s", ip, path)
        return JSONResponse(
            status_code=429,
            content={"success": False, "message": message},
            headers={"Retry-After": str(retry_after)},
        )

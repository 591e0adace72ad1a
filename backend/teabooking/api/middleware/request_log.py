from __future__ import annotations

import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from teabooking.core.logging import get_logger
from teabooking.core.network import get_client_ip

logger = get_logger("api.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with client, method, path, status and duration."""

    async def dispatch(self, request: Request, call_next: Callable[..., Response]) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        config = getattr(request.app.state, "config", None)
        trusted = config.web_security.trusted_proxies if config else ()
        logger.info(
            "%s %s %s -> %d (%.1fms)",
            get_client_ip(request, trusted_proxies=trusted),
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

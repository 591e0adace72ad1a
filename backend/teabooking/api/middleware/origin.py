"""Reject cross-origin requests whose ``Origin`` is not on the allow list."""

from __future__ import annotations

from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from teabooking.core.logging import get_logger

logger = get_logger(__name__)


class OriginCheckMiddleware(BaseHTTPMiddleware):
    """Answer 403 to browsers calling from an origin CORS would not allow.

    Requests without an ``Origin`` header (curl, mobile apps) and
    same-origin requests from the served pages always pass.
    """

    async def dispatch(self, request: Request, call_next: Callable[..., Response]) -> Response:
        origin = request.headers.get("origin")
        if not origin:
            return await call_next(request)

        config = getattr(request.app.state, "config", None)
        if config is None or config.cors_allow_all:
            return await call_next(request)

        own_origin = f"{request.url.scheme}://{request.url.netloc}"
        if origin == own_origin or origin in config.cors_origins:
            return await call_next(request)

        logger.warning(
            "Blocked origin %s: %s %s", origin, request.method, request.url.path
        )
        return JSONResponse(
            status_code=403,
            content={"success": False, "message": "CORS policy violation"},
        )

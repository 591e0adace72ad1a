from __future__ import annotations

from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from teabooking.core.constants import MAX_REQUEST_BODY_BYTES
from teabooking.core.logging import get_logger

logger = get_logger(__name__)


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject request bodies larger than ``web_security.max_body_bytes``."""

    async def dispatch(self, request: Request, call_next: Callable[..., Response]) -> Response:
        if request.method in ("GET", "HEAD", "OPTIONS"):
            return await call_next(request)

        config = getattr(request.app.state, "config", None)
        limit = config.web_security.max_body_bytes if config else MAX_REQUEST_BODY_BYTES

        declared = request.headers.get("content-length")
        if declared is not None:
            try:
                too_large = int(declared) > limit
            except ValueError:
                return JSONResponse(
                    status_code=400,
                    content={"success": False, "message": "Invalid Content-Length"},
                )
        else:
            # Chunked upload: the body is cached on the request for the handler.
            too_large = len(await request.body()) > limit

        if too_large:
            logger.warning("Request body too large: %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=413,
                content={"success": False, "message": "Request entity too large"},
            )
        return await call_next(request)

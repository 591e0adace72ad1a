from __future__ import annotations

from fastapi import FastAPI

from teabooking.api.middleware.auth import AuthMiddleware
from teabooking.api.middleware.body_limit import BodySizeLimitMiddleware
from teabooking.api.middleware.origin import OriginCheckMiddleware
from teabooking.api.middleware.rate_limit import RateLimitMiddleware
from teabooking.api.middleware.request_log import RequestLoggingMiddleware
from teabooking.api.middleware.security_headers import SecurityHeadersMiddleware


def register_middleware(app: FastAPI) -> None:
    """Register all middleware on *app* in the correct order.

    All middleware classes resolve their dependencies lazily from
    ``request.app.state`` at request time, so this function can be called
    during ``create_app`` before the lifespan context has run.

    Starlette processes middleware in **reverse** registration order (last
    added wraps outermost), so we register from innermost to outermost.
    CORS is added afterwards in ``create_app``.  The resulting onion is:

        CORS (outermost)
          -> SecurityHeaders
            -> RequestLogging
              -> OriginCheck
                -> BodySizeLimit
                  -> RateLimit
                    -> Auth (innermost)
    """
    app.add_middleware(AuthMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(BodySizeLimitMiddleware)
    app.add_middleware(OriginCheckMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

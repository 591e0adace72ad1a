"""Exception handlers producing the ``{"success": false, ...}`` error shape."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from teabooking.core.exceptions import TeaBookingError
from teabooking.core.logging import get_logger

logger = get_logger(__name__)


def _format_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    errors: list[dict[str, Any]] = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        message = str(err.get("msg", "Invalid value"))
        # pydantic prefixes messages from custom validators.
        message = message.removeprefix("Value error, ")
        errors.append(
            {
                "type": "field",
                "path": ".".join(loc),
                "location": err.get("loc", ("body",))[0],
                "msg": message,
            }
        )
    return errors


def store_error(message: str, exc: Exception) -> JSONResponse:
    """500 response with a fixed *message*; the driver error is only logged."""
    logger.error("%s: %s", message, exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": message},
    )


def _internal_message(request: Request, exc: Exception) -> str:
    config = getattr(request.app.state, "config", None)
    if config is not None and config.is_production:
        return "Internal server error"
    return str(exc) or exc.__class__.__name__


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": "Validation error",
                "errors": _format_errors(exc),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(TeaBookingError)
    async def teabooking_exception_handler(
        request: Request, exc: TeaBookingError
    ) -> JSONResponse:
        logger.error(
            "Unhandled %s on %s %s: %s",
            exc.__class__.__name__,
            request.method,
            request.url.path,
            exc,
        )
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": _internal_message(request, exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": _internal_message(request, exc)},
        )

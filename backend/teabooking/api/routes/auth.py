from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from teabooking.api.dependencies import get_session_service
from teabooking.core.logging import get_logger
from teabooking.models.auth import (
    AuthOutcome,
    ChangePasswordRequest,
    LoginRequest,
    TokenRequest,
)
from teabooking.services.session import SessionService

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
async def login(
    body: LoginRequest,
    session_service: SessionService = Depends(get_session_service),
) -> JSONResponse:
    """Exchange the admin password for a bearer token."""
    result = await session_service.attempt_login(body.password)
    if result.outcome is AuthOutcome.STORE_UNAVAILABLE:
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Error during login"},
        )
    if result.outcome is AuthOutcome.REJECTED:
        return JSONResponse(
            status_code=401,
            content={"success": False, "message": "Invalid password"},
        )
    return JSONResponse(content={"success": True, "token": result.token})


@router.post("/verify")
async def verify(
    body: TokenRequest,
    session_service: SessionService = Depends(get_session_service),
) -> JSONResponse:
    if not body.token:
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Token is required"},
        )
    valid = await session_service.verify_token(body.token)
    return JSONResponse(content={"success": valid})


@router.post("/logout")
async def logout(
    body: TokenRequest,
    session_service: SessionService = Depends(get_session_service),
) -> JSONResponse:
    """Revoke the given token.  Logging out without a token is a no-op."""
    if not await session_service.logout(body.token):
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Error during logout"},
        )
    return JSONResponse(content={"success": True})


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    session_service: SessionService = Depends(get_session_service),
) -> JSONResponse:
    """Replace the admin password.

    Every existing session is revoked; the response carries a fresh token.
    """
    result = await session_service.attempt_change_password(
        body.token, body.current_password, body.new_password
    )
    if result.outcome is AuthOutcome.STORE_UNAVAILABLE:
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Error changing password"},
        )
    if result.outcome is AuthOutcome.REJECTED:
        return JSONResponse(
            status_code=401,
            content={
                "success": False,
                "message": "Invalid or expired token, or current password is incorrect",
            },
        )
    return JSONResponse(content={"success": True, "token": result.token})

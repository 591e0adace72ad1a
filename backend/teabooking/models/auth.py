from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from teabooking.core.constants import PASSWORD_MIN_LENGTH
from teabooking.models.base import BaseModel


class TokenStatus(str, Enum):
    VALID = "valid"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    STORE_UNAVAILABLE = "store_unavailable"


class PasswordStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    STORE_UNAVAILABLE = "store_unavailable"


class AuthOutcome(str, Enum):
    SUCCESS = "success"
    REJECTED = "rejected"
    STORE_UNAVAILABLE = "store_unavailable"


class SessionToken(BaseModel):
    token: str
    created_at: datetime
    expires_at: datetime


class AuthResult(BaseModel):
    """Outcome of a login or password change; ``token`` is set on success."""

    outcome: AuthOutcome
    token: Optional[str] = None


class LoginRequest(BaseModel):
    password: str = Field(min_length=1)


class TokenRequest(BaseModel):
    token: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH)

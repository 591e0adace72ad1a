from __future__ import annotations

from teabooking.models.auth import (
    AuthOutcome,
    AuthResult,
    ChangePasswordRequest,
    LoginRequest,
    PasswordStatus,
    SessionToken,
    TokenRequest,
    TokenStatus,
)
from teabooking.models.base import BaseModel as AppBaseModel
from teabooking.models.booking import Booking, BookingCreate, BookingUpdate
from teabooking.models.enums import BookingStatus, StorageBackend
from teabooking.models.health import HealthCheckResult
from teabooking.models.notification import (
    Notification,
    NotificationCreate,
    NotificationUpdate,
)
from teabooking.models.shop import ShopStatus

__all__ = [
    "AppBaseModel",
    "AuthOutcome",
    "AuthResult",
    "Booking",
    "BookingCreate",
    "BookingStatus",
    "BookingUpdate",
    "ChangePasswordRequest",
    "HealthCheckResult",
    "LoginRequest",
    "Notification",
    "NotificationCreate",
    "NotificationUpdate",
    "PasswordStatus",
    "SessionToken",
    "ShopStatus",
    "StorageBackend",
    "TokenRequest",
    "TokenStatus",
]

from __future__ import annotations

from fastapi import Request

from teabooking.core.config import Config
from teabooking.repositories.bookings import BookingRepository
from teabooking.repositories.notification import NotificationRepository
from teabooking.services.health import HealthMonitor
from teabooking.services.session import SessionService
from teabooking.services.shop import ShopStatusService


def get_config(request: Request) -> Config:
    """Provide the application ``Config`` instance."""
    return request.app.state.config


# ------------------------------------------------------------------
# Repository dependencies
# ------------------------------------------------------------------


def get_booking_repo(request: Request) -> BookingRepository:
    return request.app.state.storage.bookings


def get_notification_repo(request: Request) -> NotificationRepository:
    return request.app.state.storage.notifications


# ------------------------------------------------------------------
# Service dependencies
# ------------------------------------------------------------------


def get_session_service(request: Request) -> SessionService:
    """Provide the ``SessionService`` instance."""
    return request.app.state.session_service


def get_shop_service(request: Request) -> ShopStatusService:
    """Provide the ``ShopStatusService`` instance."""
    return request.app.state.shop_service


def get_health_monitor(request: Request) -> HealthMonitor:
    """Provide the ``HealthMonitor`` instance."""
    return request.app.state.health_monitor

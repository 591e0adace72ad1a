from __future__ import annotations

from teabooking.repositories.base import BaseRepository, MongoRepository
from teabooking.repositories.bookings import (
    BookingRepository,
    MongoBookingRepository,
    SqliteBookingRepository,
)
from teabooking.repositories.notification import (
    MongoNotificationRepository,
    NotificationRepository,
    SqliteNotificationRepository,
)
from teabooking.repositories.settings import (
    MongoSettingsRepository,
    SettingsRepository,
    SqliteSettingsRepository,
)
from teabooking.repositories.tokens import (
    MongoTokenRepository,
    SqliteTokenRepository,
    TokenRepository,
)

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "MongoBookingRepository",
    "MongoNotificationRepository",
    "MongoRepository",
    "MongoSettingsRepository",
    "MongoTokenRepository",
    "NotificationRepository",
    "SettingsRepository",
    "SqliteBookingRepository",
    "SqliteNotificationRepository",
    "SqliteSettingsRepository",
    "SqliteTokenRepository",
    "TokenRepository",
]

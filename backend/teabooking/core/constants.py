from __future__ import annotations

from enum import Enum


class StorageBackend(str, Enum):
    SQLITE = "sqlite"
    MONGO = "mongo"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    ON_THE_WAY = "on_the_way"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Storage
DEFAULT_DB_NAME: str = "teabooking.db"
DEFAULT_MONGODB_URI: str = "mongodb://localhost:27017/teabooking"
DEFAULT_BUSY_TIMEOUT_MS: int = 5000
MONGO_SERVER_SELECTION_TIMEOUT_MS: int = 5000

# Settings keys
ADMIN_PASSWORD_KEY: str = "adminPassword"
SHOP_STATUS_KEY: str = "shopStatus"

# Logging
LOG_MAX_SIZE_BYTES: int = 10 * 1024 * 1024  # 10 MB
LOG_RETENTION_DAYS: int = 14
ACCESS_LOG_FILE: str = "access.log"

# ── Security: Authentication ──────────────────────────────────────────
DEFAULT_ADMIN_PASSWORD: str = "teatime"
PASSWORD_HASH_ALGORITHM: str = "sha512"
PASSWORD_HASH_ITERATIONS: int = 10_000
PASSWORD_HASH_KEY_LENGTH: int = 64
PASSWORD_SALT_BYTES: int = 16
PASSWORD_MIN_LENGTH: int = 8
TOKEN_BYTES: int = 32
TOKEN_LIFETIME_DAYS: int = 7

# ── Security: CORS ────────────────────────────────────────────────────
DEFAULT_CORS_ORIGINS: list[str] = ["http://localhost:3000"]

# ── Security: Rate Limiting ───────────────────────────────────────────
DEFAULT_API_RATE_LIMIT: int = 100         # requests per minute
DEFAULT_LOGIN_RATE_LIMIT: int = 5         # requests per minute
RATE_LIMIT_WINDOW_SECONDS: int = 60

# ── Security: Input Validation ───────────────────────────────────────
MAX_REQUEST_BODY_BYTES: int = 10 * 1024   # 10 KB
NAME_MIN_LENGTH: int = 2
NAME_MAX_LENGTH: int = 100
PHONE_MIN_LENGTH: int = 10
PHONE_MAX_LENGTH: int = 20
PHONE_PATTERN: str = r"^[0-9+\-\s()]+$"
LOCATION_MAX_LENGTH: int = 200
NOTES_MAX_LENGTH: int = 500
MESSAGE_MAX_LENGTH: int = 500

# ── Notifications ────────────────────────────────────────────────────
NOTIFICATION_RETENTION_COUNT: int = 50
NOTIFICATION_LIST_LIMIT: int = 20

# ── Booking cleanup ──────────────────────────────────────────────────
DEFAULT_CLEANUP_TIME: str = "00:00"
DEFAULT_CLEANUP_TIMEZONE: str = "Asia/Kolkata"

# ── Server ───────────────────────────────────────────────────────────
DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 3000
DEFAULT_PUBLIC_DIR: str = "public"

from __future__ import annotations


class TeaBookingError(Exception):
    """Base exception for the teabooking project."""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(self.message)


class ConfigError(TeaBookingError):
    """Raised when configuration loading or validation fails."""


class DatabaseError(TeaBookingError):
    """Raised when the underlying store is unavailable or an operation fails."""


class DuplicateKeyError(DatabaseError):
    """Raised when a write violates a primary-key or unique constraint."""


class TokenIssueError(TeaBookingError):
    """Raised when a session token cannot be created."""

from __future__ import annotations

from teabooking.core.constants import BookingStatus, StorageBackend

__all__ = [
    "BookingStatus",
    "StorageBackend",
]

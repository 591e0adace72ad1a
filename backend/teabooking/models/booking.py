from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from teabooking.core.constants import BookingStatus
from teabooking.models.base import BaseModel
from teabooking.models.validators import (
    Location,
    Name,
    OptionalLocation,
    OptionalNotes,
    Phone,
)


class BookingCreate(BaseModel):
    name: Name
    phone: Phone
    location: Location
    custom_location: OptionalLocation = None
    notes: OptionalNotes = None


class BookingUpdate(BaseModel):
    status: Optional[BookingStatus] = None
    eta: Optional[str] = Field(default=None, max_length=100)
    # When given, the update only applies if the booking's phone matches.
    phone: Optional[str] = None

    def changes(self) -> dict[str, str]:
        """Return the stored fields this update touches."""
        changes: dict[str, str] = {}
        if self.status is not None:
            changes["status"] = self.status.value
        if self.eta is not None:
            changes["eta"] = self.eta
        return changes


class Booking(BaseModel):
    id: str
    name: str
    phone: str
    location: str
    custom_location: Optional[str] = None
    notes: Optional[str] = None
    status: str = BookingStatus.PENDING.value
    eta: str = ""
    created_at: datetime

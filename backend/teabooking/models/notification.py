from __future__ import annotations

from datetime import datetime
from typing import Optional

from teabooking.models.base import BaseModel
from teabooking.models.validators import Message, OptionalLocation


class NotificationCreate(BaseModel):
    message: Message
    location: OptionalLocation = None


class NotificationUpdate(BaseModel):
    message: Optional[Message] = None
    location: OptionalLocation = None

    def changes(self) -> dict[str, Optional[str]]:
        changes: dict[str, Optional[str]] = {}
        if self.message is not None:
            changes["message"] = self.message
        if "location" in self.model_fields_set:
            changes["location"] = self.location
        return changes


class Notification(BaseModel):
    id: str
    message: str
    location: Optional[str] = None
    created_at: datetime

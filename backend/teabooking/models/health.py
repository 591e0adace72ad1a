from __future__ import annotations

from datetime import datetime

from teabooking.models.base import BaseModel


class HealthCheckResult(BaseModel):
    status: str
    timestamp: datetime
    uptime: float
    database: str
    environment: str

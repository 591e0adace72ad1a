from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from teabooking.core.logging import get_logger
from teabooking.models.health import HealthCheckResult

if TYPE_CHECKING:
    from teabooking.core.config import Config
    from teabooking.core.storage import Storage

logger = get_logger(__name__)


class HealthMonitor:
    """Reports process uptime and whether the store answers a ping."""

    def __init__(self, config: Config, storage: Storage) -> None:
        self._config = config
        self._storage = storage
        self._start_time: float = time.monotonic()

    async def check_all(self) -> HealthCheckResult:
        db_ok = await self._check_database()
        result = HealthCheckResult(
            status="ok",
            timestamp=datetime.now(timezone.utc),
            uptime=self.get_uptime_seconds(),
            database="connected" if db_ok else "disconnected",
            environment=self._config.server.environment,
        )
        return result

    def get_uptime_seconds(self) -> float:
        return round(time.monotonic() - self._start_time, 3)

    async def _check_database(self) -> bool:
        try:
            return await self._storage.ping()
        except Exception as exc:
            logger.debug("Database health check failed: %s", exc)
            return False

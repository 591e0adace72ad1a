from __future__ import annotations

import json

from teabooking.core.constants import SHOP_STATUS_KEY
from teabooking.core.logging import get_logger
from teabooking.models.shop import ShopStatus
from teabooking.repositories.settings import SettingsRepository

logger = get_logger(__name__)


class ShopStatusService:
    """Reads and writes the open/closed flag kept in the settings store."""

    def __init__(self, settings_repo: SettingsRepository) -> None:
        self._settings = settings_repo

    async def get_status(self) -> ShopStatus:
        raw = await self._settings.get(SHOP_STATUS_KEY)
        if raw is None:
            return ShopStatus()
        try:
            return ShopStatus.model_validate(json.loads(raw))
        except ValueError:
            logger.warning("Stored shop status is not valid JSON, using default")
            return ShopStatus()

    async def set_status(self, is_open: bool) -> ShopStatus:
        status = ShopStatus(is_open=is_open)
        await self._settings.set(SHOP_STATUS_KEY, json.dumps(status.to_json()))
        logger.info("Shop status changed: is_open=%s", is_open)
        return status

from __future__ import annotations

from teabooking.models.base import BaseModel


class ShopStatus(BaseModel):
    is_open: bool = True

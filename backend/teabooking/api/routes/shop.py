from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from teabooking.api.dependencies import get_shop_service
from teabooking.api.errors import store_error
from teabooking.core.exceptions import DatabaseError
from teabooking.models.base import BaseModel
from teabooking.services.shop import ShopStatusService

router = APIRouter(prefix="/api/shop-status", tags=["shop"])


class ShopStatusUpdate(BaseModel):
    is_open: bool


@router.get("")
async def get_shop_status(
    shop_service: ShopStatusService = Depends(get_shop_service),
) -> JSONResponse:
    try:
        status = await shop_service.get_status()
    except DatabaseError as exc:
        return store_error("Error fetching shop status", exc)
    return JSONResponse(content=status.to_json())


@router.post("")
async def update_shop_status(
    body: ShopStatusUpdate,
    shop_service: ShopStatusService = Depends(get_shop_service),
) -> JSONResponse:
    try:
        status = await shop_service.set_status(body.is_open)
    except DatabaseError as exc:
        return store_error("Error updating shop status", exc)
    return JSONResponse(content={"success": True, "status": status.to_json()})

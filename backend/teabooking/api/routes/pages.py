"""Static HTML pages served from ``server.public_dir``."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, JSONResponse, Response

from teabooking.api.dependencies import get_config
from teabooking.core.config import Config

router = APIRouter(tags=["pages"])


def _page(config: Config, filename: str) -> Response:
    path = Path(config.server.public_dir) / filename
    if not path.is_file():
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": "Page not found"},
        )
    return FileResponse(path, media_type="text/html")


@router.get("/", include_in_schema=False)
async def customer_page(config: Config = Depends(get_config)) -> Response:
    return _page(config, "index.html")


@router.get("/dashboard", include_in_schema=False)
async def dashboard_page(config: Config = Depends(get_config)) -> Response:
    return _page(config, "dashboard.html")


@router.get("/today", include_in_schema=False)
async def today_page(config: Config = Depends(get_config)) -> Response:
    return _page(config, "today.html")

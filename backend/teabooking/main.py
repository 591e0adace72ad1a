from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from teabooking.api.dependencies import get_health_monitor
from teabooking.api.errors import register_exception_handlers
from teabooking.api.middleware import register_middleware
from teabooking.api.routes.auth import router as auth_router
from teabooking.api.routes.bookings import router as bookings_router
from teabooking.api.routes.notifications import router as notifications_router
from teabooking.api.routes.pages import router as pages_router
from teabooking.api.routes.shop import router as shop_router
from teabooking.core.config import Config
from teabooking.core.logging import get_logger, setup_logging
from teabooking.core.storage import open_storage
from teabooking.services.credentials import CredentialStore
from teabooking.services.health import HealthMonitor
from teabooking.services.scheduler import CleanupScheduler
from teabooking.services.session import SessionService
from teabooking.services.shop import ShopStatusService

logger = get_logger(__name__)


def _build_lifespan(config: Config):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Startup and shutdown lifecycle for the FastAPI application."""

        # -- Startup ---------------------------------------------------------
        setup_logging(log_dir=config.server.log_dir, access_log=config.is_production)
        logger.info(
            "Starting teabooking (environment=%s, backend=%s)",
            config.server.environment,
            config.database.backend.value,
        )

        storage = await open_storage(config)

        credentials = CredentialStore(storage.settings)
        session_service = SessionService(credentials, storage.tokens)
        await session_service.bootstrap(config.default_admin_password)
        await session_service.purge_expired_tokens()

        shop_service = ShopStatusService(storage.settings)
        health_monitor = HealthMonitor(config=config, storage=storage)
        cleanup_scheduler = CleanupScheduler(config.cleanup, storage.bookings)

        # -- Bind all to app.state -------------------------------------------
        app.state.config = config
        app.state.storage = storage
        app.state.session_service = session_service
        app.state.shop_service = shop_service
        app.state.health_monitor = health_monitor
        app.state.cleanup_scheduler = cleanup_scheduler

        if config.cleanup.enabled:
            await cleanup_scheduler.start()
        else:
            logger.info("Daily cleanup disabled")

        logger.info("Startup complete")
        yield

        # -- Shutdown --------------------------------------------------------
        logger.info("Shutting down teabooking")
        await cleanup_scheduler.stop()
        await storage.close()
        logger.info("Shutdown complete")

    return lifespan


def create_app(config: Optional[Config] = None) -> FastAPI:
    if config is None:
        config = Config.from_file()

    app = FastAPI(
        title="teabooking",
        version="0.1.0",
        lifespan=_build_lifespan(config),
    )
    # Available to middleware before the lifespan has run.
    app.state.config = config

    # Custom middleware (all resolve dependencies lazily from app.state)
    register_middleware(app)

    # CORS (outermost middleware -- added last so it wraps everything)
    if config.cors_allow_all:
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=".*",
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
        )

    register_exception_handlers(app)

    # -- Health endpoint (no auth required) ----------------------------------

    @app.get("/api/health")
    async def health_check(
        health_monitor: HealthMonitor = Depends(get_health_monitor),
    ) -> JSONResponse:
        result = await health_monitor.check_all()
        return JSONResponse(content=result.model_dump(mode="json"))

    # -- Routers -------------------------------------------------------------
    app.include_router(auth_router)
    app.include_router(bookings_router)
    app.include_router(notifications_router)
    app.include_router(shop_router)
    app.include_router(pages_router)

    # -- Static assets -------------------------------------------------------
    public_dir = Path(config.server.public_dir)
    if public_dir.is_dir():
        app.mount("/", StaticFiles(directory=public_dir), name="public")
    else:
        logger.warning("Public directory not found: %s", public_dir)

    return app

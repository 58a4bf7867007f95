"""
app.py — FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn. It builds the room
registry, attaches environment controllers, and registers routers.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from roomtwin.controllers.room_controller import router as room_router
from roomtwin.repository.room_registry import Clock, RoomRegistry
from roomtwin.services.environment_service import EnvironmentService
from roomtwin.utils.config import Settings, get_settings
from roomtwin.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    Build and wire the FastAPI application.

    The registry is created here and handed to everything that needs it via
    app.state. There is no module-level registry.
    """
    settings = settings or get_settings()

    registry = RoomRegistry(clock=clock)
    environment_service = EnvironmentService(registry)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Configure rooms before accepting requests."""
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.include_router(room_router)

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str | int]:
        return {"status": "ok", "room_count": app.state.registry.room_count}

    app.state.settings = settings
    app.state.registry = registry
    app.state.environment_service = environment_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Startup sequence. Order matters:
      1. Rooms must exist before controllers are attached.
      2. Controllers are attached once per room id; re-running is a no-op.
    """
    settings: Settings = app.state.settings
    registry: RoomRegistry = app.state.registry
    environment_service: EnvironmentService = app.state.environment_service

    logger.info(
        "Startup: configuring %s room(s) with capacity %s",
        settings.room_count,
        settings.default_capacity,
    )
    registry.configure(settings.room_count, settings.default_capacity)

    logger.info("Startup: attaching environment controllers")
    environment_service.attach_room_controllers(range(1, settings.room_count + 1))

    logger.info("Startup complete — system ready")


# Module-level app object for uvicorn
app = create_app()

"""Shared FastAPI dependency providers for the controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from roomtwin.repository.room_registry import RoomRegistry
from roomtwin.services.environment_service import EnvironmentService


def get_room_registry(request: Request) -> RoomRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Room registry is not initialized",
        )
    return registry


def get_environment_service(request: Request) -> EnvironmentService:
    service = getattr(request.app.state, "environment_service", None)
    if service is None:
        registry = getattr(request.app.state, "registry", None)
        if registry is not None:
            service = EnvironmentService(registry)
            request.app.state.environment_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Environment service is not initialized",
        )
    return service

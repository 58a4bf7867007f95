"""HTTP controller layer for room booking and occupancy reporting."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from roomtwin.controllers.dependencies import get_environment_service, get_room_registry
from roomtwin.domain.models import OperationOutcome, OutcomeStatus, RoomSnapshot
from roomtwin.repository.room_registry import (
    InvalidArgumentError,
    ObserverNotificationError,
    RoomNotFoundError,
    RoomRegistry,
)
from roomtwin.services.environment_service import EnvironmentService
from roomtwin.services.room_operations import book, cancel, report_occupancy
from roomtwin.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/rooms", tags=["rooms"])

_OUTCOME_HTTP_STATUS = {
    OutcomeStatus.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    OutcomeStatus.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    OutcomeStatus.CONFLICT: status.HTTP_409_CONFLICT,
}


class ConfigureRoomsRequest(BaseModel):
    room_count: int = Field(ge=0)
    default_capacity: int = Field(gt=0)


class ConfigureRoomsResponse(BaseModel):
    room_count: int = Field(ge=0)
    default_capacity: int = Field(gt=0)


class RoomStatusResponse(BaseModel):
    room_id: int = Field(gt=0)
    max_capacity: int = Field(gt=0)
    is_occupied: bool
    occupant_count: int = Field(ge=0)
    booking_start: datetime | None = None
    booking_end: datetime | None = None


class SetCapacityRequest(BaseModel):
    capacity: int = Field(gt=0)


class BookingRequest(BaseModel):
    start_time: datetime
    duration_minutes: int = Field(gt=0)


class OccupancyReportRequest(BaseModel):
    occupant_count: int = Field(ge=0)


class OperationOutcomeResponse(BaseModel):
    status: OutcomeStatus
    room_id: int
    message: str = ""
    booking_end: datetime | None = None
    is_occupied: bool | None = None


def _status_response(snapshot: RoomSnapshot) -> RoomStatusResponse:
    return RoomStatusResponse(
        room_id=snapshot.room_id,
        max_capacity=snapshot.max_capacity,
        is_occupied=snapshot.is_occupied,
        occupant_count=snapshot.occupant_count,
        booking_start=snapshot.booking_start,
        booking_end=snapshot.booking_end,
    )


def _outcome_response(outcome: OperationOutcome) -> OperationOutcomeResponse:
    http_status = _OUTCOME_HTTP_STATUS.get(outcome.status)
    if http_status is not None:
        raise HTTPException(status_code=http_status, detail=outcome.message)
    return OperationOutcomeResponse(
        status=outcome.status,
        room_id=outcome.room_id,
        message=outcome.message,
        booking_end=outcome.booking_end,
        is_occupied=outcome.is_occupied,
    )


@router.post(
    "/configure",
    response_model=ConfigureRoomsResponse,
    status_code=status.HTTP_200_OK,
)
def configure_rooms(
    payload: ConfigureRoomsRequest,
    registry: RoomRegistry = Depends(get_room_registry),
    environment_service: EnvironmentService = Depends(get_environment_service),
) -> ConfigureRoomsResponse:
    """Reset the room set; existing bookings and occupancy are discarded."""
    try:
        registry.configure(payload.room_count, payload.default_capacity)
    except InvalidArgumentError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    environment_service.attach_room_controllers(range(1, payload.room_count + 1))
    return ConfigureRoomsResponse(
        room_count=payload.room_count,
        default_capacity=payload.default_capacity,
    )


@router.get(
    "/{room_id}",
    response_model=RoomStatusResponse,
    status_code=status.HTTP_200_OK,
)
def get_room_status(
    room_id: int,
    registry: RoomRegistry = Depends(get_room_registry),
) -> RoomStatusResponse:
    try:
        return _status_response(registry.get_status(room_id))
    except RoomNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


@router.put(
    "/{room_id}/capacity",
    response_model=RoomStatusResponse,
    status_code=status.HTTP_200_OK,
)
def set_room_capacity(
    room_id: int,
    payload: SetCapacityRequest,
    registry: RoomRegistry = Depends(get_room_registry),
) -> RoomStatusResponse:
    try:
        registry.set_max_capacity(room_id, payload.capacity)
        return _status_response(registry.get_status(room_id))
    except RoomNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except InvalidArgumentError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.post(
    "/{room_id}/bookings",
    response_model=OperationOutcomeResponse,
    status_code=status.HTTP_200_OK,
)
def book_room(
    room_id: int,
    payload: BookingRequest,
    registry: RoomRegistry = Depends(get_room_registry),
) -> OperationOutcomeResponse:
    outcome = book(registry, room_id, payload.start_time, payload.duration_minutes)
    return _outcome_response(outcome)


@router.delete(
    "/{room_id}/booking",
    response_model=OperationOutcomeResponse,
    status_code=status.HTTP_200_OK,
)
def cancel_booking(
    room_id: int,
    registry: RoomRegistry = Depends(get_room_registry),
) -> OperationOutcomeResponse:
    """NOT_BOOKED is an expected outcome and is returned with HTTP 200."""
    return _outcome_response(cancel(registry, room_id))


@router.post(
    "/{room_id}/occupancy",
    response_model=OperationOutcomeResponse,
    status_code=status.HTTP_200_OK,
)
def report_room_occupancy(
    room_id: int,
    payload: OccupancyReportRequest,
    registry: RoomRegistry = Depends(get_room_registry),
) -> OperationOutcomeResponse:
    try:
        outcome = report_occupancy(registry, room_id, payload.occupant_count)
    except ObserverNotificationError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc
    return _outcome_response(outcome)


@router.get(
    "/{room_id}/environment",
    status_code=status.HTTP_200_OK,
)
def get_room_environment(
    room_id: int,
    registry: RoomRegistry = Depends(get_room_registry),
    environment_service: EnvironmentService = Depends(get_environment_service),
) -> dict[str, Any]:
    try:
        registry.get_status(room_id)
    except RoomNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return environment_service.device_states(room_id)

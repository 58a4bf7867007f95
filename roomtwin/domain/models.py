"""Domain models for room reservation and occupancy tracking."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Protocol

from roomtwin.domain.constraints import validate_booking_window


# A single person is not enough to count a room as occupied.
OCCUPANCY_THRESHOLD = 2


def is_occupied_headcount(occupant_count: int) -> bool:
    return occupant_count >= OCCUPANCY_THRESHOLD


class OccupancyObserver(Protocol):
    """Receives the occupancy flag of one room after every report."""

    room_id: int

    def on_occupancy_changed(self, room_id: int, is_occupied: bool) -> None:
        ...


@dataclass(frozen=True)
class RoomSnapshot:
    """Point-in-time copy of a room's state.

    Occupancy and booking are independent: a booked room may be empty and an
    occupied room may have no reservation.
    """

    room_id: int
    max_capacity: int
    is_occupied: bool
    occupant_count: int
    booking_start: Optional[datetime] = None
    booking_end: Optional[datetime] = None

    def __post_init__(self) -> None:
        validate_booking_window(self.booking_start, self.booking_end)

    @property
    def is_booked(self) -> bool:
        return self.booking_start is not None


class OutcomeStatus(str, Enum):
    OK = "OK"
    NOT_FOUND = "NOT_FOUND"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    CONFLICT = "CONFLICT"
    NOT_BOOKED = "NOT_BOOKED"


@dataclass(frozen=True)
class OperationOutcome:
    """Result of applying a booking, cancellation or occupancy operation."""

    status: OutcomeStatus
    room_id: int
    message: str = ""
    booking_end: Optional[datetime] = None
    is_occupied: Optional[bool] = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.OK

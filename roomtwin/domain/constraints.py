"""Domain-level validation rules for rooms and bookings."""

from __future__ import annotations

from datetime import datetime
from typing import Optional


def validate_capacity(capacity: int) -> None:
    if capacity <= 0:
        raise ValueError("capacity must be > 0")


def validate_room_count(room_count: int) -> None:
    if room_count < 0:
        raise ValueError("room_count must be >= 0")


def validate_occupant_count(occupant_count: int) -> None:
    if occupant_count < 0:
        raise ValueError("occupant_count must be >= 0")


def validate_booking_window(
    booking_start: Optional[datetime],
    booking_end: Optional[datetime],
) -> None:
    """Either both ends are unset, or both are set with end after start."""
    if (booking_start is None) != (booking_end is None):
        raise ValueError("booking_start and booking_end must be set together")
    if booking_start is not None and booking_end is not None and booking_end <= booking_start:
        raise ValueError("booking_end must be after booking_start")

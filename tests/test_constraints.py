"""Tests for room and booking validation rules.

Covers every branch in roomtwin.domain.constraints and the booking-window
invariant enforced by RoomSnapshot.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from roomtwin.domain.constraints import (
    validate_booking_window,
    validate_capacity,
    validate_occupant_count,
    validate_room_count,
)
from roomtwin.domain.models import RoomSnapshot, is_occupied_headcount


START = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def snapshot(**overrides) -> RoomSnapshot:
    """Return a valid unbooked snapshot, optionally overriding fields."""
    defaults = {
        "room_id": 1,
        "max_capacity": 10,
        "is_occupied": False,
        "occupant_count": 0,
    }
    defaults.update(overrides)
    return RoomSnapshot(**defaults)


# --- capacity ---

def test_capacity_zero_raises() -> None:
    with pytest.raises(ValueError):
        validate_capacity(0)


def test_capacity_negative_raises() -> None:
    with pytest.raises(ValueError):
        validate_capacity(-5)


def test_capacity_one_passes() -> None:
    validate_capacity(1)


# --- room_count ---

def test_room_count_negative_raises() -> None:
    with pytest.raises(ValueError):
        validate_room_count(-1)


def test_room_count_zero_passes() -> None:
    """An empty registry is a valid configuration."""
    validate_room_count(0)


# --- occupant_count ---

def test_occupant_count_negative_raises() -> None:
    with pytest.raises(ValueError):
        validate_occupant_count(-1)


def test_occupant_count_zero_passes() -> None:
    validate_occupant_count(0)


# --- booking window ---

def test_booking_window_unset_passes() -> None:
    validate_booking_window(None, None)


def test_booking_window_start_only_raises() -> None:
    with pytest.raises(ValueError):
        validate_booking_window(START, None)


def test_booking_window_end_only_raises() -> None:
    with pytest.raises(ValueError):
        validate_booking_window(None, START)


def test_booking_window_end_equal_to_start_raises() -> None:
    with pytest.raises(ValueError):
        validate_booking_window(START, START)


def test_snapshot_rejects_inverted_window() -> None:
    with pytest.raises(ValueError):
        snapshot(booking_start=START, booking_end=START - timedelta(minutes=1))


def test_snapshot_is_booked_follows_window() -> None:
    assert not snapshot().is_booked
    assert snapshot(booking_start=START, booking_end=START + timedelta(hours=1)).is_booked


# --- occupancy threshold ---

@pytest.mark.parametrize(
    ("occupant_count", "expected"),
    [(0, False), (1, False), (2, True), (3, True), (40, True)],
)
def test_occupancy_threshold(occupant_count: int, expected: bool) -> None:
    assert is_occupied_headcount(occupant_count) is expected

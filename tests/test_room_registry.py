from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from roomtwin.repository.room_registry import (
    BookingConflictError,
    InvalidArgumentError,
    NotBookedError,
    ObserverNotificationError,
    RoomNotFoundError,
    RoomRegistry,
)


NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class RecordingObserver:
    def __init__(self, room_id: int, calls: list, name: str = "observer") -> None:
        self.room_id = room_id
        self.name = name
        self._calls = calls

    def on_occupancy_changed(self, room_id: int, is_occupied: bool) -> None:
        self._calls.append((self.name, room_id, is_occupied))


class FailingObserver:
    def __init__(self, room_id: int) -> None:
        self.room_id = room_id

    def on_occupancy_changed(self, room_id: int, is_occupied: bool) -> None:
        raise RuntimeError("device offline")


def _build_registry(room_count: int = 3, default_capacity: int = 10) -> RoomRegistry:
    registry = RoomRegistry(clock=lambda: NOW)
    registry.configure(room_count, default_capacity)
    return registry


def test_configure_creates_fresh_rooms():
    registry = _build_registry(3, 10)

    assert registry.room_count == 3
    for room_id in (1, 2, 3):
        status = registry.get_status(room_id)
        assert status.room_id == room_id
        assert status.max_capacity == 10
        assert status.is_occupied is False
        assert status.occupant_count == 0
        assert status.booking_start is None
        assert status.booking_end is None


def test_configure_again_discards_bookings_and_occupancy():
    registry = _build_registry(3, 10)
    registry.reserve(1, NOW, timedelta(minutes=30))
    registry.record_occupancy(2, 5)

    registry.configure(2, 4)

    assert registry.room_count == 2
    assert registry.get_status(1).booking_start is None
    assert registry.get_status(2).is_occupied is False
    assert registry.get_status(2).max_capacity == 4
    with pytest.raises(RoomNotFoundError):
        registry.get_status(3)


def test_configure_rejects_invalid_capacity():
    registry = RoomRegistry()
    with pytest.raises(InvalidArgumentError):
        registry.configure(3, 0)


@pytest.mark.parametrize("room_id", [0, -1, 4, 999])
def test_unknown_room_ids_raise_not_found(room_id):
    registry = _build_registry(3, 10)

    with pytest.raises(RoomNotFoundError):
        registry.get_status(room_id)
    with pytest.raises(RoomNotFoundError):
        registry.set_max_capacity(room_id, 5)
    with pytest.raises(RoomNotFoundError):
        registry.reserve(room_id, NOW, timedelta(minutes=10))
    with pytest.raises(RoomNotFoundError):
        registry.release(room_id)
    with pytest.raises(RoomNotFoundError):
        registry.record_occupancy(room_id, 2)


def test_get_status_returns_detached_snapshot():
    registry = _build_registry()
    before = registry.get_status(1)

    registry.record_occupancy(1, 4)

    assert before.is_occupied is False
    assert registry.get_status(1).is_occupied is True


def test_set_max_capacity_updates_room():
    registry = _build_registry()
    registry.set_max_capacity(2, 25)
    assert registry.get_status(2).max_capacity == 25


@pytest.mark.parametrize("capacity", [0, -3])
def test_set_max_capacity_rejects_non_positive(capacity):
    registry = _build_registry()
    with pytest.raises(InvalidArgumentError):
        registry.set_max_capacity(1, capacity)
    assert registry.get_status(1).max_capacity == 10


def test_reserve_conflicts_while_booking_is_active():
    registry = _build_registry()
    end = registry.reserve(1, NOW, timedelta(minutes=60))

    with pytest.raises(BookingConflictError) as exc_info:
        registry.reserve(1, NOW + timedelta(minutes=5), timedelta(minutes=10))

    assert exc_info.value.booked_until == end
    assert "already booked until" in str(exc_info.value)


def test_reserve_allows_rebooking_after_expiry():
    current = {"now": NOW}
    registry = RoomRegistry(clock=lambda: current["now"])
    registry.configure(1, 10)
    registry.reserve(1, NOW, timedelta(minutes=30))

    current["now"] = NOW + timedelta(minutes=30)
    end = registry.reserve(1, current["now"], timedelta(minutes=15))

    assert end == NOW + timedelta(minutes=45)


def test_reserve_conflicts_when_room_occupied():
    registry = _build_registry()
    registry.record_occupancy(1, 2)

    with pytest.raises(BookingConflictError, match="room occupied"):
        registry.reserve(1, NOW, timedelta(minutes=30))


def test_reserve_treats_naive_start_as_utc():
    registry = _build_registry()
    end = registry.reserve(1, NOW.replace(tzinfo=None), timedelta(minutes=30))
    assert end == NOW + timedelta(minutes=30)


def test_release_without_booking_raises_not_booked():
    registry = _build_registry()
    with pytest.raises(NotBookedError):
        registry.release(1)


def test_observers_receive_notifications_in_registration_order():
    registry = _build_registry()
    calls: list = []
    registry.add_observer(RecordingObserver(1, calls, "first"))
    registry.add_observer(RecordingObserver(2, calls, "other-room"))
    registry.add_observer(RecordingObserver(1, calls, "second"))

    registry.notify(1, True)

    assert calls == [("first", 1, True), ("second", 1, True)]


def test_duplicate_observer_registration_is_kept():
    registry = _build_registry()
    calls: list = []
    observer = RecordingObserver(1, calls)
    registry.add_observer(observer)
    registry.add_observer(observer)

    registry.notify(1, False)

    assert len(calls) == 2


def test_remove_observer_removes_one_registration():
    registry = _build_registry()
    calls: list = []
    observer = RecordingObserver(1, calls)
    registry.add_observer(observer)
    registry.add_observer(observer)

    assert registry.remove_observer(observer) is True
    assert registry.observers_for(1) == (observer,)
    assert registry.remove_observer(observer) is True
    assert registry.remove_observer(observer) is False


def test_failing_observer_does_not_block_the_rest():
    registry = _build_registry()
    calls: list = []
    registry.add_observer(FailingObserver(1))
    registry.add_observer(RecordingObserver(1, calls))

    with pytest.raises(ObserverNotificationError) as exc_info:
        registry.notify(1, True)

    assert calls == [("observer", 1, True)]
    assert len(exc_info.value.failures) == 1
    assert "device offline" in str(exc_info.value)


def test_configure_keeps_registered_observers():
    registry = _build_registry()
    observer = RecordingObserver(1, [])
    registry.add_observer(observer)

    registry.configure(3, 10)

    assert registry.observers_for(1) == (observer,)


def test_reserve_with_out_of_range_end_leaves_room_unbooked():
    registry = _build_registry()
    late_start = datetime(9999, 12, 31, 23, 0, tzinfo=timezone.utc)

    with pytest.raises(InvalidArgumentError, match="out of range"):
        registry.reserve(1, late_start, timedelta(minutes=120))

    status = registry.get_status(1)
    assert status.booking_start is None
    assert status.booking_end is None
    assert registry.reserve(1, NOW, timedelta(minutes=30)) == NOW + timedelta(minutes=30)

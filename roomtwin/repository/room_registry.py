"""In-memory room registry shared by every booking and occupancy operation.

The registry is the only owner of room state. Callers read immutable
``RoomSnapshot`` copies and mutate rooms exclusively through the check-and-set
primitives below, each of which runs under the lock of the room it touches.
``configure`` replaces the whole room set and therefore waits for every
in-flight operation before it runs.
"""

from __future__ import annotations

from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from threading import Condition, Lock, RLock
from typing import Callable, Iterator, Optional

from roomtwin.domain.constraints import (
    validate_capacity,
    validate_occupant_count,
    validate_room_count,
)
from roomtwin.domain.models import OccupancyObserver, RoomSnapshot, is_occupied_headcount
from roomtwin.utils.logger import get_logger


logger = get_logger(__name__)

Clock = Callable[[], datetime]


class RoomRegistryError(Exception):
    """Base exception for registry failures."""


class RoomNotFoundError(RoomRegistryError):
    """Raised when a room id is outside the configured range."""

    def __init__(self, room_id: int) -> None:
        super().__init__(f"room_id={room_id} does not exist")
        self.room_id = room_id


class InvalidArgumentError(RoomRegistryError):
    """Raised for non-positive capacity or duration and negative counts."""


class BookingConflictError(RoomRegistryError):
    """Raised when a room is occupied or holds an unexpired booking."""

    def __init__(self, message: str, booked_until: Optional[datetime] = None) -> None:
        super().__init__(message)
        self.booked_until = booked_until


class NotBookedError(RoomRegistryError):
    """Raised when cancelling a room that has no booking."""


class ObserverNotificationError(RoomRegistryError):
    """Raised after notification when one or more observers failed."""

    def __init__(
        self,
        room_id: int,
        failures: list[tuple[OccupancyObserver, Exception]],
    ) -> None:
        super().__init__(
            f"{len(failures)} observer(s) failed for room_id={room_id}: "
            + "; ".join(f"{type(exc).__name__}: {exc}" for _, exc in failures)
        )
        self.room_id = room_id
        self.failures = failures


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _ConfigurationBarrier:
    """Shared/exclusive gate: operations share it, ``configure`` owns it."""

    def __init__(self) -> None:
        self._condition = Condition()
        self._active = 0
        self._configuring = False

    @contextmanager
    def shared(self) -> Iterator[None]:
        with self._condition:
            while self._configuring:
                self._condition.wait()
            self._active += 1
        try:
            yield
        finally:
            with self._condition:
                self._active -= 1
                if self._active == 0:
                    self._condition.notify_all()

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        with self._condition:
            while self._configuring:
                self._condition.wait()
            self._configuring = True
            while self._active:
                self._condition.wait()
        try:
            yield
        finally:
            with self._condition:
                self._configuring = False
                self._condition.notify_all()


@dataclass
class _RoomState:
    room_id: int
    max_capacity: int
    is_occupied: bool = False
    occupant_count: int = 0
    booking_start: Optional[datetime] = None
    booking_end: Optional[datetime] = None
    lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def snapshot(self) -> RoomSnapshot:
        return RoomSnapshot(
            room_id=self.room_id,
            max_capacity=self.max_capacity,
            is_occupied=self.is_occupied,
            occupant_count=self.occupant_count,
            booking_start=self.booking_start,
            booking_end=self.booking_end,
        )


class RoomRegistry:
    """Owns rooms and occupancy observers for one process or one test."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or _utc_now
        self._barrier = _ConfigurationBarrier()
        self._rooms: dict[int, _RoomState] = {}
        self._observers: dict[int, list[OccupancyObserver]] = defaultdict(list)
        self._observer_lock = RLock()

    @property
    def room_count(self) -> int:
        with self._barrier.shared():
            return len(self._rooms)

    def configure(self, room_count: int, default_capacity: int) -> None:
        """Replace all rooms with ``room_count`` fresh, unbooked rooms.

        Prior bookings and occupancy are discarded. Registered observers are
        kept since they are keyed by room id, not by room instance.

        Raises ``InvalidArgumentError`` for a negative ``room_count`` or a
        non-positive ``default_capacity``; the existing rooms are left as
        they were.
        """
        try:
            validate_room_count(room_count)
            validate_capacity(default_capacity)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc)) from exc

        with self._barrier.exclusive():
            self._rooms = {
                room_id: _RoomState(room_id=room_id, max_capacity=default_capacity)
                for room_id in range(1, room_count + 1)
            }
        logger.info(
            "Configured %s room(s) with default capacity %s",
            room_count,
            default_capacity,
        )

    def _room(self, room_id: int) -> _RoomState:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    def get_status(self, room_id: int) -> RoomSnapshot:
        with self._barrier.shared():
            room = self._room(room_id)
            with room.lock:
                return room.snapshot()

    def set_max_capacity(self, room_id: int, capacity: int) -> None:
        with self._barrier.shared():
            room = self._room(room_id)
            try:
                validate_capacity(capacity)
            except ValueError as exc:
                raise InvalidArgumentError(str(exc)) from exc
            with room.lock:
                room.max_capacity = capacity
        logger.info("Room %s max capacity set to %s", room_id, capacity)

    def reserve(self, room_id: int, start_time: datetime, duration: timedelta) -> datetime:
        """Book the room for ``duration`` from ``start_time``; return the end time."""
        with self._barrier.shared():
            room = self._room(room_id)
            if duration <= timedelta(0):
                raise InvalidArgumentError("duration must be > 0 minutes")
            start_time = _as_utc(start_time)
            try:
                booking_end = start_time + duration
            except OverflowError as exc:
                raise InvalidArgumentError("booking end is out of range") from exc
            with room.lock:
                if room.is_occupied:
                    raise BookingConflictError("room occupied")
                if room.booking_end is not None and room.booking_end > _as_utc(self._clock()):
                    raise BookingConflictError(
                        f"already booked until {room.booking_end.isoformat()}",
                        booked_until=room.booking_end,
                    )
                room.booking_start, room.booking_end = start_time, booking_end
        logger.info(
            "Room %s booked from %s until %s",
            room_id,
            start_time.isoformat(),
            booking_end.isoformat(),
        )
        return booking_end

    def release(self, room_id: int) -> None:
        with self._barrier.shared():
            room = self._room(room_id)
            with room.lock:
                if room.booking_start is None:
                    raise NotBookedError(f"room_id={room_id} has no booking to cancel")
                room.booking_start = None
                room.booking_end = None
        logger.info("Room %s booking cancelled", room_id)

    def record_occupancy(self, room_id: int, occupant_count: int) -> bool:
        """Store the headcount and return the derived occupancy flag."""
        with self._barrier.shared():
            room = self._room(room_id)
            try:
                validate_occupant_count(occupant_count)
            except ValueError as exc:
                raise InvalidArgumentError(str(exc)) from exc
            is_occupied = is_occupied_headcount(occupant_count)
            with room.lock:
                room.occupant_count = occupant_count
                room.is_occupied = is_occupied
        logger.info(
            "Room %s reported %s occupant(s); occupied=%s",
            room_id,
            occupant_count,
            is_occupied,
        )
        return is_occupied

    def add_observer(self, observer: OccupancyObserver) -> None:
        with self._observer_lock:
            self._observers[observer.room_id].append(observer)

    def remove_observer(self, observer: OccupancyObserver) -> bool:
        with self._observer_lock:
            observers = self._observers.get(observer.room_id, [])
            for index, registered in enumerate(observers):
                if registered is observer:
                    del observers[index]
                    return True
        return False

    def observers_for(self, room_id: int) -> tuple[OccupancyObserver, ...]:
        with self._observer_lock:
            return tuple(self._observers.get(room_id, ()))

    def notify(self, room_id: int, is_occupied: bool) -> None:
        """Call every observer of ``room_id`` in registration order.

        A failing observer does not stop the remaining ones; failures are
        collected and raised together once all observers have run.
        """
        observers = self.observers_for(room_id)
        failures: list[tuple[OccupancyObserver, Exception]] = []
        for observer in observers:
            try:
                observer.on_occupancy_changed(room_id, is_occupied)
            except Exception as exc:
                logger.exception(
                    "Observer %r failed for room %s",
                    observer,
                    room_id,
                )
                failures.append((observer, exc))
        if failures:
            raise ObserverNotificationError(room_id, failures)

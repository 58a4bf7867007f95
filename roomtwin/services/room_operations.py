"""Booking, cancellation and occupancy-report operations.

Each operation is an immutable value applied to an explicitly supplied
registry. Expected failures come back as an ``OperationOutcome`` rather than
an exception; only observer failures escape ``OccupancyReportOperation``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from roomtwin.domain.models import OperationOutcome, OutcomeStatus
from roomtwin.repository.room_registry import (
    BookingConflictError,
    InvalidArgumentError,
    NotBookedError,
    RoomNotFoundError,
    RoomRegistry,
)
from roomtwin.utils.logger import get_logger


logger = get_logger(__name__)


def _not_found(exc: RoomNotFoundError) -> OperationOutcome:
    return OperationOutcome(
        status=OutcomeStatus.NOT_FOUND,
        room_id=exc.room_id,
        message=str(exc),
    )


@dataclass(frozen=True)
class BookingOperation:
    room_id: int
    start_time: datetime
    duration_minutes: int

    def apply(self, registry: RoomRegistry) -> OperationOutcome:
        try:
            duration = timedelta(minutes=self.duration_minutes)
        except OverflowError:
            # Any end time this far out is past datetime.max; reserve rejects it.
            duration = timedelta.max
        try:
            booking_end = registry.reserve(self.room_id, self.start_time, duration)
        except RoomNotFoundError as exc:
            return _not_found(exc)
        except InvalidArgumentError as exc:
            return OperationOutcome(
                status=OutcomeStatus.INVALID_ARGUMENT,
                room_id=self.room_id,
                message=str(exc),
            )
        except BookingConflictError as exc:
            logger.debug("Booking rejected for room %s: %s", self.room_id, exc)
            return OperationOutcome(
                status=OutcomeStatus.CONFLICT,
                room_id=self.room_id,
                message=str(exc),
                booking_end=exc.booked_until,
            )
        return OperationOutcome(
            status=OutcomeStatus.OK,
            room_id=self.room_id,
            message=f"booked until {booking_end.isoformat()}",
            booking_end=booking_end,
        )


@dataclass(frozen=True)
class CancellationOperation:
    room_id: int

    def apply(self, registry: RoomRegistry) -> OperationOutcome:
        try:
            registry.release(self.room_id)
        except RoomNotFoundError as exc:
            return _not_found(exc)
        except NotBookedError as exc:
            return OperationOutcome(
                status=OutcomeStatus.NOT_BOOKED,
                room_id=self.room_id,
                message=str(exc),
            )
        return OperationOutcome(
            status=OutcomeStatus.OK,
            room_id=self.room_id,
            message="booking cancelled",
        )


@dataclass(frozen=True)
class OccupancyReportOperation:
    room_id: int
    occupant_count: int

    def apply(self, registry: RoomRegistry) -> OperationOutcome:
        """Record the headcount, then notify observers of the room.

        Observers hear about every report, including ones that leave the
        occupancy flag unchanged. Notification runs after the room lock has
        been released; an ``ObserverNotificationError`` propagates to the
        caller with the new state already committed.

        Two concurrent reports for the same room commit in one order but may
        notify in the other, so an observer's last flag can briefly differ
        from the registry. ``get_status`` is authoritative.
        """
        try:
            is_occupied = registry.record_occupancy(self.room_id, self.occupant_count)
        except RoomNotFoundError as exc:
            return _not_found(exc)
        except InvalidArgumentError as exc:
            return OperationOutcome(
                status=OutcomeStatus.INVALID_ARGUMENT,
                room_id=self.room_id,
                message=str(exc),
            )

        registry.notify(self.room_id, is_occupied)
        return OperationOutcome(
            status=OutcomeStatus.OK,
            room_id=self.room_id,
            message=f"occupied={is_occupied}",
            is_occupied=is_occupied,
        )


def book(
    registry: RoomRegistry,
    room_id: int,
    start_time: datetime,
    duration_minutes: int,
) -> OperationOutcome:
    return BookingOperation(room_id, start_time, duration_minutes).apply(registry)


def cancel(registry: RoomRegistry, room_id: int) -> OperationOutcome:
    return CancellationOperation(room_id).apply(registry)


def report_occupancy(
    registry: RoomRegistry,
    room_id: int,
    occupant_count: int,
) -> OperationOutcome:
    return OccupancyReportOperation(room_id, occupant_count).apply(registry)

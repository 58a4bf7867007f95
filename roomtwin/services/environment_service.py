"""Simulated HVAC and lighting controllers driven by occupancy reports."""

from __future__ import annotations

from abc import ABC, abstractmethod
from threading import Lock
from typing import Iterable, Optional

from roomtwin.repository.room_registry import RoomRegistry
from roomtwin.utils.logger import get_logger


logger = get_logger(__name__)


class EnvironmentController(ABC):
    """Occupancy observer that switches one simulated device for one room.

    Passing a registry registers the controller immediately. Repeated
    notifications with the same flag leave the device as it is.
    """

    device_name = "device"

    def __init__(self, room_id: int, registry: Optional[RoomRegistry] = None) -> None:
        self.room_id = room_id
        self.is_active = False
        self.notification_count = 0
        self.last_notified_occupied: bool | None = None
        self._lock = Lock()
        if registry is not None:
            registry.add_observer(self)

    @abstractmethod
    def state_label(self, is_active: bool) -> str:
        ...

    def on_occupancy_changed(self, room_id: int, is_occupied: bool) -> None:
        if room_id != self.room_id:
            logger.warning(
                "%s for room %s ignored notification for room %s",
                self.device_name,
                self.room_id,
                room_id,
            )
            return
        with self._lock:
            self.notification_count += 1
            self.last_notified_occupied = is_occupied
            if self.is_active == is_occupied:
                return
            self.is_active = is_occupied
        logger.info(
            "Room %s %s -> %s",
            self.room_id,
            self.device_name,
            self.state_label(is_occupied),
        )

    def to_dict(self) -> dict[str, int | bool | str | None]:
        with self._lock:
            return {
                "device": self.device_name,
                "is_active": self.is_active,
                "state": self.state_label(self.is_active),
                "notification_count": self.notification_count,
                "last_notified_occupied": self.last_notified_occupied,
            }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(room_id={self.room_id})"


class HvacController(EnvironmentController):
    device_name = "hvac"

    def state_label(self, is_active: bool) -> str:
        return "comfort" if is_active else "eco"


class LightingController(EnvironmentController):
    device_name = "lighting"

    def state_label(self, is_active: bool) -> str:
        return "on" if is_active else "off"


class EnvironmentService:
    """Keeps the HVAC and lighting controllers attached to each room."""

    def __init__(self, registry: RoomRegistry) -> None:
        self._registry = registry
        self._controllers: dict[int, list[EnvironmentController]] = {}
        self._lock = Lock()

    def attach_room_controllers(self, room_ids: Iterable[int]) -> list[EnvironmentController]:
        """Attach one HVAC and one lighting controller to each new room id."""
        attached: list[EnvironmentController] = []
        with self._lock:
            for room_id in room_ids:
                if room_id in self._controllers:
                    continue
                controllers: list[EnvironmentController] = [
                    HvacController(room_id, self._registry),
                    LightingController(room_id, self._registry),
                ]
                self._controllers[room_id] = controllers
                attached.extend(controllers)
        if attached:
            logger.info("Attached %s environment controller(s)", len(attached))
        return attached

    def detach_room_controllers(self, room_id: int) -> int:
        with self._lock:
            controllers = self._controllers.pop(room_id, [])
        removed = sum(1 for controller in controllers if self._registry.remove_observer(controller))
        if removed:
            logger.info("Detached %s environment controller(s) from room %s", removed, room_id)
        return removed

    def controllers_for(self, room_id: int) -> list[EnvironmentController]:
        with self._lock:
            return list(self._controllers.get(room_id, []))

    def device_states(self, room_id: int) -> dict[str, object]:
        return {
            "room_id": room_id,
            "devices": [controller.to_dict() for controller in self.controllers_for(room_id)],
        }

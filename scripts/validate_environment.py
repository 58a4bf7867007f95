#!/usr/bin/env python3
"""Validate local RoomTwin environment readiness."""

from __future__ import annotations

import importlib
import sys
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from roomtwin.domain.models import OutcomeStatus
from roomtwin.repository.room_registry import RoomRegistry
from roomtwin.services.environment_service import EnvironmentService
from roomtwin.services.room_operations import book, cancel, report_occupancy
from roomtwin.utils.config import get_settings

SEPARATOR_LINE = "=" * 44
SMOKE_START = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def _check_packages() -> tuple[bool, str]:
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except (ImportError, PackageNotFoundError) as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        return _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    return _print_result("Required packages: all importable", True)


def _run_smoke_scenario() -> list[tuple[bool, str]]:
    """Book, occupy and cancel a room against a throwaway registry."""
    settings = get_settings()
    registry = RoomRegistry(clock=lambda: SMOKE_START)
    registry.configure(settings.room_count, settings.default_capacity)
    environment = EnvironmentService(registry)
    environment.attach_room_controllers(range(1, settings.room_count + 1))

    results: list[tuple[bool, str]] = []

    outcome = book(registry, 1, SMOKE_START, 60)
    results.append(
        _print_result(
            "Booking room 1",
            outcome.ok,
            f": until {outcome.booking_end.isoformat()}" if outcome.ok else outcome.message,
        )
    )

    outcome = report_occupancy(registry, 1, 3)
    devices = environment.device_states(1)["devices"]
    all_active = bool(devices) and all(device["is_active"] for device in devices)
    results.append(
        _print_result(
            "Occupancy report drives controllers",
            outcome.ok and all_active,
            "" if outcome.ok and all_active else f"devices={devices}",
        )
    )

    first = cancel(registry, 1)
    second = cancel(registry, 1)
    results.append(
        _print_result(
            "Cancellation",
            first.ok and second.status is OutcomeStatus.NOT_BOOKED,
            "" if first.ok else first.message,
        )
    )
    return results


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1 — Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2 — Required packages importable with versions
    ok, line = _check_packages()
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 3 — In-memory registry round trip
    for ok, line in _run_smoke_scenario():
        results.append(line)
        all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    print(" RoomTwin Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())

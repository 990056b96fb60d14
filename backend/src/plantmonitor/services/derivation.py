"""Status classification and view projections over plant readings.

Everything here is pure: functions take readings (and a clock where
relevant) and return new values without touching their input.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from plantmonitor.models import (
    CRITICAL,
    HEALTHY,
    NO_MATCH,
    NO_READINGS,
    WARNING,
    Projection,
    Reading,
)

CRITICAL_BELOW = 20.0
WARNING_BELOW = 40.0

_PRIORITIES = {CRITICAL: 3, WARNING: 2, HEALTHY: 1}


def derive_status(humidity: float) -> str:
    if humidity < CRITICAL_BELOW:
        return CRITICAL
    if humidity < WARNING_BELOW:
        return WARNING
    return HEALTHY


def status_priority(status: str) -> int:
    return _PRIORITIES.get(status, 0)


def _name_key(r: Reading) -> tuple[str, str]:
    return (r.name.casefold(), r.name)


def sort_readings(readings: Iterable[Reading], sort_by: Optional[str]) -> list[Reading]:
    """Return a new list ordered by ``sort_by``.

    ``humidity`` and ``status`` sort highest first; ``status`` keeps the
    input order among readings of equal priority (``sorted`` is stable).
    Anything else sorts by name.
    """
    if sort_by == "humidity":
        return sorted(readings, key=lambda r: r.humidity, reverse=True)
    if sort_by == "status":
        return sorted(readings, key=lambda r: -status_priority(derive_status(r.humidity)))
    return sorted(readings, key=_name_key)


def filter_by_status(readings: Iterable[Reading], status_filter: Optional[str]) -> list[Reading]:
    if status_filter is None:
        return list(readings)
    return [r for r in readings if derive_status(r.humidity) == status_filter]


def project(
    readings: Sequence[Reading],
    sort_by: Optional[str],
    status_filter: Optional[str],
) -> Projection:
    if not readings:
        return Projection(readings=[], empty=NO_READINGS)

    # filter first so the sort only sees what will be shown
    shown = sort_readings(filter_by_status(readings, status_filter), sort_by)
    if not shown:
        return Projection(readings=[], empty=NO_MATCH)
    return Projection(readings=shown)


def toggle_filter(current: Optional[str], requested: Optional[str]) -> Optional[str]:
    if requested == current:
        return None
    return requested


def compute_counts(readings: Iterable[Reading]) -> dict:
    counts = {"total": 0, HEALTHY: 0, WARNING: 0, CRITICAL: 0}
    for r in readings:
        counts["total"] += 1
        counts[derive_status(r.humidity)] += 1
    return counts


# ---------------------------
# Display helpers
# ---------------------------
def time_ago(timestamp: datetime, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    seconds = (now - timestamp).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    return f"{timestamp.month}/{timestamp.day}/{timestamp.year}"


def humidity_bar_width(humidity: float) -> float:
    # keep a sliver of the gauge visible for bone-dry soil
    return max(5.0, humidity)


def format_clock(dt: datetime) -> str:
    return dt.strftime("%I:%M:%S %p")


def card(reading: Reading, now: Optional[datetime] = None) -> dict:
    """Everything a card or list row renders for one plant."""
    return {
        "id": reading.id,
        "name": reading.name,
        "location": reading.location,
        "humidity": reading.humidity,
        "temperature": reading.temperature,
        "battery_level": reading.battery_level,
        "last_reading": reading.last_reading.isoformat(),
        "status": derive_status(reading.humidity),
        "time_ago": time_ago(reading.last_reading, now),
        "humidity_bar_width": humidity_bar_width(reading.humidity),
    }

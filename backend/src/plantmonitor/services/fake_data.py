from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from random import Random
from typing import Optional, Protocol, Sequence

from plantmonitor.models import Reading

logger = logging.getLogger(__name__)


class DataSourceError(Exception):
    """Raised when readings could not be acquired."""


class DataSource(Protocol):
    async def poll(self) -> list[Reading]:
        ...


def clamp(n: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, n))


def generate_readings(
    names: Sequence[str],
    locations: Sequence[str],
    rng: Optional[Random] = None,
    now: Optional[datetime] = None,
) -> list[Reading]:
    """Build the startup batch of plausible fake readings."""
    rng = rng or random
    now = now or datetime.now(timezone.utc)

    return [
        Reading(
            id=f"esp32_{idx + 1:03d}",
            name=name,
            location=rng.choice(locations),
            humidity=round(rng.random() * 100, 1),          # 0..100 %
            last_reading=now - timedelta(seconds=rng.random() * 3600),
            battery_level=rng.randint(0, 99),
            temperature=round(20 + rng.random() * 15, 1),   # 20..35 °C
        )
        for idx, name in enumerate(names)
    ]


def apply_refresh_jitter(
    reading: Reading,
    rng: Optional[Random] = None,
    now: Optional[datetime] = None,
) -> Reading:
    """Return ``reading`` as a fresh sensor poll would have it."""
    rng = rng or random
    now = now or datetime.now(timezone.utc)

    humidity = clamp(reading.humidity + rng.uniform(-10, 10), 0.0, 100.0)
    return replace(
        reading,
        humidity=round(humidity, 1),
        battery_level=max(0, reading.battery_level - rng.randint(0, 4)),
        temperature=round(reading.temperature + rng.uniform(-2.5, 2.5), 1),
        last_reading=now,
    )


class SimulatedDataSource:
    """Stands in for the ESP32 fleet.

    The first poll returns a generated batch; every later poll drifts the
    previous batch with :func:`apply_refresh_jitter`. A failed poll leaves
    the simulated devices where they were.
    """

    def __init__(
        self,
        names: Sequence[str],
        locations: Sequence[str],
        latency_s: float = 1.0,
        failure_rate: float = 0.0,
        seed: Optional[int] = None,
    ):
        self.names = list(names)
        self.locations = list(locations)
        self.latency_s = latency_s
        self.failure_rate = failure_rate
        self._rng = Random(seed)
        self._current: list[Reading] = []

    async def poll(self) -> list[Reading]:
        if self.latency_s > 0:
            await asyncio.sleep(self.latency_s)

        if self._rng.random() < self.failure_rate:
            raise DataSourceError("simulated sensor poll failure")

        now = datetime.now(timezone.utc)
        if not self._current:
            self._current = generate_readings(self.names, self.locations, self._rng, now)
            logger.info("Generated %d simulated readings", len(self._current))
        else:
            self._current = [apply_refresh_jitter(r, self._rng, now) for r in self._current]
        return list(self._current)

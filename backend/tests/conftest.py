"""
Shared fixtures: reading factories and deterministic data sources.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import pytest

from plantmonitor.config import Settings
from plantmonitor.models import Reading
from plantmonitor.services.fake_data import DataSourceError

logging.getLogger("plantmonitor").setLevel(logging.WARNING)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def make_reading(name: str, humidity: float, idx: int = 1, **kw) -> Reading:
    fields = {
        "id": f"esp32_{idx:03d}",
        "name": name,
        "location": "Kitchen",
        "humidity": humidity,
        "last_reading": NOW - timedelta(minutes=5),
        "battery_level": 80,
        "temperature": 22.5,
    }
    fields.update(kw)
    return Reading(**fields)


class StaticSource:
    """Returns queued batches in order; a DataSourceError instance is raised instead."""

    def __init__(self, *batches):
        self.batches = list(batches)
        self.polls = 0

    async def poll(self):
        self.polls += 1
        batch = self.batches.pop(0)
        if isinstance(batch, Exception):
            raise batch
        return list(batch)


class GatedSource:
    """Blocks each poll until ``release`` is set."""

    def __init__(self, batch):
        self.batch = list(batch)
        self.release = asyncio.Event()
        self.started = asyncio.Event()

    async def poll(self):
        self.started.set()
        await self.release.wait()
        return list(self.batch)


@pytest.fixture()
def twelve_plants():
    """Twelve plants, exactly one critical (Peace Lily at 15%)."""
    names = [
        "Monstera Deliciosa", "Snake Plant", "Peace Lily", "Rubber Plant",
        "Fiddle Leaf Fig", "Pothos", "Spider Plant", "ZZ Plant",
        "Philodendron", "Aloe Vera", "Boston Fern", "Jade Plant",
    ]
    humidities = [55.0, 42.3, 15.0, 61.2, 33.3, 48.0, 70.1, 25.0, 40.0, 88.8, 39.9, 52.4]
    return [make_reading(n, h, idx=i + 1) for i, (n, h) in enumerate(zip(names, humidities))]


@pytest.fixture()
def settings():
    return Settings(
        refresh_interval_s=1800,
        refresh_latency_s=0,
        failure_rate=0.0,
        seed=7,
        plants=["Pothos", "Aloe Vera", "Jade Plant"],
        locations=["Office"],
    )


@pytest.fixture()
def failure():
    return DataSourceError("sensor gateway unreachable")

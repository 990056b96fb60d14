import asyncio
from random import Random

import pytest

from conftest import NOW, make_reading
from plantmonitor.services.fake_data import (
    DataSourceError,
    SimulatedDataSource,
    apply_refresh_jitter,
    generate_readings,
)

NAMES = ["Pothos", "Aloe Vera", "Jade Plant"]
ROOMS = ["Office", "Study"]


def test_generate_readings():
    readings = generate_readings(NAMES, ROOMS, Random(1), NOW)
    assert [r.id for r in readings] == ["esp32_001", "esp32_002", "esp32_003"]
    assert [r.name for r in readings] == NAMES
    for r in readings:
        assert r.location in ROOMS
        assert 0 <= r.humidity <= 100
        assert round(r.humidity, 1) == r.humidity
        assert 0 <= r.battery_level <= 99
        assert 20 <= r.temperature <= 35
        assert 0 <= (NOW - r.last_reading).total_seconds() <= 3600


@pytest.mark.parametrize("humidity", [0.0, 3.2, 50.0, 97.5, 100.0])
def test_jitter_keeps_invariants(humidity):
    rng = Random(3)
    reading = make_reading("Pothos", humidity, battery_level=2)
    for _ in range(200):
        updated = apply_refresh_jitter(reading, rng, NOW)
        assert 0 <= updated.humidity <= 100
        assert 0 <= updated.battery_level <= reading.battery_level
        assert abs(updated.humidity - reading.humidity) <= 10.05
        assert abs(updated.temperature - reading.temperature) <= 2.55
        assert updated.last_reading == NOW
        reading = updated


def test_jitter_is_pure():
    reading = make_reading("Pothos", 50.0)
    updated = apply_refresh_jitter(reading, Random(5), NOW)
    assert reading.humidity == 50.0
    assert reading.last_reading != NOW
    assert updated.id == reading.id
    assert updated.name == reading.name
    assert updated.location == reading.location


def test_simulated_source_generates_then_drifts():
    source = SimulatedDataSource(NAMES, ROOMS, latency_s=0, seed=11)

    first = asyncio.run(source.poll())
    second = asyncio.run(source.poll())

    assert [r.id for r in first] == [r.id for r in second]
    for before, after in zip(first, second):
        assert after.battery_level <= before.battery_level
        assert after.last_reading >= before.last_reading


def test_simulated_source_failure_keeps_state():
    source = SimulatedDataSource(NAMES, ROOMS, latency_s=0, seed=11)
    first = asyncio.run(source.poll())

    source.failure_rate = 1.0
    with pytest.raises(DataSourceError):
        asyncio.run(source.poll())

    source.failure_rate = 0.0
    second = asyncio.run(source.poll())
    # drifted exactly once since the first poll
    for before, after in zip(first, second):
        assert abs(after.humidity - before.humidity) <= 10.05

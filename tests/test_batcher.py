"""Unit tests for event batching."""

from __future__ import annotations

from models.points import SinkConfig, WritePrecision
from models.records import Event, Reading
from services.batcher import EventBatcher


def _reading(name: str, device: str = "sensorA", value: str = "1", origin: int = 1000) -> Reading:
    """Helper to build deterministic readings."""

    return Reading(device=device, name=name, id=f"id-{name}", value=value, origin=origin)


CONFIG = SinkConfig(database="edgex", precision=WritePrecision.ms)


def test_batch_empty_event_returns_empty_batch() -> None:
    result = EventBatcher().batch(Event(device="sensorA"), CONFIG)

    assert result.batch.points == ()
    assert result.batch.config == CONFIG
    assert result.errors == []


def test_batch_keeps_reading_order() -> None:
    readings = (
        _reading("temp", value="23"),
        _reading("humidity", value="false"),
        _reading("status", value="ok", origin=1500),
    )

    result = EventBatcher().batch(Event(device="sensorA", readings=readings), CONFIG)

    assert [next(iter(point.fields)) for point in result.batch.points] == [
        "temp",
        "humidity",
        "status",
    ]
    assert [point.tags["id"] for point in result.batch.points] == [
        "id-temp",
        "id-humidity",
        "id-status",
    ]
    assert result.errors == []


def test_batch_skips_failed_reading_and_reports_it() -> None:
    readings = (
        _reading("temp"),
        _reading("broken", device=""),
        _reading("pressure"),
    )

    result = EventBatcher().batch(Event(device="sensorA", readings=readings), CONFIG)

    assert len(result.batch) == 2
    assert [point.measurement for point in result.batch.points] == ["sensorA", "sensorA"]
    assert len(result.errors) == 1
    assert result.errors[0].reading is readings[1]


def test_batch_collects_every_failure() -> None:
    readings = (
        _reading("", device="sensorA"),
        _reading("temp", device=""),
    )

    result = EventBatcher().batch(Event(device="sensorA", readings=readings), CONFIG)

    assert len(result.batch) == 0
    assert [error.reading for error in result.errors] == list(readings)

"""Unit tests for building points from readings."""

from __future__ import annotations

import base64
import struct

import pytest

from models.points import InvalidPointError, Point, PointTime
from models.records import Reading
from models.values import to_field_value
from services.points import BuildError, PointBuilder


def _reading(**overrides) -> Reading:
    values = {
        "device": "sensorA",
        "name": "temp",
        "id": "r1",
        "value": "23",
        "origin": 1000,
    }
    values.update(overrides)
    return Reading(**values)


def test_build_maps_reading_onto_point() -> None:
    point = PointBuilder().build(_reading())

    assert point == Point(
        measurement="sensorA",
        tags={"id": "r1"},
        fields={"temp": 23},
        timestamp=PointTime(1, 0),
    )
    assert type(point.fields["temp"]) is int


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("true", True),
        ("P8AAAA==", 1.5),
        ("on", "on"),
    ],
)
def test_build_uses_inferred_field_type(value: str, expected) -> None:
    point = PointBuilder().build(_reading(value=value))

    assert point.fields["temp"] == expected
    assert type(point.fields["temp"]) is type(expected)


def test_build_keeps_empty_reading_id_as_tag() -> None:
    point = PointBuilder().build(_reading(id=""))

    assert point.tags == {"id": ""}


def test_empty_device_is_rejected() -> None:
    reading = _reading(device="")

    with pytest.raises(BuildError) as excinfo:
        PointBuilder().build(reading)

    assert excinfo.value.reading is reading
    assert excinfo.value.reason == "missing measurement"
    assert isinstance(excinfo.value.__cause__, InvalidPointError)


def test_empty_reading_name_is_rejected() -> None:
    with pytest.raises(BuildError, match="non-empty names"):
        PointBuilder().build(_reading(name=""))


def test_nan_float_is_rejected() -> None:
    encoded = base64.b64encode(struct.pack(">f", float("nan"))).decode("ascii")

    with pytest.raises(BuildError, match="NaN"):
        PointBuilder().build(_reading(value=encoded))


def test_infinite_float_is_rejected() -> None:
    encoded = base64.b64encode(struct.pack(">d", float("inf"))).decode("ascii")

    with pytest.raises(BuildError, match="Inf"):
        PointBuilder().build(_reading(value=encoded))


def test_origin_outside_nanosecond_range_is_rejected() -> None:
    with pytest.raises(BuildError, match="time outside range"):
        PointBuilder().build(_reading(origin=10**19))


def test_oversized_series_key_is_rejected() -> None:
    with pytest.raises(BuildError, match="max key length"):
        PointBuilder().build(_reading(device="d" * 70_000))


def test_to_field_value_rejects_unknown_variants() -> None:
    with pytest.raises(TypeError):
        to_field_value(1.5)  # type: ignore[arg-type]


def test_series_key_length_counts_escaped_bytes() -> None:
    # 65535 bytes as written, but every space gains a backslash on the wire.
    with pytest.raises(BuildError, match="max key length"):
        PointBuilder().build(_reading(device="a b" * 21843))


def test_point_measures_escaped_measurement() -> None:
    with pytest.raises(InvalidPointError, match="87380 > 65535"):
        Point(
            measurement="a b" * 21845,
            tags={},
            fields={"temp": 1},
            timestamp=PointTime(1, 0),
        )


def test_highest_int64_nanosecond_is_reserved() -> None:
    with pytest.raises(InvalidPointError, match="time outside range"):
        Point(
            measurement="sensorA",
            tags={},
            fields={"temp": 1},
            timestamp=PointTime(0, 2**63 - 1),
        )

    point = Point(
        measurement="sensorA",
        tags={},
        fields={"temp": 1},
        timestamp=PointTime(0, 2**63 - 2),
    )
    assert point.timestamp.as_nanoseconds() == 2**63 - 2

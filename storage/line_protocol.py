"""InfluxDB line protocol encoding."""

from __future__ import annotations

from typing import Iterable

from models.escaping import escape_key, series_key
from models.points import Point, WritePrecision
from models.values import FieldValue

_STRING_ESCAPES = str.maketrans({"\\": "\\\\", '"': '\\"'})


def format_field_value(value: FieldValue) -> str:
    # bool first: it is a subclass of int.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"{value}i"
    if isinstance(value, float):
        return repr(value)
    return f'"{str(value).translate(_STRING_ESCAPES)}"'


def encode_point(point: Point, precision: WritePrecision = WritePrecision.ns) -> str:
    """Render one point; tags with empty values are omitted, keys are sorted."""
    series = series_key(point.measurement, point.tags)

    fields = ",".join(
        f"{escape_key(key)}={format_field_value(point.fields[key])}"
        for key in sorted(point.fields)
    )
    return f"{series} {fields} {point.timestamp.in_precision(precision)}"


def encode_points(points: Iterable[Point], precision: WritePrecision = WritePrecision.ns) -> str:
    return "\n".join(encode_point(point, precision) for point in points)

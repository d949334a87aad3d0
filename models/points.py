"""Time-series points and the batches they are written in."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple

from models.escaping import series_key
from models.values import FieldValue

# InfluxDB reserves the two lowest int64 values and the highest one.
MIN_NANO_TIME = -(2**63) + 2
MAX_NANO_TIME = 2**63 - 2
MAX_KEY_LENGTH = 65535

NANOS_PER_SECOND = 1_000_000_000


class InvalidPointError(ValueError):
    """Raised when measurement, tags, fields or time cannot form a point."""


class WritePrecision(str, Enum):
    """Timestamp unit used when a batch is written."""

    ns = "ns"
    us = "us"
    ms = "ms"
    s = "s"

    @property
    def nanos_per_unit(self) -> int:
        return {
            WritePrecision.ns: 1,
            WritePrecision.us: 1_000,
            WritePrecision.ms: 1_000_000,
            WritePrecision.s: NANOS_PER_SECOND,
        }[self]


@dataclass(frozen=True, slots=True)
class PointTime:
    """UTC epoch time split into whole seconds and the nanosecond remainder."""

    seconds: int
    nanoseconds: int

    def as_nanoseconds(self) -> int:
        return self.seconds * NANOS_PER_SECOND + self.nanoseconds

    def in_precision(self, precision: WritePrecision) -> int:
        return self.as_nanoseconds() // precision.nanos_per_unit


@dataclass(frozen=True, slots=True)
class Point:
    measurement: str
    tags: Dict[str, str]
    fields: Dict[str, FieldValue]
    timestamp: PointTime

    def __post_init__(self) -> None:
        if not self.measurement:
            raise InvalidPointError("missing measurement")
        if not self.fields:
            raise InvalidPointError("point must have at least one field")
        for key, value in self.fields.items():
            if not key:
                raise InvalidPointError("all fields must have non-empty names")
            if isinstance(value, float) and math.isnan(value):
                raise InvalidPointError(f"NaN is an unsupported value for field {key}")
            if isinstance(value, float) and math.isinf(value):
                raise InvalidPointError(f"+/-Inf is an unsupported value for field {key}")
        for key in self.tags:
            if not key:
                raise InvalidPointError("all tags must have non-empty keys")

        nanos = self.timestamp.as_nanoseconds()
        if not MIN_NANO_TIME <= nanos <= MAX_NANO_TIME:
            raise InvalidPointError(f"time outside range {nanos}")

        key_length = len(series_key(self.measurement, self.tags).encode("utf-8"))
        if key_length > MAX_KEY_LENGTH:
            raise InvalidPointError(
                f"max key length exceeded: {key_length} > {MAX_KEY_LENGTH}"
            )


@dataclass(frozen=True, slots=True)
class SinkConfig:
    """Where and at which precision a batch is written."""

    database: str
    precision: WritePrecision = WritePrecision.ns


@dataclass(frozen=True, slots=True)
class Batch:
    config: SinkConfig
    points: Tuple[Point, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.points)

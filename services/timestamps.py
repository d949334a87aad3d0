from __future__ import annotations

from models.points import PointTime

NANOS_PER_MILLI = 1_000_000


def convert_origin(origin_ms: int) -> PointTime:
    """Split an epoch-milliseconds origin into UTC seconds and nanoseconds.

    Integer arithmetic keeps the result exact for any origin; ``divmod`` floors
    so pre-epoch origins still have a non-negative nanosecond part.
    """
    seconds, millis = divmod(int(origin_ms), 1000)
    return PointTime(seconds=seconds, nanoseconds=millis * NANOS_PER_MILLI)

"""Turn individual readings into time-series points."""

from __future__ import annotations

from models.points import InvalidPointError, Point
from models.records import Reading
from models.values import to_field_value
from services.inference import infer_value
from services.timestamps import convert_origin


class BuildError(ValueError):
    """A single reading could not be turned into a point."""

    def __init__(self, reading: Reading, reason: str) -> None:
        super().__init__(
            f"cannot build point for reading {reading.name!r} "
            f"(id={reading.id!r}, device={reading.device!r}): {reason}"
        )
        self.reading = reading
        self.reason = reason


class PointBuilder:
    """Builds one point per reading: measurement is the device, the reading id is the only tag."""

    def build(self, reading: Reading) -> Point:
        fields = {reading.name: to_field_value(infer_value(reading.value))}
        try:
            return Point(
                measurement=reading.device,
                tags={"id": reading.id},
                fields=fields,
                timestamp=convert_origin(reading.origin),
            )
        except InvalidPointError as exc:
            raise BuildError(reading, str(exc)) from exc

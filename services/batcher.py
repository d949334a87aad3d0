"""Batch construction for a whole event."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from models.points import Batch, Point, SinkConfig
from models.records import Event
from services.points import BuildError, PointBuilder


@dataclass
class BatchResult:
    """The batch built for an event and the readings that had to be skipped."""

    batch: Batch
    errors: List[BuildError] = field(default_factory=list)


class EventBatcher:
    """Pure batching component that can be unit tested in isolation."""

    def __init__(self, builder: PointBuilder | None = None) -> None:
        self.builder = builder or PointBuilder()

    def batch(self, event: Event, config: SinkConfig) -> BatchResult:
        points: list[Point] = []
        errors: list[BuildError] = []

        for reading in event.readings:
            try:
                points.append(self.builder.build(reading))
            except BuildError as exc:
                errors.append(exc)

        return BatchResult(batch=Batch(config=config, points=tuple(points)), errors=errors)

"""Domain models for events received from the edge platform."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True, slots=True)
class Reading:
    """A single named measurement; ``value`` is always the raw wire text."""

    device: str
    name: str
    id: str
    value: str
    origin: int


@dataclass(frozen=True, slots=True)
class Event:
    """A device's readings captured together, in wire order."""

    device: str
    readings: Tuple[Reading, ...] = field(default_factory=tuple)

from __future__ import annotations

from typing import Protocol, runtime_checkable

from models.points import Batch


class WriteError(RuntimeError):
    """The storage backend did not accept a batch."""


@runtime_checkable
class TimeSeriesSink(Protocol):
    """Anything that can persist a batch of points; must be safe to call from several threads."""

    def write(self, batch: Batch) -> None:
        ...

    def close(self) -> None:
        ...

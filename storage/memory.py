from __future__ import annotations

from threading import Condition
from typing import List, Optional

from models.points import Batch, Point


class MemorySink:
    """Thread-safe sink that keeps every written batch in memory."""

    def __init__(self) -> None:
        self._batches: List[Batch] = []
        self._written = Condition()
        self.closed = False

    def write(self, batch: Batch) -> None:
        with self._written:
            self._batches.append(batch)
            self._written.notify_all()

    def close(self) -> None:
        self.closed = True

    @property
    def batches(self) -> List[Batch]:
        with self._written:
            return list(self._batches)

    def points(self) -> List[Point]:
        return [point for batch in self.batches for point in batch.points]

    def wait_for(self, count: int, timeout: Optional[float] = None) -> bool:
        """Block until at least ``count`` batches were written or ``timeout`` expires."""
        with self._written:
            return self._written.wait_for(lambda: len(self._batches) >= count, timeout=timeout)

"""Background ingestion of decoded events into the time-series sink."""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from enum import Enum
from functools import lru_cache
from threading import BoundedSemaphore, Lock
from typing import Dict, Optional
from uuid import uuid4

from models.points import SinkConfig, WritePrecision
from models.records import Event
from services.batcher import EventBatcher
from settings import get_settings, validate_settings
from storage.base import TimeSeriesSink, WriteError
from storage.influx import build_default_influx_sink
from storage.memory import MemorySink

logger = logging.getLogger(__name__)


class OverflowPolicy(str, Enum):
    """What ``ingest`` does when ``max_pending`` events are already queued."""

    block = "block"
    reject = "reject"


class PipelineOverflowError(RuntimeError):
    """The pipeline cannot take another event right now."""


class IngestionPipeline:
    """Hands each event to a bounded worker pool that batches it and writes it to the sink.

    ``ingest`` returns as soon as the event is queued. Per-reading build errors and
    sink write failures are logged by the worker and never reach the caller.
    """

    def __init__(
        self,
        sink: TimeSeriesSink,
        config: SinkConfig,
        batcher: Optional[EventBatcher] = None,
        workers: int = 4,
        max_pending: int = 1024,
        overflow_policy: OverflowPolicy | str = OverflowPolicy.block,
        submit_timeout: Optional[float] = 5.0,
    ) -> None:
        if max_pending < 1:
            raise ValueError("max_pending must be at least 1.")
        self.sink = sink
        self.config = config
        self.batcher = batcher or EventBatcher()
        self.executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ingest")
        self.max_pending = max_pending
        self.overflow_policy = OverflowPolicy(overflow_policy)
        self.submit_timeout = submit_timeout
        self._slots = BoundedSemaphore(max_pending)
        self._futures: Dict[str, Future[None]] = {}
        self._futures_lock = Lock()
        self._closed = False

    def ingest(self, event: Event) -> str:
        """Queue ``event`` for batching and writing; returns the generated event id."""
        if self._closed:
            raise PipelineOverflowError("Pipeline is shutting down.")
        if not self._acquire_slot():
            logger.warning(
                "Rejecting event, pipeline is full",
                extra={"device": event.device, "reason": self.overflow_policy.value},
            )
            raise PipelineOverflowError(
                f"Pipeline is full ({self.max_pending} events pending)."
            )

        event_id = str(uuid4())
        try:
            future = self.executor.submit(self._process_event, event_id=event_id, event=event)
        except RuntimeError as exc:
            self._slots.release()
            raise PipelineOverflowError("Pipeline is shutting down.") from exc

        with self._futures_lock:
            self._futures[event_id] = future
        future.add_done_callback(lambda _f, eid=event_id: self._finish(eid))
        return event_id

    def pending(self) -> int:
        with self._futures_lock:
            return len(self._futures)

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for every event queued so far; returns False if ``timeout`` expired first."""
        with self._futures_lock:
            futures = list(self._futures.values())
        _, not_done = wait(futures, timeout=timeout)
        return not not_done

    def shutdown(self, grace_period: Optional[float] = None) -> None:
        """Stop accepting events, give in-flight writes ``grace_period`` seconds, then close the sink."""
        self._closed = True
        with self._futures_lock:
            futures = list(self._futures.values())
        _, not_done = wait(futures, timeout=grace_period)
        cancelled = sum(1 for future in not_done if future.cancel())
        if not_done:
            logger.warning(
                "Shutdown grace period expired with %d events unfinished (%d cancelled)",
                len(not_done),
                cancelled,
            )
        self.executor.shutdown(wait=False, cancel_futures=True)
        self.sink.close()

    def _acquire_slot(self) -> bool:
        if self.overflow_policy is OverflowPolicy.reject:
            return self._slots.acquire(blocking=False)
        return self._slots.acquire(timeout=self.submit_timeout)

    def _finish(self, event_id: str) -> None:
        with self._futures_lock:
            self._futures.pop(event_id, None)
        self._slots.release()

    def _process_event(self, event_id: str, event: Event) -> None:
        start_time = time.perf_counter()
        context = {"event_id": event_id, "device": event.device}

        try:
            result = self.batcher.batch(event, self.config)
            for error in result.errors:
                logger.warning(
                    "Skipping reading: %s",
                    error.reason,
                    extra={
                        "event_id": event_id,
                        "device": error.reading.device,
                        "reading_id": error.reading.id,
                        "reading_name": error.reading.name,
                        "reason": error.reason,
                    },
                )
            self.sink.write(result.batch)
        except WriteError as exc:
            logger.error(
                "Failed to write batch: %s",
                exc,
                extra={**context, "database": self.config.database},
            )
            return
        except Exception:  # noqa: BLE001 - nothing upstream can observe a worker failure
            logger.exception("Unexpected error while ingesting event", extra=context)
            return

        processing_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "Wrote batch",
            extra={
                **context,
                "point_count": len(result.batch.points),
                "error_count": len(result.errors),
                "database": self.config.database,
                "processing_ms": processing_ms,
            },
        )


@lru_cache
def build_default_pipeline() -> IngestionPipeline:
    """Factory that wires the pipeline from the environment settings."""
    settings = validate_settings(get_settings())
    if settings.sink_backend == "memory":
        sink: TimeSeriesSink = MemorySink()
    else:
        sink = build_default_influx_sink()
    config = SinkConfig(
        database=settings.influx_database,
        precision=WritePrecision(settings.influx_precision),
    )
    return IngestionPipeline(
        sink=sink,
        config=config,
        workers=settings.pipeline_workers,
        max_pending=settings.pipeline_max_pending,
        overflow_policy=settings.pipeline_overflow_policy,
        submit_timeout=settings.pipeline_submit_timeout,
    )

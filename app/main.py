from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, Response

from app.api import router
from logging_config import configure_logging
from services.pipeline import build_default_pipeline
from settings import get_settings
from storage.influx import build_default_influx_sink

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    pipeline = build_default_pipeline()
    try:
        yield
    finally:
        pipeline.shutdown(grace_period=get_settings().pipeline_shutdown_grace)
        build_default_pipeline.cache_clear()
        build_default_influx_sink.cache_clear()


async def log_request_timing(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    start = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "Handled request",
        extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": response.status_code,
            "duration_us": int((time.perf_counter() - start) * 1_000_000),
        },
    )
    return response


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="EdgeX Influx Ingest",
        description="Receives EdgeX events and writes their readings to InfluxDB.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.middleware("http")(log_request_timing)
    app.include_router(router)
    return app


app = create_app()

"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas import EventPayload, IngestResponse
from services.pipeline import IngestionPipeline, PipelineOverflowError, build_default_pipeline

router = APIRouter()


def get_pipeline() -> IngestionPipeline:
    return build_default_pipeline()


@router.post(
    "/edgex",
    status_code=status.HTTP_200_OK,
    response_model=IngestResponse,
    summary="Accept an EdgeX event and queue it for writing to InfluxDB.",
)
def ingest_event(
    payload: EventPayload,
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> IngestResponse:
    event = payload.to_event()
    try:
        event_id = pipeline.ingest(event)
    except PipelineOverflowError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
    return IngestResponse(event_id=event_id, readings=len(event.readings))


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "POST EdgeX events to /edgex."}

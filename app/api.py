"""HTTP route definitions for the service."""

from __future__ import annotations

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas import ArchiveDay, ArchiveSummary, PipelineStatus, ReadingOut
from models.records import Reading
from services.aggregator import Aggregator
from services.pipeline import ArchivePipeline, build_default_pipeline

router = APIRouter()


def get_pipeline() -> ArchivePipeline:
    return build_default_pipeline()


def _to_reading_out(reading: Reading) -> ReadingOut:
    return ReadingOut(timestamp=reading.timestamp, temperature_f=reading.temperature_f)


def _resolve_day(year: int, month: int, day: int) -> date:
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid archive date: {exc}",
        ) from exc


def _load_day(pipeline: ArchivePipeline, day: date) -> List[Reading]:
    try:
        return pipeline.store.read_day(day)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc.args[0]),
        ) from exc


@router.get(
    "/status",
    response_model=PipelineStatus,
    summary="Report sampling and archiving progress.",
)
async def get_status(
    pipeline: ArchivePipeline = Depends(get_pipeline),
) -> PipelineStatus:
    snapshot = pipeline.snapshot()
    return PipelineStatus(
        sensor_state=snapshot.sensor_state.value,
        writer_state=snapshot.writer_state.value,
        queued=snapshot.queued,
        samples_taken=snapshot.samples_taken,
        samples_skipped=snapshot.samples_skipped,
        flushed_batches=snapshot.flushed_batches,
        flushed_readings=snapshot.flushed_readings,
        failed_flushes=snapshot.failed_flushes,
        dropped_readings=snapshot.dropped_readings,
        realtime=snapshot.realtime,
        latest=_to_reading_out(snapshot.latest) if snapshot.latest else None,
    )


@router.get(
    "/archive",
    response_model=List[date],
    summary="List the days that have an archive file.",
)
async def list_archive_days(
    pipeline: ArchivePipeline = Depends(get_pipeline),
) -> List[date]:
    return list(pipeline.store.list_days())


@router.get(
    "/archive/{year}/{month}/{day}",
    response_model=ArchiveDay,
    summary="Fetch every reading archived on a day.",
)
async def get_archive_day(
    year: int,
    month: int,
    day: int,
    pipeline: ArchivePipeline = Depends(get_pipeline),
) -> ArchiveDay:
    archive_day = _resolve_day(year, month, day)
    readings = _load_day(pipeline, archive_day)
    return ArchiveDay(day=archive_day, readings=[_to_reading_out(r) for r in readings])


@router.get(
    "/archive/{year}/{month}/{day}/summary",
    response_model=ArchiveSummary,
    summary="Compute min, max and mean temperature for a day.",
)
async def get_archive_summary(
    year: int,
    month: int,
    day: int,
    pipeline: ArchivePipeline = Depends(get_pipeline),
) -> ArchiveSummary:
    archive_day = _resolve_day(year, month, day)
    summary = Aggregator().aggregate(_load_day(pipeline, archive_day))
    return ArchiveSummary(
        day=archive_day,
        count=summary.count,
        min_temperature_f=summary.min_temperature_f,
        max_temperature_f=summary.max_temperature_f,
        mean_temperature_f=summary.mean_temperature_f,
        first_timestamp=summary.first_timestamp,
        last_timestamp=summary.last_timestamp,
    )


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
    return {"status": "ok", "detail": "See /status for pipeline progress."}

"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ReadingOut(BaseModel):
    """A single archived or live temperature reading."""

    timestamp: datetime
    temperature_f: float


class PipelineStatus(BaseModel):
    """Live state of the sampling and archiving threads."""

    sensor_state: str
    writer_state: str
    queued: int = Field(..., ge=0, description="Readings waiting for the next flush.")
    samples_taken: int = Field(..., ge=0)
    samples_skipped: int = Field(..., ge=0)
    flushed_batches: int = Field(..., ge=0)
    flushed_readings: int = Field(..., ge=0)
    failed_flushes: int = Field(..., ge=0)
    dropped_readings: int = Field(..., ge=0)
    realtime: bool
    latest: Optional[ReadingOut] = None


class ArchiveDay(BaseModel):
    """All readings archived on one calendar day."""

    day: date
    readings: List[ReadingOut] = Field(default_factory=list)


class ArchiveSummary(BaseModel):
    """Aggregate metrics for one archived day."""

    day: date
    count: int = Field(..., ge=0)
    min_temperature_f: Optional[float] = None
    max_temperature_f: Optional[float] = None
    mean_temperature_f: Optional[float] = None
    first_timestamp: Optional[datetime] = None
    last_timestamp: Optional[datetime] = None

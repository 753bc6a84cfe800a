"""Summary statistics for archived readings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from models.records import Reading


@dataclass
class ReadingSummary:
    """Computed statistics for a run of temperature readings."""

    count: int = 0
    min_temperature_f: float | None = None
    max_temperature_f: float | None = None
    mean_temperature_f: float | None = None
    first_timestamp: datetime | None = None
    last_timestamp: datetime | None = None


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, readings: Iterable[Reading]) -> ReadingSummary:
        summary = ReadingSummary()
        total = 0.0

        for reading in readings:
            summary.count += 1
            value = reading.temperature_f
            total += value

            if summary.min_temperature_f is None or value < summary.min_temperature_f:
                summary.min_temperature_f = value
            if summary.max_temperature_f is None or value > summary.max_temperature_f:
                summary.max_temperature_f = value

            if summary.first_timestamp is None or reading.timestamp < summary.first_timestamp:
                summary.first_timestamp = reading.timestamp
            if summary.last_timestamp is None or reading.timestamp > summary.last_timestamp:
                summary.last_timestamp = reading.timestamp

        if summary.count:
            summary.mean_temperature_f = total / summary.count

        return summary

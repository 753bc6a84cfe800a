"""Wiring for the two-stage sample-and-archive pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from models.records import Reading
from sensors.simulated import SimulatedSensor
from sensors.tmp102 import Tmp102Sensor
from services.archive_writer import ArchiveWriter, WriterState
from services.dispatcher import HttpDestination, ReadingDestination, RealtimeDispatcher
from services.sensor_loop import SensorLoop, SensorState, TemperatureSensor
from services.shared_queue import SharedQueue
from settings import Settings, get_settings
from storage.archive import ArchiveStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineSnapshot:
    sensor_state: SensorState
    writer_state: WriterState
    queued: int
    samples_taken: int
    samples_skipped: int
    flushed_batches: int
    flushed_readings: int
    failed_flushes: int
    dropped_readings: int
    realtime: bool
    latest: Optional[Reading]


class ArchivePipeline:
    """Owns the shared queue and the producer/consumer threads around it."""

    def __init__(
        self,
        sensor: TemperatureSensor,
        store: ArchiveStore,
        interval: float = 1.0,
        batch_size: int = 10,
        wait_timeout: float = 1.0,
        realtime: bool = False,
        destination: Optional[ReadingDestination] = None,
        realtime_workers: int = 2,
    ) -> None:
        self.queue = SharedQueue()
        self.store = store
        self.dispatcher = RealtimeDispatcher(workers=realtime_workers)
        self.destination = destination
        self.sensor_loop = SensorLoop(
            queue=self.queue,
            sensor=sensor,
            interval=interval,
            dispatcher=self.dispatcher,
            destination=destination,
            realtime=realtime,
        )
        self.writer = ArchiveWriter(
            queue=self.queue,
            store=store,
            batch_size=batch_size,
            wait_timeout=wait_timeout,
        )

    def start(self) -> None:
        logger.info(
            "Starting archive pipeline",
            extra={"batch_size": self.writer.batch_size, "archive_path": self.store.root_path},
        )
        self.writer.start()
        self.sensor_loop.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop sampling, drain the remaining readings, then release workers."""
        self.sensor_loop.stop(timeout)
        self.writer.stop(timeout)
        self.dispatcher.shutdown()
        close = getattr(self.destination, "close", None)
        if callable(close):
            close()

    def snapshot(self) -> PipelineSnapshot:
        return PipelineSnapshot(
            sensor_state=self.sensor_loop.state,
            writer_state=self.writer.state,
            queued=self.queue.size(),
            samples_taken=self.sensor_loop.samples_taken,
            samples_skipped=self.sensor_loop.samples_skipped,
            flushed_batches=self.writer.flushed_batches,
            flushed_readings=self.writer.flushed_readings,
            failed_flushes=self.writer.failed_flushes,
            dropped_readings=self.writer.dropped_readings,
            realtime=self.sensor_loop.realtime,
            latest=self.sensor_loop.last_reading,
        )


def build_sensor(settings: Settings) -> TemperatureSensor:
    if settings.sensor_source == "tmp102":
        return Tmp102Sensor(bus=settings.i2c_bus, address=settings.i2c_address)
    if settings.sensor_source != "simulated":
        raise ValueError(f"Unknown sensor source {settings.sensor_source!r}.")
    return SimulatedSensor()


def build_pipeline(
    settings: Settings,
    sensor: Optional[TemperatureSensor] = None,
    destination: Optional[ReadingDestination] = None,
) -> ArchivePipeline:
    if destination is None and settings.realtime_client_url:
        destination = HttpDestination(settings.realtime_client_url)
    return ArchivePipeline(
        sensor=sensor or build_sensor(settings),
        store=ArchiveStore(root_path=Path(settings.archive_root)),
        interval=settings.sample_interval,
        batch_size=settings.batch_size,
        wait_timeout=settings.wait_timeout,
        realtime=settings.realtime_enabled,
        destination=destination,
        realtime_workers=settings.realtime_workers,
    )


@lru_cache
def build_default_pipeline() -> ArchivePipeline:
    """Factory that wires the pipeline from environment settings."""
    return build_pipeline(get_settings())

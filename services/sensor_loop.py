"""Producer side of the archive pipeline."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from enum import Enum
from threading import Event, Lock, Thread
from typing import Callable, Optional, Protocol, Tuple

from models.records import Reading
from services.dispatcher import ReadingDestination, RealtimeDispatcher
from services.shared_queue import SharedQueue

logger = logging.getLogger(__name__)


class TemperatureSensor(Protocol):
    def read_temperature(self) -> Tuple[float, bool]:
        ...


class SensorState(str, Enum):
    idle = "idle"
    running = "running"
    stopping = "stopping"
    stopped = "stopped"


class SensorLoop:
    """Samples the sensor on a fixed interval and feeds the shared queue."""

    def __init__(
        self,
        queue: SharedQueue,
        sensor: TemperatureSensor,
        interval: float = 1.0,
        dispatcher: Optional[RealtimeDispatcher] = None,
        destination: Optional[ReadingDestination] = None,
        realtime: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.queue = queue
        self.sensor = sensor
        self.interval = interval
        self.dispatcher = dispatcher
        self.destination = destination
        self.realtime = realtime
        self._clock = clock
        self._stop_event = Event()
        self._state = SensorState.idle
        self._state_lock = Lock()
        self._thread: Optional[Thread] = None
        self._last_reading: Optional[Reading] = None
        self.samples_taken = 0
        self.samples_skipped = 0

    @property
    def state(self) -> SensorState:
        with self._state_lock:
            return self._state

    @property
    def last_reading(self) -> Optional[Reading]:
        with self._state_lock:
            return self._last_reading

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        if self.state is SensorState.stopped:
            raise RuntimeError("SensorLoop cannot be restarted once stopped.")
        self._stop_event.clear()
        self._set_state(SensorState.running)
        self._thread = Thread(target=self.run, name="sensor-loop", daemon=True)
        self._thread.start()

    def request_stop(self) -> None:
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread:
            self._thread.join(timeout)

    def stop(self, timeout: Optional[float] = None) -> None:
        self.request_stop()
        self.join(timeout)

    def run(self) -> None:
        self._set_state(SensorState.running)
        while not self._stop_event.is_set():
            self.sample_once()
            if self._stop_event.wait(self.interval):
                break

        self._set_state(SensorState.stopping)
        # Wake the writer so it can notice shutdown without waiting for data.
        self.queue.signal()
        self._set_state(SensorState.stopped)
        logger.info("Sensor loop stopped", extra={"state": SensorState.stopped.value})

    def sample_once(self) -> Optional[Reading]:
        """Take one sample and hand it to the queue (and the client, if enabled)."""
        try:
            value, ok = self.sensor.read_temperature()
        except Exception as exc:  # noqa: BLE001 - a bad read must not end the loop
            logger.warning("Sensor read raised; skipping sample", extra={"reason": str(exc)})
            value, ok = math.nan, False

        if not ok or math.isnan(value):
            self.samples_skipped += 1
            logger.warning("Sensor read failed; skipping sample", extra={"reason": "read failed"})
            return None

        reading = Reading(timestamp=self._clock(), temperature_f=value)
        self.queue.append(reading.serialize())
        self.samples_taken += 1
        with self._state_lock:
            self._last_reading = reading

        if self.realtime and self.dispatcher is not None and self.destination is not None:
            self.dispatcher.submit(reading, self.destination)
        return reading

    def _set_state(self, state: SensorState) -> None:
        with self._state_lock:
            self._state = state

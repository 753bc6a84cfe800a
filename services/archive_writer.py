"""Consumer side of the archive pipeline."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from threading import Event, Lock, Thread
from typing import Callable, Optional

from services.shared_queue import SharedQueue, WakeReason
from storage.archive import ArchiveStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10


class WriterState(str, Enum):
    idle = "idle"
    waiting = "waiting"
    flushing = "flushing"
    draining = "draining"
    stopped = "stopped"


class ArchiveWriter:
    """Waits on the shared queue and persists readings in batches.

    A batch is flushed whenever the queue holds at least ``batch_size`` lines.
    On stop, whatever is left is flushed regardless of size. A flush that
    fails is logged and its batch is dropped: delivery to the archive is
    at-most-once and failed batches are never re-queued.
    """

    def __init__(
        self,
        queue: SharedQueue,
        store: ArchiveStore,
        batch_size: int = DEFAULT_BATCH_SIZE,
        wait_timeout: float = 1.0,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1.")
        self.queue = queue
        self.store = store
        self.batch_size = batch_size
        self.wait_timeout = wait_timeout
        self._clock = clock
        self._stop_event = Event()
        self._state = WriterState.idle
        self._state_lock = Lock()
        self._thread: Optional[Thread] = None
        self.flushed_batches = 0
        self.flushed_readings = 0
        self.failed_flushes = 0
        self.dropped_readings = 0

    @property
    def state(self) -> WriterState:
        with self._state_lock:
            return self._state

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        if self.state is WriterState.stopped:
            raise RuntimeError("ArchiveWriter cannot be restarted once stopped.")
        self._stop_event.clear()
        self._set_state(WriterState.waiting)
        self._thread = Thread(target=self.run, name="archive-writer", daemon=True)
        self._thread.start()

    def request_stop(self) -> None:
        self._stop_event.set()
        self.queue.signal()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread:
            self._thread.join(timeout)

    def stop(self, timeout: Optional[float] = None) -> None:
        self.request_stop()
        self.join(timeout)

    def run(self) -> None:
        while not self._stop_event.is_set():
            self._set_state(WriterState.waiting)
            wake = self.queue.wait_for_signal(self.wait_timeout)
            if self._stop_event.is_set():
                break
            # Timeouts are checked too, so a missed signal only delays a flush.
            queued = self.queue.size()
            if queued >= self.batch_size:
                logger.debug(
                    "Batch threshold reached",
                    extra={"queued": queued, "wake": wake.value},
                )
                self._set_state(WriterState.flushing)
                self.flush()

        self._set_state(WriterState.draining)
        self.flush()
        self._set_state(WriterState.stopped)
        logger.info("Archive writer stopped", extra={"state": WriterState.stopped.value})

    def flush(self) -> int:
        """Drain the queue and append the batch to today's archive file.

        Returns the number of readings persisted.
        """
        batch = self.queue.drain_batch()
        if not batch:
            return 0

        when = self._clock()
        try:
            path = self.store.append_lines(batch, when)
        except OSError as exc:
            self.failed_flushes += 1
            self.dropped_readings += len(batch)
            logger.exception(
                "Archive flush failed; dropping batch",
                extra={"batch_size": len(batch), "reason": str(exc)},
            )
            return 0

        self.flushed_batches += 1
        self.flushed_readings += len(batch)
        logger.info(
            "Flushed readings to archive",
            extra={"batch_size": len(batch), "archive_path": path},
        )
        return len(batch)

    def _set_state(self, state: WriterState) -> None:
        with self._state_lock:
            self._state = state

"""Best-effort delivery of live readings to a connected client."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from threading import Lock
from typing import BinaryIO, Optional, Protocol

import httpx

from models.records import Reading

logger = logging.getLogger(__name__)


class ReadingDestination(Protocol):
    def deliver(self, reading: Reading) -> None:
        ...


class StreamDestination:
    """Writes each reading as a text line to a client's output stream."""

    def __init__(self, stream: BinaryIO, name: str = "stream") -> None:
        self.stream = stream
        self.name = name
        self._lock = Lock()

    def deliver(self, reading: Reading) -> None:
        payload = reading.serialize().encode("utf-8")
        with self._lock:
            self.stream.write(payload)
            self.stream.flush()

    def __repr__(self) -> str:
        return f"StreamDestination({self.name!r})"


class HttpDestination:
    """POSTs each reading as JSON to a client endpoint."""

    def __init__(
        self,
        url: str,
        client: Optional[httpx.Client] = None,
        timeout: float = 5.0,
    ) -> None:
        self.url = url
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def deliver(self, reading: Reading) -> None:
        response = self._client.post(
            self.url,
            json={
                "timestamp": reading.timestamp.isoformat(),
                "temperature_f": reading.temperature_f,
            },
        )
        response.raise_for_status()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __repr__(self) -> str:
        return f"HttpDestination({self.url!r})"


class RealtimeDispatcher:
    """Fire-and-forget delivery pool kept off the sampling thread.

    ``submit`` only queues work on the executor, so a stalled client never
    slows the producer. Failed deliveries are logged at debug level and
    dropped without retry.
    """

    def __init__(self, workers: int = 2) -> None:
        self.executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="realtime-dispatch"
        )

    def submit(self, reading: Reading, destination: ReadingDestination) -> Optional[Future[None]]:
        try:
            return self.executor.submit(self._deliver, reading, destination)
        except RuntimeError:
            # Executor already shut down; the reading is still archived.
            return None

    def shutdown(self, wait: bool = False) -> None:
        self.executor.shutdown(wait=wait, cancel_futures=True)

    @staticmethod
    def _deliver(reading: Reading, destination: ReadingDestination) -> None:
        try:
            destination.deliver(reading)
        except Exception as exc:  # noqa: BLE001 - delivery is best effort
            logger.debug(
                "Realtime delivery failed",
                extra={"destination": repr(destination), "reason": str(exc)},
            )

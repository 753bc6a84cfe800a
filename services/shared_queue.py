"""Thread-safe handoff between the sensor loop and the archive writer."""

from __future__ import annotations

from collections import deque
from enum import Enum
from threading import Condition, Lock
from typing import Deque, List, Optional


class WakeReason(str, Enum):
    """Why a call to ``SharedQueue.wait_for_signal`` returned."""

    signaled = "signaled"
    timed_out = "timed_out"


class SharedQueue:
    """Unbounded FIFO of serialized readings with a wait/notify protocol.

    Every operation goes through one internal lock, so ``drain_batch`` sees a
    consistent snapshot relative to concurrent ``append`` calls. Waiters are
    woken by a generation counter rather than by queue contents, which lets a
    caller tell a producer signal apart from a timeout.
    """

    def __init__(self) -> None:
        self._items: Deque[str] = deque()
        self._condition = Condition(Lock())
        self._generation = 0

    def append(self, line: str) -> None:
        with self._condition:
            self._items.append(line)
            self._notify_locked()

    def signal(self) -> None:
        """Wake waiters without adding anything to the queue."""
        with self._condition:
            self._notify_locked()

    def size(self) -> int:
        with self._condition:
            return len(self._items)

    def drain_batch(self) -> List[str]:
        with self._condition:
            batch = list(self._items)
            self._items.clear()
            return batch

    def wait_for_signal(self, timeout: Optional[float]) -> WakeReason:
        with self._condition:
            observed = self._generation
            signaled = self._condition.wait_for(
                lambda: self._generation != observed, timeout=timeout
            )
        return WakeReason.signaled if signaled else WakeReason.timed_out

    def _notify_locked(self) -> None:
        self._generation += 1
        self._condition.notify_all()

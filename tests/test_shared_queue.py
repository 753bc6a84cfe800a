from __future__ import annotations

import threading
import time

from services.shared_queue import SharedQueue, WakeReason


def test_drain_returns_lines_in_insertion_order_and_empties_queue() -> None:
    queue = SharedQueue()
    for index in range(5):
        queue.append(f"line-{index}\n")

    assert queue.size() == 5
    batch = queue.drain_batch()

    assert batch == [f"line-{index}\n" for index in range(5)]
    assert queue.size() == 0
    assert queue.drain_batch() == []


def test_wait_times_out_without_a_signal() -> None:
    queue = SharedQueue()

    start = time.perf_counter()
    reason = queue.wait_for_signal(0.05)

    assert reason is WakeReason.timed_out
    assert time.perf_counter() - start >= 0.04


def test_append_wakes_a_waiting_thread() -> None:
    queue = SharedQueue()
    results: list[WakeReason] = []
    waiting = threading.Event()

    def waiter() -> None:
        waiting.set()
        results.append(queue.wait_for_signal(5.0))

    thread = threading.Thread(target=waiter)
    thread.start()
    waiting.wait(1.0)
    # Keep signaling until the waiter has actually parked on the condition.
    deadline = time.monotonic() + 2.0
    while not results and time.monotonic() < deadline:
        queue.append("reading\n")
        time.sleep(0.01)
    thread.join(2.0)

    assert results == [WakeReason.signaled]


def test_signal_wakes_without_adding_items() -> None:
    queue = SharedQueue()
    results: list[WakeReason] = []

    def waiter() -> None:
        results.append(queue.wait_for_signal(5.0))

    thread = threading.Thread(target=waiter)
    thread.start()
    deadline = time.monotonic() + 2.0
    while not results and time.monotonic() < deadline:
        queue.signal()
        time.sleep(0.01)
    thread.join(2.0)

    assert results == [WakeReason.signaled]
    assert queue.size() == 0


def test_concurrent_append_and_drain_lose_nothing_and_keep_order() -> None:
    queue = SharedQueue()
    total = 2000
    drained: list[str] = []
    done = threading.Event()

    def producer() -> None:
        for index in range(total):
            queue.append(f"{index}\n")
        done.set()

    def consumer() -> None:
        while not done.is_set() or queue.size():
            drained.extend(queue.drain_batch())

    threads = [threading.Thread(target=producer), threading.Thread(target=consumer)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(10.0)

    assert drained == [f"{index}\n" for index in range(total)]

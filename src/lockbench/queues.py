"""
Task queues used by the queue-based containers.

SerialQueue runs submitted work on a single worker thread; callers block until
their work has run. ConcurrentQueue runs work on several worker threads and
offers barrier submissions that run alone.
"""

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from .locks import ReadWriteLock

R = TypeVar("R")


class SerialQueue:
    """Single-worker exclusive task queue."""

    def __init__(self, label: str = "lockbench.serial"):
        self.label = label
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=label)

    def sync(self, work: Callable[[], R]) -> R:
        """Submit ``work`` and block until it has run, returning its result."""
        return self._executor.submit(work).result()

    def close(self) -> None:
        self._executor.shutdown(wait=True)


class ConcurrentQueue:
    """
    Multi-worker task queue with barrier submissions.

    ``sync`` work may run alongside other ``sync`` work. ``sync_barrier`` work
    waits until everything in flight has finished, runs on its own, and then
    lets concurrent work resume.
    """

    def __init__(self, label: str = "lockbench.concurrent", max_workers: int = 4):
        self.label = label
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=label)
        self._gate = ReadWriteLock()

    def sync(self, work: Callable[[], R]) -> R:
        return self._executor.submit(self._run_shared, work).result()

    def sync_barrier(self, work: Callable[[], R]) -> R:
        return self._executor.submit(self._run_exclusive, work).result()

    def _run_shared(self, work: Callable[[], R]) -> R:
        with self._gate.read_locked():
            return work()

    def _run_exclusive(self, work: Callable[[], R]) -> R:
        with self._gate.write_locked():
            return work()

    def close(self) -> None:
        self._executor.shutdown(wait=True)

"""
Synchronized counter containers.

Every container keeps a growable list of ints and exposes the same blocking
operations: ``write`` appends, ``read`` returns the last written value (0 when
empty), ``reset`` clears. The ``*_with_simulated_work`` variants perform a
fixed amount of CPU work while holding the container's primitive, so the
critical section is expensive instead of trivial.

Containers differ only in how they synchronize access. The cooperative
scheduling variant lives in ``actor.py`` because its operations suspend
instead of block.
"""

from abc import ABC, abstractmethod
from enum import Enum

from .config import SIMULATED_WORK_ITERATIONS
from .locks import AllocatedUnfairLock, FairLock, UnfairLock
from .queues import ConcurrentQueue, SerialQueue


def simulate_work(iterations: int = SIMULATED_WORK_ITERATIONS) -> int:
    """Deterministic CPU-bound work performed inside critical sections."""
    result = 0
    for i in range(iterations):
        result += i * i
    return result


def last_or_zero(values: list[int]) -> int:
    """Last written value, or 0 when nothing has been written."""
    return values[-1] if values else 0


def last_or_zero_with_work(values: list[int]) -> int:
    simulate_work()
    return last_or_zero(values)


class ContainerCategory(Enum):
    """Category tag used to group results."""

    LOCK = "Locks"
    QUEUE_BASED = "Queues"
    COOPERATIVE_SCHEDULING = "Cooperative Scheduling"


class SynchronizedCounter(ABC):
    """Blocking read/write capability shared by all lock and queue containers."""

    @abstractmethod
    def write(self, value: int) -> None:
        pass

    @abstractmethod
    def read(self) -> int:
        pass

    @abstractmethod
    def write_with_simulated_work(self, value: int) -> None:
        pass

    @abstractmethod
    def read_with_simulated_work(self) -> int:
        pass

    @abstractmethod
    def reset(self) -> None:
        pass

    def close(self) -> None:
        """Release worker threads owned by the container, if any."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class FairLockContainer(SynchronizedCounter):
    """Container guarded by a FIFO ticket lock."""

    def __init__(self):
        self._values: list[int] = []
        self._lock = FairLock()

    def write(self, value: int) -> None:
        with self._lock:
            self._values.append(value)

    def read(self) -> int:
        with self._lock:
            return last_or_zero(self._values)

    def write_with_simulated_work(self, value: int) -> None:
        with self._lock:
            simulate_work()
            self._values.append(value)

    def read_with_simulated_work(self) -> int:
        with self._lock:
            return last_or_zero_with_work(self._values)

    def reset(self) -> None:
        with self._lock:
            self._values.clear()


class UnfairLockContainer(SynchronizedCounter):
    """
    Container guarded by an explicitly acquired UnfairLock.

    The lock is allocated once per container. Copying the container would
    give the copy a second reference to the same lock with its own list, so
    copying is refused.
    """

    def __init__(self, spin_count: int = 64):
        self._values: list[int] = []
        self._lock = UnfairLock(spin_count)

    def write(self, value: int) -> None:
        self._lock.acquire()
        try:
            self._values.append(value)
        finally:
            self._lock.release()

    def read(self) -> int:
        self._lock.acquire()
        try:
            return last_or_zero(self._values)
        finally:
            self._lock.release()

    def write_with_simulated_work(self, value: int) -> None:
        self._lock.acquire()
        try:
            simulate_work()
            self._values.append(value)
        finally:
            self._lock.release()

    def read_with_simulated_work(self) -> int:
        self._lock.acquire()
        try:
            return last_or_zero_with_work(self._values)
        finally:
            self._lock.release()

    def reset(self) -> None:
        self._lock.acquire()
        try:
            self._values.clear()
        finally:
            self._lock.release()

    def __copy__(self):
        raise TypeError("UnfairLockContainer cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("UnfairLockContainer cannot be copied")


class AllocatedUnfairLockContainer(SynchronizedCounter):
    """Container whose state is owned by an AllocatedUnfairLock."""

    def __init__(self, spin_count: int = 64):
        self._lock: AllocatedUnfairLock[list[int]] = AllocatedUnfairLock([], spin_count)

    def write(self, value: int) -> None:
        self._lock.with_lock(lambda values: values.append(value))

    def read(self) -> int:
        return self._lock.with_lock(last_or_zero)

    def write_with_simulated_work(self, value: int) -> None:
        def body(values: list[int]) -> None:
            simulate_work()
            values.append(value)

        self._lock.with_lock(body)

    def read_with_simulated_work(self) -> int:
        return self._lock.with_lock(last_or_zero_with_work)

    def reset(self) -> None:
        self._lock.with_lock(lambda values: values.clear())


class SerialQueueContainer(SynchronizedCounter):
    """Container whose every operation runs on a single worker thread."""

    def __init__(self):
        self._values: list[int] = []
        self._queue = SerialQueue("lockbench.container.queue")

    def write(self, value: int) -> None:
        self._queue.sync(lambda: self._values.append(value))

    def read(self) -> int:
        return self._queue.sync(lambda: last_or_zero(self._values))

    def write_with_simulated_work(self, value: int) -> None:
        def body() -> None:
            simulate_work()
            self._values.append(value)

        self._queue.sync(body)

    def read_with_simulated_work(self) -> int:
        return self._queue.sync(lambda: last_or_zero_with_work(self._values))

    def reset(self) -> None:
        self._queue.sync(self._values.clear)

    def close(self) -> None:
        self._queue.close()


class ReaderWriterQueueContainer(SynchronizedCounter):
    """Container on a concurrent queue: reads run together, writes run as barriers."""

    def __init__(self, max_workers: int = 4):
        self._values: list[int] = []
        self._queue = ConcurrentQueue("lockbench.container.rwqueue", max_workers=max_workers)

    def write(self, value: int) -> None:
        self._queue.sync_barrier(lambda: self._values.append(value))

    def read(self) -> int:
        return self._queue.sync(lambda: last_or_zero(self._values))

    def write_with_simulated_work(self, value: int) -> None:
        def body() -> None:
            simulate_work()
            self._values.append(value)

        self._queue.sync_barrier(body)

    def read_with_simulated_work(self) -> int:
        return self._queue.sync(lambda: last_or_zero_with_work(self._values))

    def reset(self) -> None:
        self._queue.sync_barrier(self._values.clear)

    def close(self) -> None:
        self._queue.close()

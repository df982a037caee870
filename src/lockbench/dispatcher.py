"""
Operation dispatch for benchmark workloads.

Whether operation ``i`` is a write depends only on ``i`` and the scenario's
write ratio: ``(i % 10) < floor(write_ratio * 10)``. The pattern repeats every
ten operations, so every container sees exactly the same sequence of reads
and writes for a given scenario and count.

Lock and queue containers are driven through ``perform`` (blocking); the
actor is driven through ``perform_async`` (suspending).
"""

import math
import threading

from .actor import CounterActor
from .containers import SynchronizedCounter
from .scenarios import WorkloadScenario


def write_slots(write_ratio: float) -> int:
    """Number of writes in each block of ten operations."""
    return math.floor(write_ratio * 10)


def is_write_operation(index: int, write_ratio: float) -> bool:
    return (index % 10) < write_slots(write_ratio)


class AtomicCounter:
    """Thread-safe monotonically increasing counter."""

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = 0


class OperationDispatcher:
    """
    Applies a scenario's read/write pattern to containers.

    Args:
        scenario: Workload policy supplying the write ratio and work shape
        count_operations: Count every dispatched operation in
            ``dispatched_count``. Off by default so the counter's own lock
            does not show up in measurements.
    """

    def __init__(self, scenario: WorkloadScenario, count_operations: bool = False):
        self.scenario = scenario
        self._write_slots = write_slots(scenario.write_ratio)
        self._heavy = scenario.uses_simulated_heavy_work
        self._counter = AtomicCounter() if count_operations else None

    @property
    def dispatched_count(self) -> int | None:
        """Operations dispatched so far, or None when counting is disabled."""
        return self._counter.value if self._counter is not None else None

    def is_write(self, index: int) -> bool:
        return (index % 10) < self._write_slots

    def decision_sequence(self, count: int) -> list[bool]:
        """Read/write decisions for indices ``0..count-1``; True means write."""
        return [self.is_write(i) for i in range(count)]

    def write_indices(self, count: int) -> list[int]:
        """Indices in ``0..count-1`` that are dispatched as writes."""
        return [i for i in range(count) if self.is_write(i)]

    def perform(self, container: SynchronizedCounter, index: int) -> None:
        if self._counter is not None:
            self._counter.increment()

        if self._heavy:
            if self.is_write(index):
                container.write_with_simulated_work(index)
            else:
                container.read_with_simulated_work()
        else:
            if self.is_write(index):
                container.write(index)
            else:
                container.read()

    async def perform_async(self, actor: CounterActor, index: int) -> None:
        if self._counter is not None:
            self._counter.increment()

        if self._heavy:
            if self.is_write(index):
                await actor.write_with_simulated_work(index)
            else:
                await actor.read_with_simulated_work()
        else:
            if self.is_write(index):
                await actor.write(index)
            else:
                await actor.read()

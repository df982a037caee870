"""
Measurement engine.

Times one container through one scenario for a given operation count, either
sequentially from a single thread of control or fanned out concurrently:

- Lock and queue containers fan out over a thread pool, one submission per
  operation, joined by a CompletionLatch.
- The actor fans out as one asyncio task per operation, joined by
  ``asyncio.gather``; no thread is blocked waiting for it.

Measurements are wall-clock (``time.perf_counter``) and are neither retried
nor cancellable.
"""

import asyncio
import statistics
import threading
import time
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

import structlog

from .actor import CounterActor
from .config import DEFAULT_CONFIG, HarnessConfig
from .containers import SynchronizedCounter
from .dispatcher import OperationDispatcher
from .scenarios import WorkloadScenario

logger = structlog.get_logger(__name__)


def median_of_trials(durations: Sequence[float]) -> float:
    """Representative duration of repeated trials (the median, not the mean)."""
    if not durations:
        raise ValueError("median_of_trials requires at least one duration")
    return statistics.median(durations)


class CompletionLatch:
    """
    Count-down barrier.

    ``wait`` returns once ``count_down`` has been called ``count`` times.
    """

    def __init__(self, count: int):
        if count < 0:
            raise ValueError("count must be >= 0")
        self._remaining = count
        self._condition = threading.Condition()

    @property
    def remaining(self) -> int:
        with self._condition:
            return self._remaining

    def count_down(self) -> None:
        with self._condition:
            if self._remaining > 0:
                self._remaining -= 1
                if self._remaining == 0:
                    self._condition.notify_all()

    def wait(self, timeout: float | None = None) -> bool:
        with self._condition:
            return self._condition.wait_for(lambda: self._remaining == 0, timeout)


class MeasurementEngine:
    """Runs containers through scenarios and returns elapsed seconds."""

    def __init__(self, config: HarnessConfig | None = None):
        self.config = config or DEFAULT_CONFIG

    # Warm-up

    def warmup(self, containers: Iterable[SynchronizedCounter]) -> None:
        """Trivial write+read cycles so first-call costs are not measured."""
        for container in containers:
            for i in range(self.config.warmup_iterations):
                container.write(i)
                container.read()

    async def warmup_actor(self, actor: CounterActor | None = None) -> None:
        """Warm up the actor path; a throwaway actor is used when none is given."""
        owned = actor is None
        target = actor if actor is not None else CounterActor()
        try:
            for i in range(self.config.warmup_iterations):
                await target.write(i)
                await target.read()
        finally:
            if owned:
                await target.aclose()

    # Sequential

    def measure_serial(
        self, container: SynchronizedCounter, dispatcher: OperationDispatcher, total_ops: int
    ) -> float:
        perform = dispatcher.perform
        start = time.perf_counter()
        for i in range(total_ops):
            perform(container, i)
        return time.perf_counter() - start

    async def measure_serial_actor(
        self, actor: CounterActor, dispatcher: OperationDispatcher, total_ops: int
    ) -> float:
        perform = dispatcher.perform_async
        start = time.perf_counter()
        for i in range(total_ops):
            await perform(actor, i)
        return time.perf_counter() - start

    # Concurrent fan-out

    def measure_concurrent(
        self, container: SynchronizedCounter, dispatcher: OperationDispatcher, total_ops: int
    ) -> float:
        """
        Fan ``total_ops`` operations out over a thread pool.

        The timer starts before the first submission and stops when the last
        operation has completed. The first exception raised by any operation
        is re-raised after the join.
        """
        latch = CompletionLatch(total_ops)
        errors: list[Exception] = []

        def run(index: int) -> None:
            try:
                dispatcher.perform(container, index)
            except Exception as exc:
                errors.append(exc)
            finally:
                latch.count_down()

        with ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="lockbench-fanout"
        ) as executor:
            start = time.perf_counter()
            for i in range(total_ops):
                executor.submit(run, i)
            latch.wait()
            elapsed = time.perf_counter() - start

        if errors:
            raise errors[0]
        return elapsed

    async def measure_concurrent_actor(
        self, actor: CounterActor, dispatcher: OperationDispatcher, total_ops: int
    ) -> float:
        perform = dispatcher.perform_async
        start = time.perf_counter()
        await asyncio.gather(*(perform(actor, i) for i in range(total_ops)))
        return time.perf_counter() - start

    # Entry point

    async def measure(
        self,
        container: SynchronizedCounter | CounterActor,
        scenario: WorkloadScenario,
        total_ops: int,
        dispatcher: OperationDispatcher | None = None,
    ) -> float:
        """
        Reset ``container`` and time one run of ``scenario``.

        Blocking runs are moved off the event loop with ``asyncio.to_thread``.
        """
        dispatcher = dispatcher or OperationDispatcher(scenario)
        sequential = scenario.is_sequential_only

        if isinstance(container, CounterActor):
            await container.reset()
            if sequential:
                elapsed = await self.measure_serial_actor(container, dispatcher, total_ops)
            else:
                elapsed = await self.measure_concurrent_actor(container, dispatcher, total_ops)
        else:
            await asyncio.to_thread(container.reset)
            measure = self.measure_serial if sequential else self.measure_concurrent
            elapsed = await asyncio.to_thread(measure, container, dispatcher, total_ops)

        logger.debug(
            "Measurement complete",
            container=type(container).__name__,
            scenario=scenario.name,
            operations=total_ops,
            sequential=sequential,
            elapsed_ms=round(elapsed * 1000, 3),
        )
        return elapsed

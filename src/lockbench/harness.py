"""
Benchmark harness.

Coordinates a run: builds the container variants for a scenario, warms them
up, measures every variant (median of three trials, or once per tier for the
scaling sweep) and reports progress as it goes. The battery runs several
scenarios one after another at a common operation count.

The coordinating flow is sequential; only the fan-out inside a single
measurement is parallel, so the result accumulators need no locking.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

import structlog

from .actor import CounterActor
from .config import DEFAULT_CONFIG, HarnessConfig
from .containers import (
    AllocatedUnfairLockContainer,
    ContainerCategory,
    FairLockContainer,
    ReaderWriterQueueContainer,
    SerialQueueContainer,
    SynchronizedCounter,
    UnfairLockContainer,
)
from .exceptions import InvalidOperationCountError
from .measurement import MeasurementEngine, median_of_trials
from .results import MeasurementResult, format_tier
from .scenarios import BATTERY_SCENARIOS, WorkloadScenario

logger = structlog.get_logger(__name__)

ACTOR_NAME = "Actor"


@dataclass(frozen=True)
class ProgressUpdate:
    """Status line plus (step, total) for a progress indicator."""

    status: str
    step: int
    total: int

    @property
    def fraction(self) -> float:
        return self.step / self.total if self.total else 1.0


ProgressCallback = Callable[[ProgressUpdate], None]


@dataclass
class ContainerVariant:
    name: str
    container: SynchronizedCounter
    category: ContainerCategory


RunRecord = dict[WorkloadScenario, list[MeasurementResult]]

ContainerFactory = Callable[[HarnessConfig], SynchronizedCounter]

LOCK_VARIANTS: tuple[tuple[str, ContainerCategory, ContainerFactory], ...] = (
    ("Fair Lock", ContainerCategory.LOCK, lambda config: FairLockContainer()),
    (
        "Unfair Lock",
        ContainerCategory.LOCK,
        lambda config: UnfairLockContainer(config.unfair_lock_spin_count),
    ),
    (
        "Allocated Unfair Lock",
        ContainerCategory.LOCK,
        lambda config: AllocatedUnfairLockContainer(config.unfair_lock_spin_count),
    ),
)

# Queue-based variants only run in sequential-only scenarios
QUEUE_VARIANTS: tuple[tuple[str, ContainerCategory, ContainerFactory], ...] = (
    ("Serial Queue", ContainerCategory.QUEUE_BASED, lambda config: SerialQueueContainer()),
    (
        "RW Queue",
        ContainerCategory.QUEUE_BASED,
        lambda config: ReaderWriterQueueContainer(config.rw_queue_workers),
    ),
)


def _variant_table(scenario: WorkloadScenario):
    if scenario.is_sequential_only:
        return LOCK_VARIANTS + QUEUE_VARIANTS
    return LOCK_VARIANTS


class BenchmarkHarness:
    """
    Runs scenarios against every container variant.

    Args:
        config: Harness configuration (validated on construction)
        progress_callback: Called with a ProgressUpdate before each trial, at
            warm-up (step 0) and once more when the run completes
    """

    def __init__(
        self,
        config: HarnessConfig | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.config.validate()
        self.engine = MeasurementEngine(self.config)
        self._progress_callback = progress_callback

    # Variants

    def build_containers(self, scenario: WorkloadScenario) -> list[ContainerVariant]:
        """
        Fresh lock-based variants, plus the queue-based variants when the
        scenario is sequential only.
        """
        return [
            ContainerVariant(name, factory(self.config), category)
            for name, category, factory in _variant_table(scenario)
        ]

    @staticmethod
    def variant_count(scenario: WorkloadScenario) -> int:
        """Number of variants measured for ``scenario``, actor included."""
        return len(_variant_table(scenario)) + 1

    @staticmethod
    def close_containers(variants: Sequence[ContainerVariant]) -> None:
        """Release the worker threads owned by queue-based variants."""
        for variant in variants:
            variant.container.close()

    # Progress math

    def measurement_steps(self, scenario: WorkloadScenario) -> int:
        per_variant = (
            len(self.config.scaling_tiers)
            if scenario.is_scaling_sweep
            else self.config.trials_per_measurement
        )
        return self.variant_count(scenario) * per_variant

    def total_steps(self, scenario: WorkloadScenario) -> int:
        """Measurement steps plus one warm-up step."""
        return self.measurement_steps(scenario) + 1

    def battery_total_steps(self, scenarios: Sequence[WorkloadScenario] = BATTERY_SCENARIOS) -> int:
        return 1 + sum(
            self.variant_count(scenario) * self.config.trials_per_measurement
            for scenario in scenarios
        )

    def _report(self, status: str, step: int, total: int) -> None:
        if self._progress_callback is not None:
            self._progress_callback(ProgressUpdate(status, step, total))

    # Validation

    def validate_operation_count(self, operation_count: int) -> int:
        """
        Raises:
            InvalidOperationCountError: If the count is outside the configured range
        """
        low, high = self.config.min_operation_count, self.config.max_operation_count
        if not (low <= operation_count <= high):
            raise InvalidOperationCountError(
                f"Operation count {operation_count} outside allowed range {low}..{high}",
                operation_count,
            )
        return operation_count

    # Runs

    async def warmup(self, variants: Sequence[ContainerVariant]) -> None:
        self.engine.warmup(variant.container for variant in variants)
        await self.engine.warmup_actor()

    async def run_scenario(
        self, scenario: WorkloadScenario, operation_count: int | None = None
    ) -> list[MeasurementResult]:
        """
        Measure every variant against one scenario.

        ``operation_count`` defaults to the configured default and is ignored
        by fixed-count scenarios and the scaling sweep.

        Raises:
            InvalidOperationCountError: If a count that would be used lies
                outside the configured range
        """
        if (
            operation_count is not None
            and scenario.fixed_operation_count is None
            and not scenario.is_scaling_sweep
        ):
            self.validate_operation_count(operation_count)

        requested = (
            operation_count if operation_count is not None else self.config.default_operation_count
        )
        total_ops = scenario.resolve_operation_count(requested)
        total = self.total_steps(scenario)

        logger.info(
            "Starting benchmark scenario",
            scenario=scenario.name,
            operations=total_ops,
            scaling=scenario.is_scaling_sweep,
            total_steps=total,
        )

        variants = self.build_containers(scenario)
        try:
            self._report("Warming up...", 0, total)
            await self.warmup(variants)

            if scenario.is_scaling_sweep:
                results = await self._run_scaling(scenario, variants, total)
            else:
                results, _ = await self._run_trials(scenario, variants, total_ops, 1, total)
        finally:
            self.close_containers(variants)

        self._report("Complete", total, total)
        logger.info("Benchmark scenario complete", scenario=scenario.name, results=len(results))
        return results

    async def run_battery(
        self,
        scenarios: Sequence[WorkloadScenario] = BATTERY_SCENARIOS,
        operation_count: int | None = None,
    ) -> RunRecord:
        """
        Run several scenarios back to back at one operation count.

        The battery count overrides each scenario's fixed count. Scenarios run
        sequentially and their results are kept separate.

        Raises:
            InvalidOperationCountError: If ``operation_count`` lies outside the
                configured range
        """
        if operation_count is not None:
            self.validate_operation_count(operation_count)

        total_ops = (
            operation_count if operation_count is not None else self.config.battery_operation_count
        )
        scenarios = [scenario for scenario in scenarios if not scenario.is_scaling_sweep]
        total = self.battery_total_steps(scenarios)

        logger.info(
            "Starting benchmark battery",
            scenarios=[scenario.name for scenario in scenarios],
            operations=total_ops,
            total_steps=total,
        )

        self._report("Warming up...", 0, total)
        warmup_variants = self.build_containers(WorkloadScenario.SEQUENTIAL)
        try:
            await self.warmup(warmup_variants)
        finally:
            self.close_containers(warmup_variants)

        record: RunRecord = {}
        step = 1
        for scenario in scenarios:
            variants = self.build_containers(scenario)
            try:
                results, step = await self._run_trials(
                    scenario, variants, total_ops, step, total, prefix=f"[{scenario.label}] "
                )
            finally:
                self.close_containers(variants)
            record[scenario] = results

        self._report("Complete", total, total)
        logger.info("Benchmark battery complete", scenarios=len(record))
        return record

    async def _run_trials(
        self,
        scenario: WorkloadScenario,
        variants: Sequence[ContainerVariant],
        total_ops: int,
        step: int,
        total: int,
        prefix: str = "",
    ) -> tuple[list[MeasurementResult], int]:
        trials = self.config.trials_per_measurement
        results: list[MeasurementResult] = []

        for variant in variants:
            times = []
            for trial in range(1, trials + 1):
                self._report(f"{prefix}{variant.name} ({trial}/{trials})", step, total)
                times.append(await self.engine.measure(variant.container, scenario, total_ops))
                step += 1
            results.append(
                MeasurementResult(
                    name=variant.name,
                    elapsed_seconds=median_of_trials(times),
                    operation_count=total_ops,
                    category=variant.category,
                )
            )

        async with CounterActor() as actor:
            times = []
            for trial in range(1, trials + 1):
                self._report(f"{prefix}{ACTOR_NAME} ({trial}/{trials})", step, total)
                times.append(await self.engine.measure(actor, scenario, total_ops))
                step += 1
        results.append(
            MeasurementResult(
                name=ACTOR_NAME,
                elapsed_seconds=median_of_trials(times),
                operation_count=total_ops,
                category=ContainerCategory.COOPERATIVE_SCHEDULING,
            )
        )

        for result in results:
            logger.debug(
                "Scenario result",
                scenario=scenario.name,
                name=result.name,
                duration=result.formatted_duration,
                throughput=result.formatted_throughput,
            )
        return results, step

    async def _run_scaling(
        self, scenario: WorkloadScenario, variants: Sequence[ContainerVariant], total: int
    ) -> list[MeasurementResult]:
        results: list[MeasurementResult] = []
        step = 1

        for ops in self.config.scaling_tiers:
            label = format_tier(ops)

            for variant in variants:
                self._report(f"{variant.name} @ {label}", step, total)
                elapsed = await self.engine.measure(variant.container, scenario, ops)
                results.append(
                    MeasurementResult(
                        name=f"{variant.name} ({label})",
                        elapsed_seconds=elapsed,
                        operation_count=ops,
                        category=variant.category,
                        variant=variant.name,
                        tier=ops,
                    )
                )
                step += 1

            async with CounterActor() as actor:
                self._report(f"{ACTOR_NAME} @ {label}", step, total)
                elapsed = await self.engine.measure(actor, scenario, ops)
            results.append(
                MeasurementResult(
                    name=f"{ACTOR_NAME} ({label})",
                    elapsed_seconds=elapsed,
                    operation_count=ops,
                    category=ContainerCategory.COOPERATIVE_SCHEDULING,
                    variant=ACTOR_NAME,
                    tier=ops,
                )
            )
            step += 1

        return results

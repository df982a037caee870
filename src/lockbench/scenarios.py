"""
Workload scenarios driving the benchmark.

Each scenario is a fixed, immutable policy: the read/write mix, whether the
critical section carries synthetic CPU work, and how the run is shaped
(sequential only, scaling sweep, fixed operation count).
"""

from enum import Enum


class WorkloadScenario(Enum):
    """
    Fixed workload policies.

    Member values are the human-readable labels used in reports.
    """

    BALANCED = "Balanced (50/50)"
    READ_HEAVY = "Read Heavy (90% reads)"
    WRITE_HEAVY = "Write Heavy (90% writes)"
    HEAVY_WORK = "Heavy Work Inside Lock"
    LOW_VOLUME = "Low Volume (100 ops)"
    SEQUENTIAL = "Sequential (No Concurrency)"
    SCALING = "Scaling Test"

    @property
    def label(self) -> str:
        return self.value

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def write_ratio(self) -> float:
        """Fraction of operations that are writes."""
        if self is WorkloadScenario.READ_HEAVY:
            return 0.1
        if self is WorkloadScenario.WRITE_HEAVY:
            return 0.9
        return 0.5

    @property
    def fixed_operation_count(self) -> int | None:
        """Operation count that overrides the configured one, if any."""
        if self is WorkloadScenario.LOW_VOLUME:
            return 100
        if self is WorkloadScenario.SEQUENTIAL:
            return 1000
        return None

    @property
    def uses_simulated_heavy_work(self) -> bool:
        return self is WorkloadScenario.HEAVY_WORK

    @property
    def is_sequential_only(self) -> bool:
        return self is WorkloadScenario.SEQUENTIAL

    @property
    def is_scaling_sweep(self) -> bool:
        return self is WorkloadScenario.SCALING

    def resolve_operation_count(self, requested: int) -> int:
        """Return the fixed count for this scenario, or ``requested`` if it has none."""
        fixed = self.fixed_operation_count
        return fixed if fixed is not None else requested

    @classmethod
    def from_name(cls, name: str) -> "WorkloadScenario":
        """
        Look up a scenario by member name, case-insensitively.

        Accepts ``read-heavy`` as well as ``READ_HEAVY``.

        Raises:
            KeyError: If no scenario matches
        """
        key = name.strip().upper().replace("-", "_")
        try:
            return cls[key]
        except KeyError:
            raise KeyError(f"Unknown scenario: {name!r}") from None


_DESCRIPTIONS = {
    WorkloadScenario.BALANCED: "Equal mix of reads and writes with full concurrency.",
    WorkloadScenario.READ_HEAVY: "90% reads, 10% writes. Simulates caches and config lookups.",
    WorkloadScenario.WRITE_HEAVY: "90% writes, 10% reads. Simulates logging and metrics.",
    WorkloadScenario.HEAVY_WORK: (
        "CPU-bound work inside critical section. Tests lock hold time impact."
    ),
    WorkloadScenario.LOW_VOLUME: "Only 100 operations. Shows overhead with minimal work.",
    WorkloadScenario.SEQUENTIAL: "Sequential execution. Shows raw synchronization overhead.",
    WorkloadScenario.SCALING: "Tests at 100, 1K, 10K, 50K ops to show scaling behavior.",
}

# Scenarios measured by the full battery, in run order
BATTERY_SCENARIOS: tuple[WorkloadScenario, ...] = (
    WorkloadScenario.BALANCED,
    WorkloadScenario.READ_HEAVY,
    WorkloadScenario.WRITE_HEAVY,
    WorkloadScenario.HEAVY_WORK,
    WorkloadScenario.SEQUENTIAL,
)

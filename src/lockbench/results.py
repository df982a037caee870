"""
Benchmark results and reporting.

MeasurementResult is the immutable record produced per container (and per
tier in a scaling sweep). ResultsReporter ranks results within one scenario,
states how much faster the fastest variant is than the slowest, formats
throughput, and keeps battery results separated by scenario: timings from
different scenarios are never compared with each other.
"""

import math
import time
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, computed_field

from .containers import ContainerCategory
from .scenarios import WorkloadScenario


def format_duration(seconds: float) -> str:
    return f"{seconds * 1000:.2f} ms"


def format_throughput(operations_per_second: float | None) -> str:
    """Human-readable throughput: plain, K or M ops/s."""
    if operations_per_second is None:
        return "—"
    if operations_per_second > 1_000_000:
        return f"{operations_per_second / 1_000_000:.1f}M ops/s"
    if operations_per_second > 1_000:
        return f"{operations_per_second / 1_000:.1f}K ops/s"
    return f"{operations_per_second:.0f} ops/s"


def format_tier(operation_count: int) -> str:
    """Short tier label: ``100``, ``1K``, ``50K``."""
    return f"{operation_count // 1000}K" if operation_count >= 1000 else str(operation_count)


class MeasurementResult(BaseModel):
    """Representative timing of one container for one scenario (or tier)."""

    model_config = ConfigDict(frozen=True)

    name: str
    elapsed_seconds: float = Field(ge=0)
    operation_count: int = Field(ge=0)
    category: ContainerCategory
    variant: str | None = None
    tier: int | None = None

    @property
    def variant_name(self) -> str:
        """Container name without any tier suffix."""
        return self.variant or self.name

    @computed_field
    @property
    def formatted_duration(self) -> str:
        return format_duration(self.elapsed_seconds)

    @computed_field
    @property
    def operations_per_second(self) -> float | None:
        if self.elapsed_seconds <= 0:
            return None
        return self.operation_count / self.elapsed_seconds

    @computed_field
    @property
    def formatted_throughput(self) -> str:
        return format_throughput(self.operations_per_second)


class ScenarioSummary(BaseModel):
    """Fastest/slowest comparison within a single scenario."""

    model_config = ConfigDict(frozen=True)

    fastest: str
    slowest: str
    speed_factor: float

    @computed_field
    @property
    def statement(self) -> str:
        return f"{self.fastest} is {self.speed_factor:.1f}x faster than {self.slowest}"


class ScalingSeries(BaseModel):
    """Elapsed time per tier for one container in a scaling sweep."""

    variant: str
    category: ContainerCategory
    tiers: list[int]
    elapsed_seconds: list[float]
    exponent: float | None = None


class ScenarioReport(BaseModel):
    scenario: str
    label: str
    results: list[MeasurementResult]
    summary: ScenarioSummary | None = None
    scaling: list[ScalingSeries] = Field(default_factory=list)


class BenchmarkReport(BaseModel):
    """Serializable record of one run (single scenario or full battery)."""

    generated_at: float = Field(default_factory=time.time)
    config: dict = Field(default_factory=dict)
    scenarios: list[ScenarioReport]


class ResultsReporter:
    """Ranks and summarizes measurement results."""

    @staticmethod
    def sort_results(results: Iterable[MeasurementResult]) -> list[MeasurementResult]:
        """Results in ascending elapsed time (fastest first)."""
        return sorted(results, key=lambda result: result.elapsed_seconds)

    def summarize(self, results: Sequence[MeasurementResult]) -> ScenarioSummary | None:
        """
        Compare the fastest and slowest result of one scenario.

        Returns:
            None if there are no results, or if the fastest and slowest are
            the same container
        """
        ranked = self.sort_results(results)
        if not ranked:
            return None

        fastest, slowest = ranked[0], ranked[-1]
        if fastest.name == slowest.name:
            return None

        if fastest.elapsed_seconds > 0:
            factor = slowest.elapsed_seconds / fastest.elapsed_seconds
        else:
            factor = math.inf
        return ScenarioSummary(fastest=fastest.name, slowest=slowest.name, speed_factor=factor)

    def group_by_category(
        self, results: Iterable[MeasurementResult]
    ) -> dict[ContainerCategory, list[MeasurementResult]]:
        """Results grouped by category, each group sorted fastest first, empty groups omitted."""
        groups: dict[ContainerCategory, list[MeasurementResult]] = defaultdict(list)
        for result in results:
            groups[result.category].append(result)
        return {
            category: self.sort_results(groups[category])
            for category in ContainerCategory
            if groups.get(category)
        }

    def summarize_battery(
        self, record: Mapping[WorkloadScenario, Sequence[MeasurementResult]]
    ) -> dict[WorkloadScenario, ScenarioSummary | None]:
        """Per-scenario summaries, in scenario declaration order."""
        return {
            scenario: self.summarize(record[scenario])
            for scenario in WorkloadScenario
            if scenario in record
        }

    # Scaling sweep

    def scaling_series(self, results: Iterable[MeasurementResult]) -> list[ScalingSeries]:
        """Group scaling results per container, tiers ascending."""
        points: dict[str, list[MeasurementResult]] = defaultdict(list)
        categories: dict[str, ContainerCategory] = {}
        for result in results:
            points[result.variant_name].append(result)
            categories[result.variant_name] = result.category

        series = []
        for variant, variant_results in points.items():
            ordered = sorted(variant_results, key=lambda result: result.operation_count)
            tiers = [result.operation_count for result in ordered]
            elapsed = [result.elapsed_seconds for result in ordered]
            series.append(
                ScalingSeries(
                    variant=variant,
                    category=categories[variant],
                    tiers=tiers,
                    elapsed_seconds=elapsed,
                    exponent=self.scaling_exponent(tiers, elapsed),
                )
            )
        return series

    @staticmethod
    def scaling_exponent(tiers: Sequence[int], elapsed: Sequence[float]) -> float | None:
        """
        Slope of log(elapsed) against log(operations).

        About 1.0 means cost grows linearly with volume; above 1.0 means
        per-operation overhead increases with volume. None when fewer than
        two usable points exist.
        """
        pairs = [(t, e) for t, e in zip(tiers, elapsed) if t > 0 and e > 0]
        if len(pairs) < 2:
            return None

        x = np.log10(np.array([t for t, _ in pairs], dtype=float))
        y = np.log10(np.array([e for _, e in pairs], dtype=float))
        if x.max() == x.min():
            return None
        slope, _ = np.polyfit(x, y, 1)
        return float(slope)

    # Reports

    def scenario_report(
        self, scenario: WorkloadScenario, results: Sequence[MeasurementResult]
    ) -> ScenarioReport:
        return ScenarioReport(
            scenario=scenario.name,
            label=scenario.label,
            results=self.sort_results(results),
            summary=None if scenario.is_scaling_sweep else self.summarize(results),
            scaling=self.scaling_series(results) if scenario.is_scaling_sweep else [],
        )

    def build_report(
        self,
        record: Mapping[WorkloadScenario, Sequence[MeasurementResult]],
        config: dict | None = None,
    ) -> BenchmarkReport:
        return BenchmarkReport(
            config=config or {},
            scenarios=[
                self.scenario_report(scenario, record[scenario])
                for scenario in WorkloadScenario
                if scenario in record
            ],
        )

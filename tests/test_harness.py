"""
Tests for BenchmarkHarness: variant selection, progress accounting, the
scaling sweep, single-scenario runs and the battery.
"""

from unittest.mock import AsyncMock

import pytest

from lockbench.actor import CounterActor
from lockbench.config import HarnessConfig
from lockbench.containers import ContainerCategory
from lockbench.dispatcher import OperationDispatcher
from lockbench.exceptions import ConfigurationError, InvalidOperationCountError
from lockbench.harness import LOCK_VARIANTS, QUEUE_VARIANTS, BenchmarkHarness, ProgressUpdate
from lockbench.scenarios import WorkloadScenario


@pytest.mark.fast
class TestVariantSelection:
    def test_concurrent_scenarios_use_lock_variants(self, small_config):
        harness = BenchmarkHarness(small_config)
        variants = harness.build_containers(WorkloadScenario.BALANCED)
        try:
            assert [variant.name for variant in variants] == [
                "Fair Lock",
                "Unfair Lock",
                "Allocated Unfair Lock",
            ]
            assert {variant.category for variant in variants} == {ContainerCategory.LOCK}
        finally:
            harness.close_containers(variants)

    def test_sequential_scenario_adds_queue_variants(self, small_config):
        harness = BenchmarkHarness(small_config)
        variants = harness.build_containers(WorkloadScenario.SEQUENTIAL)
        try:
            names = [variant.name for variant in variants]
            assert names[3:] == ["Serial Queue", "RW Queue"]
            assert variants[3].category is ContainerCategory.QUEUE_BASED
        finally:
            harness.close_containers(variants)

    @pytest.mark.parametrize("scenario", list(WorkloadScenario))
    def test_variant_count_matches_built_variants(self, small_config, scenario):
        harness = BenchmarkHarness(small_config)
        variants = harness.build_containers(scenario)
        try:
            assert harness.variant_count(scenario) == len(variants) + 1
        finally:
            harness.close_containers(variants)

    def test_variant_count_follows_variant_tables(self):
        assert BenchmarkHarness.variant_count(WorkloadScenario.BALANCED) == len(LOCK_VARIANTS) + 1
        assert BenchmarkHarness.variant_count(WorkloadScenario.SEQUENTIAL) == (
            len(LOCK_VARIANTS) + len(QUEUE_VARIANTS) + 1
        )

    def test_close_containers_stops_queue_workers(self, small_config):
        harness = BenchmarkHarness(small_config)
        variants = harness.build_containers(WorkloadScenario.SEQUENTIAL)

        harness.close_containers(variants)

        with pytest.raises(RuntimeError):
            variants[3].container.write(1)

    def test_variants_are_fresh_per_call(self, small_config):
        harness = BenchmarkHarness(small_config)
        first = harness.build_containers(WorkloadScenario.BALANCED)
        second = harness.build_containers(WorkloadScenario.BALANCED)
        assert first[0].container is not second[0].container

    def test_invalid_config_rejected(self):
        with pytest.raises(ConfigurationError):
            BenchmarkHarness(HarnessConfig(trials_per_measurement=0))


@pytest.mark.fast
class TestProgressAccounting:
    def setup_method(self):
        self.harness = BenchmarkHarness(HarnessConfig())

    def test_standard_scenario_steps(self):
        # (3 locks + actor) x 3 trials + warm-up
        assert self.harness.total_steps(WorkloadScenario.BALANCED) == 13

    def test_sequential_scenario_steps(self):
        # (3 locks + 2 queues + actor) x 3 trials + warm-up
        assert self.harness.total_steps(WorkloadScenario.SEQUENTIAL) == 19

    def test_scaling_scenario_steps(self):
        # (3 locks + actor) x 4 tiers, plus warm-up
        assert self.harness.measurement_steps(WorkloadScenario.SCALING) == 16
        assert self.harness.total_steps(WorkloadScenario.SCALING) == 17

    def test_battery_steps(self):
        # 1 + 4 concurrent scenarios x 12 + sequential x 18
        assert self.harness.battery_total_steps() == 67

    def test_progress_fraction(self):
        assert ProgressUpdate("x", 5, 10).fraction == 0.5
        assert ProgressUpdate("x", 0, 0).fraction == 1.0


@pytest.mark.fast
class TestOperationCountValidation:
    def test_bounds(self):
        harness = BenchmarkHarness(HarnessConfig())
        assert harness.validate_operation_count(1000) == 1000
        assert harness.validate_operation_count(50_000) == 50_000

        with pytest.raises(InvalidOperationCountError) as exc_info:
            harness.validate_operation_count(999)
        assert exc_info.value.operation_count == 999

        with pytest.raises(InvalidOperationCountError):
            harness.validate_operation_count(50_001)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, -5, 999, 50_001])
    async def test_run_scenario_rejects_out_of_range_count(self, count):
        updates = []
        harness = BenchmarkHarness(HarnessConfig(), progress_callback=updates.append)
        harness.engine.measure = AsyncMock(return_value=0.01)

        with pytest.raises(InvalidOperationCountError) as exc_info:
            await harness.run_scenario(WorkloadScenario.BALANCED, count)

        assert exc_info.value.error_code == "INVALID_OPERATION_COUNT"
        assert harness.engine.measure.await_count == 0
        assert updates == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "scenario", [WorkloadScenario.LOW_VOLUME, WorkloadScenario.SEQUENTIAL, WorkloadScenario.SCALING]
    )
    async def test_ignored_count_is_not_validated(self, scenario):
        harness = BenchmarkHarness(HarnessConfig(max_workers=4))
        harness.engine.measure = AsyncMock(return_value=0.01)

        results = await harness.run_scenario(scenario, 0)

        assert results
        assert all(result.operation_count > 0 for result in results)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, -5])
    async def test_run_battery_rejects_out_of_range_count(self, count):
        updates = []
        harness = BenchmarkHarness(HarnessConfig(), progress_callback=updates.append)
        harness.engine.measure = AsyncMock(return_value=0.01)

        with pytest.raises(InvalidOperationCountError) as exc_info:
            await harness.run_battery(operation_count=count)

        assert exc_info.value.operation_count == count
        assert harness.engine.measure.await_count == 0
        assert updates == []


@pytest.mark.medium
class TestScalingSweep:
    @pytest.mark.asyncio
    async def test_one_result_per_variant_and_tier(self):
        updates = []
        harness = BenchmarkHarness(HarnessConfig(max_workers=4), progress_callback=updates.append)
        harness.engine.measure = AsyncMock(return_value=0.01)

        results = await harness.run_scenario(WorkloadScenario.SCALING)

        assert len(results) == 4 * 4
        assert {result.tier for result in results} == {100, 1000, 10_000, 50_000}
        pairs = {(result.variant, result.tier) for result in results}
        assert len(pairs) == 16
        assert {result.variant for result in results} == {
            "Fair Lock",
            "Unfair Lock",
            "Allocated Unfair Lock",
            "Actor",
        }
        assert "Actor (50K)" in {result.name for result in results}
        # Scaling measures each (variant, tier) once
        assert harness.engine.measure.await_count == 16

        assert updates[0] == ProgressUpdate("Warming up...", 0, 17)
        assert [update.step for update in updates] == list(range(18))

    @pytest.mark.asyncio
    async def test_real_sweep_with_small_tiers(self, small_config):
        small_config.scaling_tiers = (10, 20, 40, 80)
        harness = BenchmarkHarness(small_config)

        results = await harness.run_scenario(WorkloadScenario.SCALING)

        assert len(results) == 16
        assert sorted({result.operation_count for result in results}) == [10, 20, 40, 80]
        assert all(result.elapsed_seconds > 0 for result in results)


@pytest.mark.slow
class TestScenarioRuns:
    @pytest.mark.asyncio
    async def test_balanced_end_to_end(self, small_config):
        """Balanced at 1,000 ops: every variant ends on a dispatched write index."""
        harness = BenchmarkHarness(small_config)
        scenario = WorkloadScenario.BALANCED
        write_indices = set(OperationDispatcher(scenario).write_indices(1000))

        variants = harness.build_containers(scenario)
        try:
            for variant in variants:
                variant.container.reset()
                await harness.engine.measure(variant.container, scenario, 1000)
                assert variant.container.read() in write_indices, variant.name
        finally:
            harness.close_containers(variants)

        async with CounterActor() as actor:
            await harness.engine.measure(actor, scenario, 1000)
            assert await actor.read() in write_indices

        results = await harness.run_scenario(scenario, 1000)
        assert [result.name for result in results] == [
            "Fair Lock",
            "Unfair Lock",
            "Allocated Unfair Lock",
            "Actor",
        ]
        assert all(result.operation_count == 1000 for result in results)
        assert results[-1].category is ContainerCategory.COOPERATIVE_SCHEDULING

    @pytest.mark.asyncio
    async def test_run_reports_median_of_three(self, small_config):
        harness = BenchmarkHarness(small_config)
        harness.engine.measure = AsyncMock(side_effect=[0.5, 0.3, 0.9] * 4)

        results = await harness.run_scenario(WorkloadScenario.BALANCED, 2000)

        assert harness.engine.measure.await_count == 12
        assert all(result.elapsed_seconds == 0.5 for result in results)

    @pytest.mark.asyncio
    async def test_fixed_count_scenario_ignores_requested_count(self, small_config):
        updates = []
        harness = BenchmarkHarness(small_config, progress_callback=updates.append)

        results = await harness.run_scenario(WorkloadScenario.LOW_VOLUME, 20_000)

        assert all(result.operation_count == 100 for result in results)
        assert [update.step for update in updates] == list(range(14))
        assert updates[1].status == "Fair Lock (1/3)"
        assert updates[-1] == ProgressUpdate("Complete", 13, 13)

    @pytest.mark.asyncio
    async def test_sequential_scenario_includes_queues(self, small_config):
        harness = BenchmarkHarness(small_config)

        results = await harness.run_scenario(WorkloadScenario.SEQUENTIAL)

        assert len(results) == 6
        assert {result.category for result in results} == set(ContainerCategory)

    @pytest.mark.asyncio
    async def test_battery_keyed_by_scenario(self, small_config, mocker):
        updates = []
        harness = BenchmarkHarness(small_config, progress_callback=updates.append)
        spy = mocker.spy(harness.engine, "measure")

        record = await harness.run_battery(operation_count=200)

        assert list(record) == [
            WorkloadScenario.BALANCED,
            WorkloadScenario.READ_HEAVY,
            WorkloadScenario.WRITE_HEAVY,
            WorkloadScenario.HEAVY_WORK,
            WorkloadScenario.SEQUENTIAL,
        ]
        assert len(record[WorkloadScenario.SEQUENTIAL]) == 6
        assert all(len(record[s]) == 4 for s in list(record)[:4])
        # Battery count overrides the sequential scenario's fixed count
        assert all(
            result.operation_count == 200 for results in record.values() for result in results
        )
        assert spy.call_count == 66
        assert [update.step for update in updates] == list(range(68))
        assert updates[1].status == "[Balanced (50/50)] Fair Lock (1/3)"

    @pytest.mark.asyncio
    async def test_battery_skips_scaling(self, small_config):
        harness = BenchmarkHarness(small_config)
        harness.engine.measure = AsyncMock(return_value=0.01)

        record = await harness.run_battery(
            [WorkloadScenario.SCALING, WorkloadScenario.LOW_VOLUME], operation_count=100
        )

        assert list(record) == [WorkloadScenario.LOW_VOLUME]

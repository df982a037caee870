"""Tests for the lockbench command-line front-end."""

import json

import pytest

from lockbench.cli import build_parser, main
from lockbench.scenarios import WorkloadScenario


@pytest.mark.fast
class TestParser:
    def test_run_defaults(self):
        args = build_parser().parse_args(["run"])
        assert args.command == "run"
        assert args.scenario is WorkloadScenario.BALANCED
        assert args.operations is None
        assert args.json is None

    def test_scenario_names_are_case_insensitive(self):
        args = build_parser().parse_args(["run", "--scenario", "Write-Heavy"])
        assert args.scenario is WorkloadScenario.WRITE_HEAVY

    def test_unknown_scenario_exits(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["run", "--scenario", "chaotic"])
        assert exc_info.value.code == 2
        assert "unknown scenario" in capsys.readouterr().err

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


@pytest.mark.medium
class TestMain:
    def test_lists_scenarios(self, capsys):
        assert main(["scenarios"]) == 0
        output = capsys.readouterr().out
        assert "read_heavy" in output
        assert "scaling" in output

    def test_run_low_volume_writes_json(self, tmp_path, capsys):
        report_path = tmp_path / "report.json"

        assert main(["run", "--scenario", "low_volume", "--workers", "4", "--json", str(report_path)]) == 0

        payload = json.loads(report_path.read_text())
        scenario = payload["scenarios"][0]
        assert scenario["scenario"] == "LOW_VOLUME"
        assert len(scenario["results"]) == 4
        assert all(result["operation_count"] == 100 for result in scenario["results"])
        assert payload["config"]["max_workers"] == 4

        output = capsys.readouterr().out
        assert "Fastest:" in output
        assert "x faster than" in output

    def test_out_of_range_operations_fail(self, capsys):
        assert main(["run", "--operations", "10"]) == 2
        assert "INVALID_OPERATION_COUNT" in capsys.readouterr().out

    @pytest.mark.parametrize("count", ["0", "-5"])
    def test_battery_out_of_range_operations_fail(self, capsys, count):
        assert main(["battery", "--operations", count, "--workers", "2"]) == 2
        assert "INVALID_OPERATION_COUNT" in capsys.readouterr().out

    def test_fixed_count_scenario_ignores_operations(self, capsys):
        assert main(["run", "--scenario", "low_volume", "--operations", "500", "--workers", "2"]) == 0
        assert "Fastest:" in capsys.readouterr().out

    def test_invalid_worker_count_fails(self, capsys):
        assert main(["run", "--scenario", "low_volume", "--workers", "0"]) == 2
        assert "INVALID_CONFIGURATION" in capsys.readouterr().out

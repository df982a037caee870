"""
Terminal front-end for the benchmark harness.

    lockbench scenarios
    lockbench run --scenario balanced --operations 20000
    lockbench battery --json results.json

Progress from the harness drives a Rich progress bar; results are rendered
as Rich tables, grouped by category for a single scenario and by scenario
for the battery.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import structlog
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from . import __version__
from .config import HarnessConfig
from .exceptions import BenchmarkError
from .harness import BenchmarkHarness, ProgressUpdate, RunRecord
from .results import MeasurementResult, ResultsReporter
from .scenarios import BATTERY_SCENARIOS, WorkloadScenario


def configure_logging(level: str) -> None:
    """Filter structlog output below ``level`` (e.g. ``WARNING``)."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _scenario_arg(value: str) -> WorkloadScenario:
    try:
        return WorkloadScenario.from_name(value)
    except KeyError:
        choices = ", ".join(scenario.name.lower() for scenario in WorkloadScenario)
        raise argparse.ArgumentTypeError(f"unknown scenario {value!r} (choose from {choices})")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lockbench",
        description="Compare lock-based containers and a cooperative actor under workloads.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Minimum structured log level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("scenarios", help="List workload scenarios")

    run_parser = subparsers.add_parser("run", help="Run a single scenario")
    run_parser.add_argument(
        "--scenario",
        type=_scenario_arg,
        default=WorkloadScenario.BALANCED,
        help="Scenario name, e.g. balanced, read_heavy, scaling (default: balanced)",
    )
    run_parser.add_argument(
        "--operations",
        type=int,
        default=None,
        help="Total operations (1000-50000); ignored for fixed-count scenarios",
    )

    battery_parser = subparsers.add_parser(
        "battery", help="Run Balanced, Read/Write Heavy, Heavy Work and Sequential"
    )
    battery_parser.add_argument(
        "--operations",
        type=int,
        default=None,
        help="Operations per scenario (default: 50000)",
    )

    for sub in (run_parser, battery_parser):
        sub.add_argument("--workers", type=int, default=None, help="Fan-out thread pool size")
        sub.add_argument("--json", type=Path, default=None, help="Write the report as JSON")

    return parser


def _results_table(title: str, results: list[MeasurementResult]) -> Table:
    table = Table(title=title, title_justify="left")
    table.add_column("Container")
    table.add_column("Time", justify="right")
    table.add_column("Throughput", justify="right")
    for result in results:
        table.add_row(result.name, result.formatted_duration, result.formatted_throughput)
    return table


def render_scenario(
    console: Console,
    reporter: ResultsReporter,
    scenario: WorkloadScenario,
    results: list[MeasurementResult],
) -> None:
    console.print(f"[bold]{scenario.label}[/bold]: {scenario.description}")

    for category, grouped in reporter.group_by_category(results).items():
        console.print(_results_table(category.value, grouped))

    if scenario.is_scaling_sweep:
        for series in reporter.scaling_series(results):
            exponent = f"{series.exponent:.2f}" if series.exponent is not None else "n/a"
            console.print(f"  {series.variant}: scaling exponent {exponent}")
        return

    summary = reporter.summarize(results)
    if summary is not None:
        console.print(f"[green]Fastest: {summary.fastest}[/green]")
        console.print(f"  {summary.statement}")


def render_battery(console: Console, reporter: ResultsReporter, record: RunRecord) -> None:
    for scenario, summary in reporter.summarize_battery(record).items():
        console.print(_results_table(scenario.label, reporter.sort_results(record[scenario])))
        if summary is not None:
            console.print(f"  [dim]{summary.statement}[/dim]")


def render_scenarios(console: Console) -> None:
    table = Table(title="Workload scenarios", title_justify="left")
    table.add_column("Name")
    table.add_column("Label")
    table.add_column("Writes", justify="right")
    table.add_column("Operations", justify="right")
    table.add_column("Description")
    for scenario in WorkloadScenario:
        fixed = scenario.fixed_operation_count
        table.add_row(
            scenario.name.lower(),
            scenario.label,
            f"{scenario.write_ratio:.0%}",
            str(fixed) if fixed is not None else "configurable",
            scenario.description,
        )
    console.print(table)


async def _run_with_progress(console: Console, args: argparse.Namespace, config: HarnessConfig):
    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task_id = progress.add_task("Starting...", total=None)

        def on_progress(update: ProgressUpdate) -> None:
            progress.update(
                task_id, description=update.status, completed=update.step, total=update.total
            )

        harness = BenchmarkHarness(config, progress_callback=on_progress)

        # The harness rejects out-of-range counts before any variant is built
        if args.command == "run":
            results = await harness.run_scenario(args.scenario, args.operations)
            return {args.scenario: results}

        return await harness.run_battery(BATTERY_SCENARIOS, args.operations)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    console = Console()

    if args.command == "scenarios":
        render_scenarios(console)
        return 0

    config = HarnessConfig()
    if args.workers is not None:
        config.max_workers = args.workers

    try:
        record = asyncio.run(_run_with_progress(console, args, config))
    except BenchmarkError as e:
        console.print(f"[red]Error {escape(f'[{e.error_code}]')}: {escape(e.message)}[/red]")
        return 2

    reporter = ResultsReporter()
    if args.command == "run":
        render_scenario(console, reporter, args.scenario, record[args.scenario])
    else:
        render_battery(console, reporter, record)

    if args.json is not None:
        report = reporter.build_report(record, config=config.as_dict())
        args.json.write_text(report.model_dump_json(indent=2))
        console.print(f"Report written to {args.json}")

    return 0


if __name__ == "__main__":
    sys.exit(main())

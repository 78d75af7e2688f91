"""Command-line interface for flowplan."""

from __future__ import annotations

import json
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml

from . import context
from .baseline import DeviationStatus, compare_to_baseline, read_baseline_file, write_baseline_file
from .config import EngineConfig, discover_config
from .engine import PlanningEngine, ScheduleResult, topological_sort
from .exceptions import FlowplanError
from .logger import VERBOSITY_DEBUG, VERBOSITY_SILENT, setup_logger
from .parser import TaskFile, load_tasks

app = typer.Typer(
    name="flowplan",
    help="Dependency-aware project scheduling with critical path analysis",
    add_completion=False,
)


class OutputFormat(str, Enum):
    """Output formats for the schedule command."""

    TEXT = "text"
    JSON = "json"
    YAML = "yaml"


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show date changes, 2=show all checks, 3=debug",
            min=VERBOSITY_SILENT,
            max=VERBOSITY_DEBUG,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: flowplan_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for flowplan commands."""
    setup_logger(verbose)
    context.set_config_path(config)


def _parse_date_option(date_str: str | None, option_name: str) -> date | None:
    """Parse a YYYY-MM-DD date given on the command line."""
    if date_str is None:
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        typer.echo(
            f"Error: Invalid {option_name} '{date_str}'. Use YYYY-MM-DD format.",
            err=True,
        )
        raise typer.Exit(1) from None


def _load(file: Path) -> tuple[TaskFile, EngineConfig]:
    """Load the task file and the engine config, exiting on errors."""
    try:
        task_file = load_tasks(file)
        config = discover_config(file, context.get_config_path())
    except FlowplanError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    return task_file, config


def _run_schedule(file: Path, start_date: str | None) -> ScheduleResult:
    """Load a task file and run the planning engine on it.

    The project start comes from --start-date, then the file's project_start,
    then today.
    """
    parsed_start = _parse_date_option(start_date, "start date")
    task_file, config = _load(file)
    project_start = parsed_start or task_file.project_start or date.today()  # noqa: DTZ011

    try:
        return PlanningEngine(config).calculate_schedule(task_file.tasks, project_start)
    except FlowplanError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _echo_warnings(result: ScheduleResult) -> None:
    if result.warnings:
        typer.echo("\nWarnings:", err=True)
        for warning in result.warnings:
            typer.echo(f"  - {warning}", err=True)


def _format_schedule(result: ScheduleResult) -> list[str]:
    """Render schedule results as text lines."""
    lines = ["Schedule Results", "=" * 80, ""]

    critical = set(result.critical_path)
    for task in result.tasks:
        marker = " [critical]" if task.id in critical else ""
        lines.append(f"{task.label} ({task.id}){marker}")
        lines.append(f"  Start: {task.start_date}")
        lines.append(f"  Due:   {task.due_date}")
        if task.dependencies:
            lines.append(f"  Depends on: {', '.join(task.dependencies)}")
        times = result.task_times.get(task.id)
        if times is not None and times.slack > 0:
            lines.append(f"  Slack: {times.slack} min")
        lines.append("")

    if result.critical_path:
        lines.append(f"Critical path: {' -> '.join(result.critical_path)}")

    lines.extend(f"* {suggestion}" for suggestion in result.suggestions)
    return lines


@app.command()
def validate(
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")] = Path("tasks.yaml"),
) -> None:
    """Check the dependency graph for cycles and unknown references."""
    task_file, config = _load(file)

    try:
        result = topological_sort(task_file.tasks, config.missing_dependencies)
    except FlowplanError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    for task_id, dep_id in result.missing_references:
        typer.echo(f"Warning: task {task_id} depends on unknown task {dep_id}", err=True)

    if result.has_cycle:
        typer.echo(f"Circular dependency detected: {' -> '.join(result.cycle)}", err=True)
        raise typer.Exit(1)

    typer.echo(f"OK: {len(result.sorted)} tasks, no circular dependencies")
    typer.echo(f"Order: {', '.join(task.id for task in result.sorted)}")


@app.command()
def schedule(
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")] = Path("tasks.yaml"),
    *,
    start_date: Annotated[
        str | None,
        typer.Option(
            "--start-date",
            "-s",
            help="Project start date (YYYY-MM-DD). Defaults to the file's project_start, then today",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.TEXT,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Compute start and due dates for every task."""
    result = _run_schedule(file, start_date)

    if output_format == OutputFormat.TEXT:
        text = "\n".join(_format_schedule(result)) + "\n"
    elif output_format == OutputFormat.YAML:
        data: dict[str, Any] = result.to_dict()
        text = yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    else:
        text = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)

    if output:
        output.write_text(text, encoding="utf-8")
        typer.echo(f"Schedule written to {output}")
        _echo_warnings(result)
    elif output_format == OutputFormat.TEXT:
        typer.echo(text, nl=False)
        _echo_warnings(result)
    else:
        typer.echo(text)


@app.command(name="critical-path")
def critical_path(
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")] = Path("tasks.yaml"),
) -> None:
    """Show earliest/latest times and slack for every task."""
    task_file, config = _load(file)

    try:
        cpm = PlanningEngine(config).calculate_critical_path(task_file.tasks)
    except FlowplanError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(f"{'Task':<20} {'ES':>8} {'EF':>8} {'LS':>8} {'LF':>8} {'Slack':>8}")
    for task in task_file.tasks:
        t = cpm.task_times[task.id]
        typer.echo(
            f"{task.id:<20} {t.earliest_start:>8} {t.earliest_finish:>8} "
            f"{t.latest_start:>8} {t.latest_finish:>8} {t.slack:>8}"
        )
    typer.echo("")
    typer.echo(f"Critical path: {' -> '.join(cpm.critical_path)}")
    typer.echo(f"Total duration: {cpm.total_duration} min")


@app.command()
def baseline(
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")],
    output: Annotated[Path, typer.Option("--output", "-o", help="Baseline file to write")],
    *,
    name: Annotated[
        str | None, typer.Option("--name", "-n", help="Baseline version name")
    ] = None,
    start_date: Annotated[
        str | None,
        typer.Option("--start-date", "-s", help="Project start date (YYYY-MM-DD)"),
    ] = None,
) -> None:
    """Schedule the tasks and freeze the result as a baseline."""
    result = _run_schedule(file, start_date)
    if result.has_cycle:
        _echo_warnings(result)
        raise typer.Exit(1)

    today = date.today()  # noqa: DTZ011
    write_baseline_file(output, result, name or f"Baseline - {today.isoformat()}", today)
    typer.echo(f"Baseline written to {output}")


@app.command()
def compare(
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")],
    baseline_file: Annotated[Path, typer.Argument(help="Baseline file to compare against")],
    *,
    start_date: Annotated[
        str | None,
        typer.Option("--start-date", "-s", help="Project start date (YYYY-MM-DD)"),
    ] = None,
) -> None:
    """Compare the current schedule against a baseline."""
    try:
        frozen = read_baseline_file(baseline_file)
    except (OSError, ValueError) as e:
        typer.echo(f"Error: Could not read baseline: {e}", err=True)
        raise typer.Exit(1) from None

    result = _run_schedule(file, start_date)
    if result.has_cycle:
        _echo_warnings(result)
        raise typer.Exit(1)

    comparison = compare_to_baseline(result.tasks, frozen)

    typer.echo(f"Comparison against '{frozen.name}'")
    typer.echo("=" * 80)
    for row in comparison.rows:
        line = f"{row.id:<20} {row.due_date} (baseline {row.baseline_end})"
        if row.status == DeviationStatus.DELAYED:
            line += f"  +{row.delay_days}d delayed"
        elif row.status == DeviationStatus.AHEAD:
            line += f"  {row.delay_days}d ahead"
        typer.echo(line)

    typer.echo("")
    typer.echo(f"Delayed tasks: {comparison.delayed_count} / {len(comparison.rows)}")
    typer.echo(f"Total delay: {comparison.total_delay_days} days")


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()

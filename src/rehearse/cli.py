"""
CLI entry point for Rehearse.

This module provides the Typer-based command-line interface for Rehearse.

Commands:
    list        List recorded scenarios
    show        Show the timeline and assertions of one scenario
    run         Replay scenarios headlessly and report the outcomes

Architecture Note:
    The CLI is intentionally thin - it loads configuration, wires the
    reference scene and headless host to a ScenarioRunner, and renders the
    results. Interactive hosts use the runner and recorder directly.
"""

import logging
import traceback
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from rehearse import __version__
from rehearse.assertions import PropertyResolver
from rehearse.config import DEFAULT_CONFIG_FILE, HarnessConfig, load_config
from rehearse.errors import ConfigError, LoadError
from rehearse.host import HeadlessHost
from rehearse.input import LiveInput
from rehearse.interfaces import SimulationContext
from rehearse.report import generate_json_report, print_run_report
from rehearse.runner import ScenarioRunner
from rehearse.scene import JsonSceneCodec, Scene, SceneIndex
from rehearse.schema import RunStatus, Scenario, Transition, validate_alternation
from rehearse.store import ScenarioStore

# Initialize Typer app with metadata
app = typer.Typer(
    name="rehearse",
    help="Record and replay deterministic simulation scenarios.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for formatted output; logs go to stderr
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]rehearse[/bold] version {__version__}")
        raise typer.Exit()


def configure_logging(level: str = "INFO") -> None:
    """
    Route harness logs through a RichHandler on stderr.

    Only the rehearse logger hierarchy is configured; calling this again
    replaces the previously installed handler.
    """
    logger = logging.getLogger("rehearse")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(console=err_console, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level.upper())


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    Rehearse - deterministic record-and-replay testing for simulations.

    Recorded scenarios capture a starting state, every input transition and
    scheduled property assertions; replaying them checks the simulation
    still behaves the same way.
    """
    pass


def _load_settings(config_path: Path | None) -> HarnessConfig:
    """Load --config, else ./rehearse.yaml if present, else defaults."""
    if config_path is None:
        default = Path(DEFAULT_CONFIG_FILE)
        if not default.is_file():
            return HarnessConfig()
        config_path = default
    return load_config(config_path)


def _open_store(directory: Path | None, config_path: Path | None) -> tuple[ScenarioStore, HarnessConfig]:
    try:
        config = _load_settings(config_path)
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    return ScenarioStore(directory or config.scenario_dir), config


# Shared options
DirOption = Annotated[
    Optional[Path],
    typer.Option(
        "--dir",
        "-d",
        help="Scenario directory. Defaults to scenario_dir from the config.",
    ),
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help=f"Path to a config YAML file. Defaults to ./{DEFAULT_CONFIG_FILE} if present.",
        exists=True,
        readable=True,
        resolve_path=True,
    ),
]


@app.command("list")
def list_scenarios(
    directory: DirOption = None,
    config_path: ConfigOption = None,
) -> None:
    """
    List recorded scenarios.

    Example:
        $ rehearse list --dir tests/scenarios
    """
    store, _ = _open_store(directory, config_path)
    report = store.load_all()

    for error in report.errors:
        console.print(f"[yellow]Skipped: {escape(error.message)}[/yellow]")

    if not report.scenarios:
        console.print(f"[dim]No scenarios found in {report.directory}.[/dim]")
        raise typer.Exit(code=0)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Duration", justify="right")
    table.add_column("Events", justify="right")
    table.add_column("Assertion Sets", justify="right")
    table.add_column("Expectations", justify="right")
    table.add_column("Recorded")

    for scenario in report.scenarios:
        table.add_row(
            escape(scenario.name),
            f"{scenario.duration_seconds:.2f}s",
            str(len(scenario.timeline_events)),
            str(len(scenario.assertion_sets)),
            str(scenario.expectation_count),
            _format_recorded_at(scenario),
        )

    console.print(table)


@app.command()
def show(
    name: Annotated[
        str,
        typer.Argument(help="Name of the scenario to show."),
    ],
    directory: DirOption = None,
    config_path: ConfigOption = None,
) -> None:
    """
    Show the timeline and assertion sets of a scenario.

    Example:
        $ rehearse show jump_over_crate
    """
    store, _ = _open_store(directory, config_path)
    try:
        scenario = store.load(name)
    except LoadError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[bold]Scenario {escape(scenario.name)}[/bold]")
    console.print(f"  Duration: {scenario.duration_seconds:.2f}s")
    console.print(f"  Recorded: {_format_recorded_at(scenario)}")
    console.print(f"  Controls: {escape(', '.join(scenario.control_names)) or '-'}")
    console.print()

    if scenario.timeline_events:
        table = Table(title="Timeline", show_header=True, header_style="bold")
        table.add_column("#", style="dim", width=4, justify="right")
        table.add_column("Time", justify="right")
        table.add_column("Control", style="cyan")
        table.add_column("Transition")
        for index, event in enumerate(scenario.timeline_events):
            transition = (
                "[green]pressed[/green]"
                if event.transition == Transition.PRESSED
                else "[dim]released[/dim]"
            )
            table.add_row(str(index), f"{event.timestamp:.3f}s", escape(event.control), transition)
        console.print(table)
    else:
        console.print("[dim]No input events recorded.[/dim]")
    console.print()

    if scenario.assertion_sets:
        table = Table(title="Assertion Sets", show_header=True, header_style="bold")
        table.add_column("Time", justify="right")
        table.add_column("Description")
        table.add_column("Property", style="cyan")
        table.add_column("Expected")
        for assertion_set in scenario.assertion_sets:
            for position, expectation in enumerate(assertion_set.expectations):
                table.add_row(
                    f"{assertion_set.timestamp:.3f}s" if position == 0 else "",
                    escape(assertion_set.description or "") if position == 0 else "",
                    escape(expectation.path),
                    escape(str(expectation.expected_value)),
                )
        console.print(table)
    else:
        console.print("[dim]No assertion sets recorded.[/dim]")

    problems = validate_alternation(scenario.timeline_events)
    if problems:
        console.print()
        console.print("[yellow]Timeline warnings:[/yellow]")
        for problem in problems:
            console.print(f"  [yellow]• {escape(problem)}[/yellow]")


@app.command()
def run(
    names: Annotated[
        Optional[list[str]],
        typer.Argument(help="Scenarios to replay. Defaults to every stored scenario."),
    ] = None,
    directory: DirOption = None,
    config_path: ConfigOption = None,
    step: Annotated[
        Optional[float],
        typer.Option(
            "--step",
            help="Fixed step in seconds. Defaults to fixed_step_seconds from the config.",
            min=0.0001,
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results in JSON format.",
        ),
    ] = False,
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--out",
            "-o",
            help="Also write the JSON report to this file.",
            resolve_path=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Show passing assertions and debug logs.",
        ),
    ] = False,
) -> None:
    """
    Replay scenarios headlessly against the reference scene.

    Exits with code 0 only if every replayed scenario completed.

    Example:
        $ rehearse run --dir tests/scenarios
        $ rehearse run jump_over_crate --json
    """
    store, config = _open_store(directory, config_path)

    if verbose:
        configure_logging("DEBUG")
    elif json_output:
        configure_logging("WARNING")
    else:
        configure_logging(config.log_level)

    context = SimulationContext(scene=Scene(), input_source=LiveInput())
    runner = ScenarioRunner(
        context,
        JsonSceneCodec(),
        PropertyResolver(SceneIndex()),
        store,
    )
    host = HeadlessHost(context, runner, step_seconds=step or config.fixed_step_seconds)

    try:
        if names:
            for name in names:
                runner.enqueue_by_name(name)
            runner.start_current()
        else:
            count = runner.enqueue_all()
            if count == 0:
                console.print(f"[red]No valid scenarios found in {store.directory}[/red]")
                raise typer.Exit(code=1)

        host.run_until_idle()
    except typer.Exit:
        raise
    except LoadError as e:
        runner.cancel()
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    except Exception as e:
        runner.cancel()
        console.print(f"[red]Replay error: {escape(str(e))}[/red]")
        if verbose:
            console.print(f"[dim]{traceback.format_exc()}[/dim]")
        raise typer.Exit(code=1)

    results = runner.run_results()

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(generate_json_report(results), encoding="utf-8")

    if json_output:
        print(generate_json_report(results))
    else:
        for error in runner.load_errors:
            console.print(f"[yellow]Skipped: {escape(error.message)}[/yellow]")
        print_run_report(results, console, verbose=verbose)

    if results and all(r.status == RunStatus.COMPLETED for r in results):
        raise typer.Exit(code=0)
    raise typer.Exit(code=1)


def _format_recorded_at(scenario: Scenario) -> str:
    recorded = datetime.fromtimestamp(scenario.recorded_at_unix_millis / 1000, UTC)
    return recorded.strftime("%Y-%m-%d %H:%M:%S")


if __name__ == "__main__":
    app()

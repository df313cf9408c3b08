"""
Console report generator for Rehearse.

Renders replay results in the terminal using the Rich library: one header
line and outcome table per scenario, followed by run totals.

Design Principles:
    - Status at a glance: icons and colors for every outcome
    - Failures first: passing outcomes are collapsed unless verbose
    - Consistent formatting: predictable layout across runs
"""

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rehearse.schema import AssertionOutcome, AssertionStatus, RunResult, RunStatus, RunSummary


# Status icons
ICON_SUCCESS = "[green]✓[/green]"
ICON_FAILURE = "[red]✗[/red]"
ICON_ERROR = "[yellow]![/yellow]"


def print_run_report(
    results: list[RunResult],
    console: Console | None = None,
    verbose: bool = False,
) -> None:
    """
    Print a console report for a run.

    Args:
        results: One RunResult per replayed scenario
        console: Rich Console instance (creates one if not provided)
        verbose: Whether to list passing outcomes too
    """
    if console is None:
        console = Console()

    if not results:
        console.print("[dim]No scenarios were run.[/dim]")
        return

    for result in results:
        _print_scenario(console, result, verbose)
        console.print()

    outcomes = [o for r in results for o in r.outcomes]
    _print_summary(console, results, RunSummary.from_outcomes(outcomes))


def status_icon(status: RunStatus | AssertionStatus) -> str:
    """Icon for a scenario or assertion status."""
    if status in (RunStatus.COMPLETED, AssertionStatus.PASS):
        return ICON_SUCCESS
    if status in (RunStatus.FAILED, AssertionStatus.FAIL):
        return ICON_FAILURE
    return ICON_ERROR


def _status_style(status: RunStatus) -> str:
    if status == RunStatus.COMPLETED:
        return "green"
    if status == RunStatus.FAILED:
        return "red"
    return "yellow"


def _print_scenario(console: Console, result: RunResult, verbose: bool) -> None:
    """Print the header and outcome table of one scenario."""
    style = _status_style(result.status)

    header = Text.from_markup(f" {status_icon(result.status)} ")
    header.append(result.scenario_name, style="bold cyan")
    header.append(" │ ", style="dim")
    header.append(result.status.value.upper(), style=f"bold {style}")
    header.append(" │ ", style="dim")
    header.append(f"{result.passed}/{result.total} passed")
    console.print(Panel(header, expand=False))

    shown = [o for o in result.outcomes if verbose or o.status != AssertionStatus.PASS]
    if not shown:
        if result.total:
            console.print(f"  [dim]All {result.total} assertions passed.[/dim]")
        else:
            console.print("  [dim]No assertions.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("Time", style="dim", justify="right", width=8)
    table.add_column("Status", width=6, justify="center")
    table.add_column("Property", style="cyan")
    table.add_column("Expected")
    table.add_column("Actual")
    table.add_column("Details", overflow="fold")

    for outcome in shown:
        table.add_row(
            f"{outcome.timestamp:.2f}s",
            status_icon(outcome.status),
            escape(outcome.path),
            _format_value(outcome.expected_value),
            _format_value(outcome.actual_value),
            _format_details(outcome),
        )

    console.print(table)


def _format_details(outcome: AssertionOutcome) -> str:
    if outcome.status == AssertionStatus.ERROR and outcome.error_detail:
        return f"[yellow]{escape(_truncate(outcome.error_detail, 80))}[/yellow]"
    return ""


def _format_value(value: Any) -> str:
    if value is None:
        return "[dim]null[/dim]"
    return escape(_truncate(str(value), 30))


def _truncate(s: str, max_len: int) -> str:
    """Truncate string with ellipsis."""
    if len(s) <= max_len:
        return s
    return s[: max_len - 3] + "..."


def _print_summary(console: Console, results: list[RunResult], summary: RunSummary) -> None:
    """Print run totals."""
    console.print("[bold]Summary[/bold]")
    console.print()

    completed = sum(1 for r in results if r.status == RunStatus.COMPLETED)

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column("Metric", style="dim")
    stats_table.add_column("Value")

    stats_table.add_row("Scenarios", f"{completed}/{len(results)} completed")
    stats_table.add_row("Assertions", str(summary.total_assertions))
    stats_table.add_row(
        "Passed",
        f"[green]{summary.passed}[/green]" if summary.passed > 0 else "0",
    )
    stats_table.add_row(
        "Failed",
        f"[red]{summary.failed}[/red]" if summary.failed > 0 else "0",
    )
    stats_table.add_row(
        "Errors",
        f"[yellow]{summary.errors}[/yellow]" if summary.errors > 0 else "0",
    )

    console.print(stats_table)

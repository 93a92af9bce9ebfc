"""Console output helpers for the rabbitmq-smoke command."""

import json
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from .runner import ScenarioResult, StepStatus
from .scenarios import Scenario

console = Console()

STATUS_STYLES = {
    StepStatus.PASSED: "[green]✓ passed[/green]",
    StepStatus.FAILED: "[red]✗ failed[/red]",
    StepStatus.SKIPPED: "[yellow]- skipped[/yellow]",
}


def print_scenarios(scenarios: list[Scenario]) -> None:
    """Print the scenario table.

    Args:
        scenarios: Scenarios that a run would execute
    """
    if not scenarios:
        click.echo("No scenarios configured")
        return

    table = Table(title="Scenarios")
    table.add_column("ID")
    table.add_column("Plan")
    table.add_column("Protocol")
    for scenario in scenarios:
        table.add_row(scenario.id, scenario.plan, scenario.protocol.value)
    console.print(table)


def print_scenario_result(result: ScenarioResult) -> None:
    """Print the step results of one scenario."""
    table = Table(title=f"Scenario {result.scenario.id}", title_justify="left")
    table.add_column("Step")
    table.add_column("Status")
    table.add_column("Detail", overflow="fold")
    for step in result.steps:
        table.add_row(step.name, STATUS_STYLES[step.status], step.error or "")
    console.print(table)


def print_summary(results: list[ScenarioResult]) -> None:
    """Print the overall pass/fail summary."""
    failed = [r for r in results if not r.passed]
    if not failed:
        console.print(f"[green]✓ {len(results)} scenarios passed[/green]")
        return

    console.print(f"[red]✗ {len(failed)} of {len(results)} scenarios failed[/red]")
    for result in failed:
        for step in result.failed_steps:
            console.print(f"  {result.scenario.id} / {step.name}: {step.error}")


def results_to_dict(results: list[ScenarioResult]) -> dict[str, Any]:
    """Convert results to a JSON-serializable dict."""
    return {
        "passed": all(r.passed for r in results),
        "scenarios": [
            {
                "id": r.scenario.id,
                "plan": r.scenario.plan,
                "protocol": r.scenario.protocol.value,
                "passed": r.passed,
                "steps": [
                    {"name": s.name, "status": s.status.value, "error": s.error} for s in r.steps
                ],
            }
            for r in results
        ],
    }


def print_results_json(results: list[ScenarioResult]) -> None:
    """Print results as JSON."""
    click.echo(json.dumps(results_to_dict(results), indent=2))

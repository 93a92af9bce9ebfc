"""CLI main entry point."""

import sys

import click

from . import __version__
from .config import SmokeTestConfig, load_config
from .context import PlatformContext
from .errors import ConfigError, SmokeTestError
from .formatters import (
    print_results_json,
    print_scenario_result,
    print_scenarios,
    print_summary,
)
from .runner import ScenarioRunner
from .scenarios import Protocol, build_scenarios
from .shared import configure_logging


def _load(ctx: click.Context) -> SmokeTestConfig:
    try:
        return load_config(ctx.obj["config_path"])
    except ConfigError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(2)


@click.group()
@click.option(
    "-c",
    "--config",
    type=click.Path(),
    help="Config file path (default: $CONFIG_PATH)",
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity")
@click.option("-q", "--quiet", is_flag=True, help="Only log warnings and errors")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def cli(ctx: click.Context, config: str, verbose: int, quiet: bool, json_output: bool) -> None:
    """RabbitMQ service smoke tests."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["json_output"] = json_output

    if quiet:
        level = "warning"
    elif verbose:
        level = "debug"
    else:
        level = "info"
    configure_logging(level, json_output=json_output)


@cli.command()
@click.option("--plan", "plans", multiple=True, help="Only run this plan (repeatable)")
@click.option(
    "--protocol",
    "protocols",
    multiple=True,
    type=click.Choice([p.value for p in Protocol]),
    help="Only run this protocol (repeatable)",
)
@click.pass_context
def run(ctx: click.Context, plans: tuple[str, ...], protocols: tuple[str, ...]) -> None:
    """Provision, exercise and tear down every configured scenario."""
    config = _load(ctx)
    scenarios = build_scenarios(config, plans, [Protocol(p) for p in protocols])
    if not scenarios:
        click.echo("Error: no scenarios match the given filters", err=True)
        sys.exit(2)

    json_output = ctx.obj["json_output"]
    context = PlatformContext(config)
    try:
        try:
            cf = context.setup()
        except SmokeTestError as e:
            click.echo(f"Error: platform setup failed: {e}", err=True)
            sys.exit(1)

        runner = ScenarioRunner(config, cf)
        results = runner.run_all(
            scenarios,
            on_result=None if json_output else print_scenario_result,
        )
    finally:
        try:
            context.teardown()
        except SmokeTestError as e:
            click.echo(f"Error: platform teardown failed: {e}", err=True)

    if json_output:
        print_results_json(results)
    else:
        print_summary(results)

    if not all(r.passed for r in results):
        sys.exit(1)


@cli.command()
@click.pass_context
def scenarios(ctx: click.Context) -> None:
    """List the scenarios a run would execute."""
    config = _load(ctx)
    print_scenarios(build_scenarios(config))


@cli.command()
def version() -> None:
    """Show version information."""
    click.echo(f"rabbitmq-smoke-tests version {__version__}")


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()

"""CLI entrypoint for crush-orchestrator."""

import logging

import rich_click as click

from crush_orchestrator import __version__
from crush_orchestrator.config import LOG_LEVELS
from crush_orchestrator.orchestrator.controllers import (
    EstimateCommand,
    ExecuteCommand,
    OrchestratorCliController,
    SmokeCommand,
)
from crush_orchestrator.orchestrator.engine import SUPPORTED_STRATEGIES
from crush_orchestrator.orchestrator.runner.base import RunnerError

click.rich_click.USE_MARKDOWN = True
ORCHESTRATOR_CONTROLLER = OrchestratorCliController()

_STRATEGY_OPTION = click.option(
    "--strategy",
    type=click.Choice(SUPPORTED_STRATEGIES, case_sensitive=False),
    default=None,
    help="Execution strategy (default: CRUSH_DEFAULT_STRATEGY or balanced).",
)
_MAX_COST_OPTION = click.option(
    "--max-cost",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Maximum cost in USD (used by cost-optimized).",
)
_FORMAT_OPTION = click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    show_default=True,
    help="Output format.",
)


@click.group()
@click.version_option(version=__version__, prog_name="crush-orchestrator")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    envvar="CRUSH_LOG_LEVEL",
    default="WARNING",
    show_default=True,
    help="Logging level for diagnostics on stderr.",
)
def crush_orchestrator(log_level: str) -> None:
    """Multi-model orchestration over the Crush CLI."""

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@crush_orchestrator.command("execute")
@click.argument("prompt")
@_STRATEGY_OPTION
@_MAX_COST_OPTION
@click.option("--context", default=None, help="Context prepended to the prompt.")
@_FORMAT_OPTION
def execute(
    prompt: str,
    strategy: str | None,
    max_cost: float | None,
    context: str | None,
    output_format: str,
) -> None:
    """Execute a prompt with automatic multi-model orchestration."""

    try:
        lines = ORCHESTRATOR_CONTROLLER.execute(
            ExecuteCommand(
                prompt=prompt,
                strategy=strategy,
                max_cost=max_cost,
                context=context,
                output_format=output_format.lower(),
            ),
        )
    except (RunnerError, ValueError) as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


@crush_orchestrator.command("estimate")
@click.argument("prompt")
@_STRATEGY_OPTION
@_MAX_COST_OPTION
@_FORMAT_OPTION
def estimate(
    prompt: str,
    strategy: str | None,
    max_cost: float | None,
    output_format: str,
) -> None:
    """Estimate cost, time and quality without executing."""

    try:
        lines = ORCHESTRATOR_CONTROLLER.estimate(
            EstimateCommand(
                prompt=prompt,
                strategy=strategy,
                max_cost=max_cost,
                output_format=output_format.lower(),
            ),
        )
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


@crush_orchestrator.command("strategies")
def strategies() -> None:
    """List strategies with their cost/latency/quality profiles."""

    try:
        lines = ORCHESTRATOR_CONTROLLER.strategies()
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


@crush_orchestrator.command("smoke")
@click.option("--model", default=None, help="Model id (default: CRUSH_FAST_MODEL).")
@click.option(
    "--prompt",
    default="Reply with the single word: pong",
    show_default=True,
    help="Synthetic prompt.",
)
@click.option(
    "--expect-substring",
    default="pong",
    show_default=True,
    help="Substring required in the runner output.",
)
def smoke(model: str | None, prompt: str, expect_substring: str) -> None:
    """Probe the runner executable and run one synthetic invocation."""

    try:
        result = ORCHESTRATOR_CONTROLLER.smoke(
            SmokeCommand(model=model, prompt=prompt, expect_substring=expect_substring),
        )
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(result.lines)
    if not result.success:
        raise click.ClickException("Runner smoke check failed.")


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    crush_orchestrator()

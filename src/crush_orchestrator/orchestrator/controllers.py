"""Controllers for orchestrator CLI commands."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass

from crush_orchestrator.config import Settings
from crush_orchestrator.orchestrator.engine import Orchestrator
from crush_orchestrator.orchestrator.models import (
    EstimateResult,
    ExecutionRequest,
    ExecutionResult,
)
from crush_orchestrator.orchestrator.profiles import STRATEGY_PROFILES
from crush_orchestrator.orchestrator.smoke import run_smoke_check


@dataclass(slots=True)
class ExecuteCommand:
    """CLI input for one strategy execution."""

    prompt: str
    strategy: str | None
    max_cost: float | None
    context: str | None
    output_format: str = "table"


@dataclass(slots=True)
class EstimateCommand:
    """CLI input for a no-call estimate."""

    prompt: str
    strategy: str | None
    max_cost: float | None
    output_format: str = "table"


@dataclass(slots=True)
class SmokeCommand:
    """CLI input for direct runner smoke check."""

    model: str | None
    prompt: str
    expect_substring: str


@dataclass(slots=True)
class SmokeOutcome:
    """Rendered smoke-check output plus overall status."""

    lines: list[str]
    success: bool


class OrchestratorCliController:
    """Translate CLI commands into orchestrator calls and printable lines."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings

    @property
    def settings(self) -> Settings:
        return self._settings or Settings.from_env()

    def execute(self, command: ExecuteCommand) -> list[str]:
        orchestrator = Orchestrator.from_settings(self.settings)
        result = asyncio.run(
            orchestrator.execute(
                ExecutionRequest(
                    prompt=command.prompt,
                    strategy=command.strategy,
                    max_cost=command.max_cost,
                    context=command.context,
                ),
            ),
        )
        if command.output_format == "json":
            return [json.dumps(result.to_payload(), indent=2, ensure_ascii=False)]
        return _render_execution(result)

    def estimate(self, command: EstimateCommand) -> list[str]:
        orchestrator = Orchestrator.from_settings(self.settings)
        estimate = orchestrator.estimate(
            ExecutionRequest(
                prompt=command.prompt,
                strategy=command.strategy,
                max_cost=command.max_cost,
            ),
        )
        if command.output_format == "json":
            return [json.dumps(estimate.to_payload(), indent=2)]
        return _render_estimate(estimate)

    def strategies(self) -> list[str]:
        settings = self.settings
        lines = [f"Strategies (default={settings.strategies.default_strategy}):"]
        for name, profile in STRATEGY_PROFILES.items():
            lines.append(
                f"  {name.value}: cost~${profile.estimated_cost:.4f} "
                f"time~{profile.estimated_time_seconds:g}s "
                f"quality~{profile.expected_quality:.2f}",
            )
            lines.append(f"    {profile.description}")
        lines.append(
            f"Models: fast={settings.models.fast} quality={settings.models.quality} "
            f"premium={settings.models.premium}",
        )
        if not settings.runner.forwards_max_tokens:
            lines.append(
                "Note: CRUSH_COMMAND_TEMPLATE has no {max_tokens} placeholder; "
                "cost-optimized output ceilings are not enforced by the runner.",
            )
        return lines

    def smoke(self, command: SmokeCommand) -> SmokeOutcome:
        settings = self.settings
        try:
            settings.validate()
        except ValueError as error:
            return SmokeOutcome(lines=["Runner smoke check:", str(error)], success=False)

        model = command.model or settings.models.fast
        result = run_smoke_check(
            settings=settings.runner,
            model=model,
            prompt=command.prompt,
            expect_substring=command.expect_substring,
        )
        run_state = "ok" if result.run_ok else ("skipped" if result.skipped_run else "failed")
        line = (
            f"  executable={result.executable} available={'yes' if result.available else 'no'} "
            f"model={model} probe={'ok' if result.probe_ok else 'failed'} run={run_state}"
        )
        if result.error:
            line += f" error={result.error}"
        lines = [
            "Runner smoke check:",
            f"command_template={settings.runner.command_template!r}",
            f"timeout_seconds={settings.runner.timeout_seconds:g}",
            line,
        ]
        if result.output_preview:
            lines.append(f"    output={result.output_preview}")
        if result.cost is not None:
            lines.append(f"    cost=${result.cost:.6f}")
        lines.append(f"Smoke status: {'passed' if result.success else 'failed'}")
        if not result.success:
            lines.append(
                "Hint: configure the runner with CRUSH_BINARY_PATH and CRUSH_COMMAND_TEMPLATE.",
            )
        return SmokeOutcome(lines=lines, success=result.success)


def _render_execution(result: ExecutionResult) -> list[str]:
    return [
        result.result_text,
        "",
        "Execution:",
        f"  strategy={result.strategy.value}",
        f"  models_used={','.join(result.models_used)}",
        f"  iterations={result.iterations}",
        f"  total_cost=${result.total_cost:.4f}",
        f"  execution_time_seconds={result.execution_time_seconds:.2f}",
        f"  quality_score={result.quality_score:.2f}",
    ]


def _render_estimate(estimate: EstimateResult) -> list[str]:
    return [
        "Estimate:",
        f"  strategy={estimate.strategy.value}",
        f"  estimated_cost=${estimate.estimated_cost:.4f}",
        f"  estimated_time_seconds={estimate.estimated_time_seconds:g}",
        f"  expected_quality={estimate.expected_quality:.2f}",
    ]

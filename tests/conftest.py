"""Shared test fixtures."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field

import pytest

from crush_orchestrator.config import RunnerSettings
from crush_orchestrator.orchestrator.pricing import PricingTable
from crush_orchestrator.orchestrator.runner.base import Invocation, RunnerResult
from crush_orchestrator.orchestrator.usage import estimate_tokens

ECHO_AGENT_COMMAND_TEMPLATE = (
    "{binary} -m crush_orchestrator.orchestrator.runner.echo_agent run --model {model}"
)


def _make_result(
    model_id: str,
    output_text: str,
    *,
    cost: float = 0.001,
    tokens_in: int = 10,
    tokens_out: int = 10,
) -> RunnerResult:
    return RunnerResult(
        model_id=model_id,
        output_text=output_text,
        tokens_in=tokens_in,
        tokens_out=tokens_out,
        cost=cost,
        wall_time_seconds=0.01,
    )


def _rich_markdown(topic: str = "REST API") -> str:
    """Long, fully structured answer that saturates every quality signal."""

    paragraph = (
        f"This section explains how the {topic} architecture handles database access, "
        "cache invalidation, queue processing and deployment latency. "
    )
    return "\n".join(
        [
            "# Overview",
            "",
            paragraph * 30,
            "",
            "## Design",
            "",
            "- Stateless handlers",
            "- Versioned endpoints",
            "- Idempotent writes",
            "- Pagination",
            "- Rate limits",
            "",
            "```python",
            "def handler(request):",
            "    return {'ok': True}",
            "```",
            "",
            "```bash",
            "curl -X GET https://api.example.com/items",
            "```",
            "",
            "## Conclusion",
            "",
            "In summary, keep the interface small and the pipeline observable.",
        ],
    )


@dataclass
class ScriptedRunner:
    """Runner double returning canned results in call order."""

    responses: list[RunnerResult | Exception] = field(default_factory=list)
    calls: list[Invocation] = field(default_factory=list)

    async def run(self, invocation: Invocation) -> RunnerResult:
        self.calls.append(invocation)
        if not self.responses:
            raise AssertionError(f"Unexpected runner call for model={invocation.model_id}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@dataclass
class MaximalOutputRunner:
    """Runner double that always spends the whole output-token ceiling."""

    pricing: PricingTable
    calls: list[Invocation] = field(default_factory=list)

    async def run(self, invocation: Invocation) -> RunnerResult:
        self.calls.append(invocation)
        tokens_in = estimate_tokens(invocation.prompt)
        tokens_out = invocation.max_tokens
        return RunnerResult(
            model_id=invocation.model_id,
            output_text="x" * (tokens_out * 4),
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            cost=self.pricing.cost_usd(
                model_id=invocation.model_id,
                tokens_in=tokens_in,
                tokens_out=tokens_out,
            ),
            wall_time_seconds=0.0,
        )


@pytest.fixture()
def make_result():
    """Factory for canned runner results."""

    return _make_result


@pytest.fixture()
def rich_markdown():
    """Factory for answers that saturate every quality signal."""

    return _rich_markdown


@pytest.fixture()
def scripted_runner() -> ScriptedRunner:
    return ScriptedRunner()


@pytest.fixture()
def echo_runner_settings() -> RunnerSettings:
    """Runner settings that spawn the local echo agent instead of crush."""

    return RunnerSettings(
        binary_path=sys.executable,
        command_template=ECHO_AGENT_COMMAND_TEMPLATE,
        timeout_seconds=30.0,
        terminate_grace_seconds=1.0,
    )


@pytest.fixture()
def echo_agent_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Point CLI settings at the echo agent."""

    monkeypatch.setenv("CRUSH_BINARY_PATH", sys.executable)
    monkeypatch.setenv("CRUSH_COMMAND_TEMPLATE", ECHO_AGENT_COMMAND_TEMPLATE)
    monkeypatch.setenv("CRUSH_TIMEOUT_SECONDS", "30")
    monkeypatch.delenv("CRUSH_DEFAULT_STRATEGY", raising=False)
    monkeypatch.delenv("CRUSH_PRICING", raising=False)


@pytest.fixture()
def maximal_runner() -> MaximalOutputRunner:
    return MaximalOutputRunner(pricing=PricingTable())

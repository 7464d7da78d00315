from __future__ import annotations

import json

import allure
from click.testing import CliRunner

from crush_orchestrator.main import crush_orchestrator

pytestmark = [
    allure.epic("CLI"),
    allure.feature("Orchestrator Commands"),
]


def test_strategies_lists_every_profile(echo_agent_env) -> None:
    result = CliRunner().invoke(crush_orchestrator, ["strategies"])

    assert result.exit_code == 0, result.output
    assert "Strategies (default=balanced):" in result.output
    assert "  fast: cost~$0.0020 time~5s quality~0.60" in result.output
    assert "  quality: cost~$0.0600 time~45s quality~0.90" in result.output
    assert "  cost-optimized:" in result.output
    assert "Models: fast=grok-3-mini" in result.output
    assert "CRUSH_COMMAND_TEMPLATE has no {max_tokens} placeholder" in result.output


def test_strategies_reports_configured_default(echo_agent_env, monkeypatch) -> None:
    monkeypatch.setenv("CRUSH_DEFAULT_STRATEGY", "Quality")
    monkeypatch.setenv(
        "CRUSH_COMMAND_TEMPLATE",
        "{binary} -m crush_orchestrator.orchestrator.runner.echo_agent run "
        "--model {model} --max-tokens {max_tokens}",
    )

    result = CliRunner().invoke(crush_orchestrator, ["strategies"])

    assert result.exit_code == 0, result.output
    assert "Strategies (default=quality):" in result.output
    assert "{max_tokens} placeholder" not in result.output


def test_estimate_json_output(echo_agent_env) -> None:
    result = CliRunner().invoke(
        crush_orchestrator,
        ["estimate", "Explain REST APIs", "--strategy", "fast", "--format", "json"],
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {
        "estimated_cost": "0.0020",
        "estimated_time_seconds": 5,
        "expected_quality": "0.60",
        "strategy": "fast",
    }


def test_estimate_table_for_cost_optimized_budget(echo_agent_env) -> None:
    result = CliRunner().invoke(
        crush_orchestrator,
        ["estimate", "Explain REST APIs", "--strategy", "cost-optimized", "--max-cost", "0.005"],
    )

    assert result.exit_code == 0, result.output
    assert "  strategy=cost-optimized" in result.output
    assert "  estimated_cost=$0.0050" in result.output


def test_execute_fast_with_echo_agent(echo_agent_env) -> None:
    result = CliRunner().invoke(
        crush_orchestrator,
        ["execute", "Explain REST APIs", "--strategy", "fast", "--format", "json"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["result"] == "[grok-3-mini] Explain REST APIs"
    assert payload["metadata"]["models_used"] == ["grok-3-mini"]
    assert payload["metadata"]["iterations"] == 1
    assert payload["metadata"]["strategy"] == "fast"


def test_execute_balanced_is_default_and_chains_outline(echo_agent_env) -> None:
    result = CliRunner().invoke(
        crush_orchestrator,
        ["execute", "Design an API", "--context", "Team uses Python"],
    )

    assert result.exit_code == 0, result.output
    assert result.output.startswith("[claude-haiku-4-5] Refine and expand")
    assert "[grok-3-mini] Team uses Python" in result.output
    assert "  strategy=balanced" in result.output
    assert "  models_used=grok-3-mini,claude-haiku-4-5" in result.output
    assert "  iterations=2" in result.output


def test_execute_rejects_unknown_strategy(echo_agent_env) -> None:
    result = CliRunner().invoke(
        crush_orchestrator,
        ["execute", "hi", "--strategy", "turbo"],
    )

    assert result.exit_code == 2
    assert "turbo" in result.output


def test_execute_rejects_non_positive_budget(echo_agent_env) -> None:
    result = CliRunner().invoke(
        crush_orchestrator,
        ["execute", "hi", "--strategy", "cost-optimized", "--max-cost", "0"],
    )

    assert result.exit_code == 2


def test_execute_rejects_infinite_budget(echo_agent_env) -> None:
    result = CliRunner().invoke(
        crush_orchestrator,
        ["execute", "hi", "--strategy", "cost-optimized", "--max-cost", "inf"],
    )

    assert result.exit_code == 1
    assert not isinstance(result.exception, OverflowError)
    assert "max_cost must be a positive finite number" in result.output


def test_execute_surfaces_runner_failure(echo_agent_env, monkeypatch) -> None:
    monkeypatch.setenv(
        "CRUSH_COMMAND_TEMPLATE",
        "{binary} -m crush_orchestrator.orchestrator.runner.echo_agent run --model {model} "
        "--mode fail --stderr-message 'rate limit exceeded'",
    )

    result = CliRunner().invoke(crush_orchestrator, ["execute", "hi", "--strategy", "fast"])

    assert result.exit_code == 1
    assert "Runner exited with code 1" in result.output
    assert "rate limit exceeded" in result.output


def test_invalid_configuration_is_reported(echo_agent_env, monkeypatch) -> None:
    monkeypatch.setenv("CRUSH_QUALITY_THRESHOLD", "high")

    result = CliRunner().invoke(crush_orchestrator, ["estimate", "hi"])

    assert result.exit_code == 1
    assert "Invalid number value for CRUSH_QUALITY_THRESHOLD" in result.output


def test_smoke_passes_with_echo_agent(echo_agent_env) -> None:
    result = CliRunner().invoke(crush_orchestrator, ["smoke"])

    assert result.exit_code == 0, result.output
    assert "available=yes model=grok-3-mini probe=ok run=ok" in result.output
    assert "Smoke status: passed" in result.output


def test_smoke_fails_when_executable_is_missing(echo_agent_env, monkeypatch) -> None:
    monkeypatch.setenv("CRUSH_BINARY_PATH", "definitely-missing-crush-binary")

    result = CliRunner().invoke(crush_orchestrator, ["smoke"])

    assert result.exit_code == 1
    assert "available=no" in result.output
    assert "run=skipped" in result.output
    assert "Smoke status: failed" in result.output

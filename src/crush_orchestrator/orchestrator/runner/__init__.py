"""Model runner implementations."""

from crush_orchestrator.orchestrator.runner.base import (
    Invocation,
    Runner,
    RunnerError,
    RunnerResult,
)
from crush_orchestrator.orchestrator.runner.cli_runner import CliRunner

__all__ = [
    "CliRunner",
    "Invocation",
    "Runner",
    "RunnerError",
    "RunnerResult",
]

"""Runner interface for single model invocations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from crush_orchestrator.orchestrator.models import FailureClass


@dataclass(frozen=True, slots=True)
class Invocation:
    """Inputs required to execute one model call."""

    model_id: str
    prompt: str
    max_tokens: int

    def __post_init__(self) -> None:
        if not self.model_id.strip():
            raise ValueError("Invocation model_id must be non-empty.")
        if self.max_tokens <= 0:
            raise ValueError(f"Invocation max_tokens must be positive, got {self.max_tokens}.")


@dataclass(frozen=True, slots=True)
class RunnerResult:
    """Normalized outcome of one successful invocation."""

    model_id: str
    output_text: str
    tokens_in: int
    tokens_out: int
    cost: float
    wall_time_seconds: float


class RunnerError(RuntimeError):
    """Runner failure with classification and retryability hint."""

    def __init__(
        self,
        message: str,
        *,
        failure_class: FailureClass,
        transient: bool = False,
        exit_code: int | None = None,
        stderr_preview: str = "",
    ) -> None:
        super().__init__(message)
        self.failure_class = failure_class
        self.transient = transient
        self.exit_code = exit_code
        self.stderr_preview = stderr_preview


class Runner(Protocol):
    """Protocol implemented by model runners."""

    async def run(self, invocation: Invocation) -> RunnerResult:
        """Run one invocation and return normalized result."""

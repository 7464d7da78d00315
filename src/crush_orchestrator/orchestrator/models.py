"""Domain models for strategy execution requests and results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StrategyName(str, Enum):
    """Registered execution strategies."""

    FAST = "fast"
    BALANCED = "balanced"
    QUALITY = "quality"
    COST_OPTIMIZED = "cost-optimized"


class FailureClass(str, Enum):
    """Normalized failure classes attached to runner errors."""

    TIMEOUT = "timeout"
    SPAWN_FAILED = "spawn_failed"
    BACKEND_TRANSIENT = "backend_transient"
    BACKEND_NON_RETRYABLE = "backend_non_retryable"
    BILLING_OR_QUOTA = "billing_or_quota"
    ACCESS_OR_AUTH = "access_or_auth"
    MODEL_NOT_AVAILABLE = "model_not_available"
    OUTPUT_INVALID = "output_invalid"


class ValidationError(ValueError):
    """Request rejected before any runner invocation."""


@dataclass(frozen=True, slots=True)
class ExecutionRequest:
    """One caller request routed through the orchestrator."""

    prompt: str
    strategy: StrategyName | str | None = None
    max_cost: float | None = None
    context: str | None = None

    def effective_prompt(self) -> str:
        """Return prompt with optional context prepended."""

        if self.context:
            return f"{self.context}\n\n{self.prompt}"
        return self.prompt


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Aggregated outcome of one strategy execution."""

    result_text: str
    models_used: tuple[str, ...]
    total_cost: float
    execution_time_seconds: float
    quality_score: float
    strategy: StrategyName
    iterations: int

    def to_payload(self) -> dict[str, object]:
        """Serialize in the shape exposed to host tools."""

        return {
            "result": self.result_text,
            "metadata": {
                "models_used": list(self.models_used),
                "total_cost": f"{self.total_cost:.4f}",
                "execution_time_seconds": f"{self.execution_time_seconds:.2f}",
                "quality_score": f"{self.quality_score:.2f}",
                "strategy": self.strategy.value,
                "iterations": self.iterations,
            },
        }


@dataclass(frozen=True, slots=True)
class EstimateResult:
    """Static cost/time/quality projection for a strategy."""

    estimated_cost: float
    estimated_time_seconds: float
    expected_quality: float
    strategy: StrategyName

    def to_payload(self) -> dict[str, object]:
        """Serialize in the shape exposed to host tools."""

        return {
            "estimated_cost": f"{self.estimated_cost:.4f}",
            "estimated_time_seconds": self.estimated_time_seconds,
            "expected_quality": f"{self.expected_quality:.2f}",
            "strategy": self.strategy.value,
        }

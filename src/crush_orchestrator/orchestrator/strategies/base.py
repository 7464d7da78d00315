"""Strategy contract and shared execution accounting."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Protocol

from crush_orchestrator.orchestrator.models import ExecutionResult, StrategyName
from crush_orchestrator.orchestrator.runner.base import RunnerResult


class Strategy(Protocol):
    """Protocol implemented by execution strategies."""

    name: StrategyName

    async def execute(self, prompt: str, max_cost: float | None = None) -> ExecutionResult:
        """Run the strategy for one prompt and return aggregated result."""


@dataclass(slots=True)
class ExecutionTrace:
    """Accumulates runner results within one strategy execution."""

    strategy: StrategyName
    started_at: float = field(default_factory=time.monotonic)
    models_used: list[str] = field(default_factory=list)
    costs: list[float] = field(default_factory=list)

    @property
    def iterations(self) -> int:
        return len(self.models_used)

    def record(self, result: RunnerResult) -> RunnerResult:
        self.models_used.append(result.model_id)
        self.costs.append(result.cost)
        return result

    def finish(self, *, result_text: str, quality_score: float) -> ExecutionResult:
        """Freeze accumulated calls into the final result."""

        return ExecutionResult(
            result_text=result_text,
            models_used=tuple(self.models_used),
            total_cost=math.fsum(self.costs),
            execution_time_seconds=time.monotonic() - self.started_at,
            quality_score=quality_score,
            strategy=self.strategy,
            iterations=self.iterations,
        )

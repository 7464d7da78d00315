"""Fast strategy: one call to the cheapest model tier."""

from __future__ import annotations

from crush_orchestrator.orchestrator.models import ExecutionResult, StrategyName
from crush_orchestrator.orchestrator.runner.base import Invocation, Runner
from crush_orchestrator.orchestrator.strategies.base import ExecutionTrace

FAST_QUALITY_SCORE = 0.6


class FastStrategy:
    """Single invocation, fixed token ceiling, unscored."""

    name = StrategyName.FAST

    def __init__(
        self,
        runner: Runner,
        *,
        model: str = "grok-3-mini",
        max_tokens: int = 2000,
    ) -> None:
        self.runner = runner
        self.model = model
        self.max_tokens = max_tokens

    async def execute(self, prompt: str, max_cost: float | None = None) -> ExecutionResult:
        trace = ExecutionTrace(strategy=self.name)
        result = trace.record(
            await self.runner.run(
                Invocation(model_id=self.model, prompt=prompt, max_tokens=self.max_tokens),
            ),
        )
        # Throughput over accuracy: the evaluator is skipped on purpose.
        return trace.finish(result_text=result.output_text, quality_score=FAST_QUALITY_SCORE)

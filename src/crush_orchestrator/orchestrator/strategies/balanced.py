"""Balanced strategy: cheap outline refined by a stronger model."""

from __future__ import annotations

import logging

from crush_orchestrator.orchestrator.evaluator import QualityEvaluator
from crush_orchestrator.orchestrator.models import ExecutionResult, StrategyName
from crush_orchestrator.orchestrator.prompts import BALANCED_REFINE_PROMPT, render
from crush_orchestrator.orchestrator.runner.base import Invocation, Runner
from crush_orchestrator.orchestrator.strategies.base import ExecutionTrace

logger = logging.getLogger(__name__)


class BalancedStrategy:
    """Two sequential invocations: outline, then refinement."""

    name = StrategyName.BALANCED

    def __init__(  # noqa: PLR0913
        self,
        runner: Runner,
        evaluator: QualityEvaluator,
        *,
        outline_model: str = "grok-3-mini",
        refine_model: str = "claude-haiku-4-5",
        outline_max_tokens: int = 2000,
        refine_max_tokens: int = 4000,
    ) -> None:
        self.runner = runner
        self.evaluator = evaluator
        self.outline_model = outline_model
        self.refine_model = refine_model
        self.outline_max_tokens = outline_max_tokens
        self.refine_max_tokens = refine_max_tokens

    async def execute(self, prompt: str, max_cost: float | None = None) -> ExecutionResult:
        trace = ExecutionTrace(strategy=self.name)

        outline = trace.record(
            await self.runner.run(
                Invocation(
                    model_id=self.outline_model,
                    prompt=prompt,
                    max_tokens=self.outline_max_tokens,
                ),
            ),
        )
        refined = trace.record(
            await self.runner.run(
                Invocation(
                    model_id=self.refine_model,
                    prompt=render(
                        BALANCED_REFINE_PROMPT,
                        task=prompt,
                        previous_output=outline.output_text,
                    ),
                    max_tokens=self.refine_max_tokens,
                ),
            ),
        )

        quality_score = self.evaluator.evaluate(refined.output_text)
        logger.debug("Balanced strategy scored refinement: quality=%.2f", quality_score)
        return trace.finish(result_text=refined.output_text, quality_score=quality_score)

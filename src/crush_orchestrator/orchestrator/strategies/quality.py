"""Quality strategy: bounded, score-gated iterative refinement.

Flow:

1. Outline with the fast model.
2. Detailed analysis with the premium model; first scored candidate.
3. While the best score is below the threshold and the iteration cap is
   not reached, ask for deeper elaboration of the best candidate,
   alternating between the premium and the quality model.

A refinement replaces the best candidate only when it scores at least as
high, so the score reported after each step never decreases.
"""

from __future__ import annotations

import logging

from crush_orchestrator.orchestrator.evaluator import QualityEvaluator
from crush_orchestrator.orchestrator.models import ExecutionResult, StrategyName
from crush_orchestrator.orchestrator.prompts import (
    QUALITY_DETAIL_PROMPT,
    QUALITY_REFINE_PROMPT,
    render,
)
from crush_orchestrator.orchestrator.runner.base import Invocation, Runner
from crush_orchestrator.orchestrator.strategies.base import ExecutionTrace

logger = logging.getLogger(__name__)

MIN_ITERATIONS = 2


class QualityStrategy:
    """Outline, detail, then refine until quality gate or iteration cap."""

    name = StrategyName.QUALITY

    def __init__(  # noqa: PLR0913
        self,
        runner: Runner,
        evaluator: QualityEvaluator,
        *,
        outline_model: str = "grok-3-mini",
        primary_model: str = "claude-sonnet-4-5",
        alternate_model: str = "claude-haiku-4-5",
        max_iterations: int = 3,
        quality_threshold: float = 0.75,
        outline_max_tokens: int = 2000,
        detail_max_tokens: int = 8000,
        refine_max_tokens: int = 6000,
    ) -> None:
        if max_iterations < MIN_ITERATIONS:
            raise ValueError(
                f"max_iterations must be >= {MIN_ITERATIONS}, got {max_iterations}.",
            )
        self.runner = runner
        self.evaluator = evaluator
        self.outline_model = outline_model
        self.primary_model = primary_model
        self.alternate_model = alternate_model
        self.max_iterations = max_iterations
        self.quality_threshold = quality_threshold
        self.outline_max_tokens = outline_max_tokens
        self.detail_max_tokens = detail_max_tokens
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
        detail = trace.record(
            await self.runner.run(
                Invocation(
                    model_id=self.primary_model,
                    prompt=render(
                        QUALITY_DETAIL_PROMPT,
                        task=prompt,
                        previous_output=outline.output_text,
                    ),
                    max_tokens=self.detail_max_tokens,
                ),
            ),
        )
        best_output = detail.output_text
        best_score = self.evaluator.evaluate(best_output)

        while self.should_refine(best_score, trace.iterations):
            candidate = trace.record(
                await self.runner.run(
                    Invocation(
                        model_id=self.refinement_model(trace.iterations),
                        prompt=render(
                            QUALITY_REFINE_PROMPT,
                            task=prompt,
                            previous_output=best_output,
                        ),
                        max_tokens=self.refine_max_tokens,
                    ),
                ),
            )
            candidate_score = self.evaluator.evaluate(candidate.output_text)
            logger.debug(
                "Quality refinement: iteration=%d model=%s candidate=%.2f best=%.2f",
                trace.iterations,
                candidate.model_id,
                candidate_score,
                best_score,
            )
            if candidate_score >= best_score:
                best_output, best_score = candidate.output_text, candidate_score

        return trace.finish(result_text=best_output, quality_score=best_score)

    def should_refine(self, quality_score: float, iterations: int) -> bool:
        """Loop gate: below threshold and under iteration cap."""

        return quality_score < self.quality_threshold and iterations < self.max_iterations

    def refinement_model(self, iterations: int) -> str:
        """Alternate models on successive refinement calls."""

        return self.primary_model if iterations % 2 == 0 else self.alternate_model

"""Cost-optimized strategy: one budget-bounded call to the cheapest model."""

from __future__ import annotations

import logging
import math

from crush_orchestrator.orchestrator.models import ExecutionResult, StrategyName, ValidationError
from crush_orchestrator.orchestrator.pricing import PricingTable
from crush_orchestrator.orchestrator.runner.base import Invocation, Runner
from crush_orchestrator.orchestrator.strategies.base import ExecutionTrace
from crush_orchestrator.orchestrator.usage import estimate_tokens

logger = logging.getLogger(__name__)

COST_OPTIMIZED_QUALITY_SCORE = 0.5
SAFETY_DIVISOR = 2


class CostOptimizedStrategy:
    """Single invocation with a token ceiling derived from the budget."""

    name = StrategyName.COST_OPTIMIZED

    def __init__(
        self,
        runner: Runner,
        pricing: PricingTable,
        *,
        model: str = "grok-3-mini",
        default_max_cost: float = 0.01,
        token_cap: int = 1000,
        ceiling_forwarded: bool = True,
    ) -> None:
        self.runner = runner
        self.pricing = pricing
        self.model = model
        self.default_max_cost = default_max_cost
        self.token_cap = token_cap
        self.ceiling_forwarded = ceiling_forwarded

    async def execute(self, prompt: str, max_cost: float | None = None) -> ExecutionResult:
        budget = self.default_max_cost if max_cost is None else max_cost
        max_tokens = self.max_output_tokens(prompt, budget)
        logger.debug(
            "Cost-optimized ceiling: budget=%.4f model=%s max_tokens=%d",
            budget,
            self.model,
            max_tokens,
        )
        if not self.ceiling_forwarded:
            logger.warning(
                "Runner command template has no {max_tokens} placeholder; "
                "output ceiling %d is not enforced by the runner, budget %.4f may be exceeded.",
                max_tokens,
                budget,
            )

        trace = ExecutionTrace(strategy=self.name)
        result = trace.record(
            await self.runner.run(
                Invocation(model_id=self.model, prompt=prompt, max_tokens=max_tokens),
            ),
        )
        return trace.finish(
            result_text=result.output_text,
            quality_score=COST_OPTIMIZED_QUALITY_SCORE,
        )

    def max_output_tokens(self, prompt: str, budget: float) -> int:
        """Compute output-token ceiling that keeps the call within budget."""

        if not math.isfinite(budget) or budget <= 0:
            raise ValidationError(f"max_cost must be a positive finite number, got {budget}.")
        pricing = self.pricing.lookup(self.model)
        prompt_cost = estimate_tokens(prompt) / 1_000_000 * pricing.input_per_1m
        allowance = budget - prompt_cost
        if allowance <= 0:
            raise ValidationError(
                f"Budget ${budget:.4f} does not cover the estimated prompt cost "
                f"${prompt_cost:.4f} for model={self.model}.",
            )
        if pricing.output_per_1m <= 0:
            return self.token_cap

        affordable = math.floor(allowance / pricing.output_per_1m * 1_000_000 / SAFETY_DIVISOR)
        max_tokens = min(affordable, self.token_cap)
        if max_tokens < 1:
            raise ValidationError(
                f"Budget ${budget:.4f} leaves no room for output tokens on model={self.model}.",
            )
        return max_tokens

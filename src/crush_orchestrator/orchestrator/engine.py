"""Strategy registry and the two public entry points: execute and estimate."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from types import MappingProxyType

from crush_orchestrator.config import Settings
from crush_orchestrator.orchestrator.evaluator import QualityEvaluator
from crush_orchestrator.orchestrator.models import (
    EstimateResult,
    ExecutionRequest,
    ExecutionResult,
    StrategyName,
    ValidationError,
)
from crush_orchestrator.orchestrator.pricing import PricingTable
from crush_orchestrator.orchestrator.profiles import STRATEGY_PROFILES, prompt_scale
from crush_orchestrator.orchestrator.runner.base import Runner
from crush_orchestrator.orchestrator.runner.cli_runner import CliRunner
from crush_orchestrator.orchestrator.strategies import (
    BalancedStrategy,
    CostOptimizedStrategy,
    FastStrategy,
    QualityStrategy,
    Strategy,
)
from crush_orchestrator.orchestrator.usage import estimate_tokens

logger = logging.getLogger(__name__)

SUPPORTED_STRATEGIES = tuple(name.value for name in StrategyName)


class Orchestrator:
    """Dispatch requests to a static registry of strategies."""

    def __init__(
        self,
        *,
        runner: Runner,
        settings: Settings | None = None,
        pricing: PricingTable | None = None,
        evaluator: QualityEvaluator | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.pricing = pricing or PricingTable.with_overrides(
            self.settings.runner.pricing_overrides,
        )
        self.evaluator = evaluator or QualityEvaluator()
        self.default_strategy = resolve_strategy_name(self.settings.strategies.default_strategy)
        self._strategies = build_registry(
            runner=runner,
            settings=self.settings,
            pricing=self.pricing,
            evaluator=self.evaluator,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> Orchestrator:
        """Build orchestrator backed by the external CLI runner."""

        settings.validate()
        pricing = PricingTable.with_overrides(settings.runner.pricing_overrides)
        return cls(
            runner=CliRunner(settings=settings.runner, pricing=pricing),
            settings=settings,
            pricing=pricing,
        )

    @property
    def strategies(self) -> Mapping[StrategyName, Strategy]:
        return self._strategies

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        """Run the selected strategy for one request."""

        strategy_name = self._validate(request)
        strategy = self._strategies[strategy_name]
        prompt = request.effective_prompt()
        logger.info(
            "Executing strategy=%s prompt_chars=%d max_cost=%s",
            strategy_name.value,
            len(prompt),
            request.max_cost,
        )
        result = await strategy.execute(prompt, request.max_cost)
        logger.info(
            "Strategy finished: strategy=%s iterations=%d models=%s cost=%.6f "
            "quality=%.2f elapsed=%.2fs",
            result.strategy.value,
            result.iterations,
            ",".join(result.models_used),
            result.total_cost,
            result.quality_score,
            result.execution_time_seconds,
        )
        return result

    def estimate(self, request: ExecutionRequest) -> EstimateResult:
        """Project cost, time and quality without invoking the runner."""

        strategy_name = self._validate(request)
        profile = STRATEGY_PROFILES[strategy_name]
        if strategy_name == StrategyName.COST_OPTIMIZED:
            estimated_cost = (
                request.max_cost
                if request.max_cost is not None
                else self.settings.strategies.cost_optimized_default_max_cost
            )
        else:
            prompt_tokens = estimate_tokens(request.effective_prompt())
            estimated_cost = profile.estimated_cost * prompt_scale(prompt_tokens)
        return EstimateResult(
            estimated_cost=estimated_cost,
            estimated_time_seconds=profile.estimated_time_seconds,
            expected_quality=profile.expected_quality,
            strategy=strategy_name,
        )

    def _validate(self, request: ExecutionRequest) -> StrategyName:
        if not request.prompt or not request.prompt.strip():
            raise ValidationError("Prompt must be a non-empty string.")
        if request.max_cost is not None and (
            not math.isfinite(request.max_cost) or request.max_cost <= 0
        ):
            raise ValidationError(
                f"max_cost must be a positive finite number, got {request.max_cost}.",
            )
        if request.strategy is None:
            return self.default_strategy
        return resolve_strategy_name(request.strategy)


def resolve_strategy_name(value: StrategyName | str) -> StrategyName:
    """Map a strategy name to the registry key, rejecting unknown names."""

    if isinstance(value, StrategyName):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"Strategy must be a string, got {type(value).__name__}.")
    normalized = value.strip().lower()
    try:
        return StrategyName(normalized)
    except ValueError as error:
        raise ValidationError(
            f"Unknown strategy: {value!r}. Use one of {', '.join(SUPPORTED_STRATEGIES)}.",
        ) from error


def build_registry(
    *,
    runner: Runner,
    settings: Settings,
    pricing: PricingTable,
    evaluator: QualityEvaluator,
) -> Mapping[StrategyName, Strategy]:
    """Instantiate every strategy once; the mapping is read-only afterwards."""

    models = settings.models
    tuning = settings.strategies
    registry: dict[StrategyName, Strategy] = {
        StrategyName.FAST: FastStrategy(runner, model=models.fast),
        StrategyName.BALANCED: BalancedStrategy(
            runner,
            evaluator,
            outline_model=models.fast,
            refine_model=models.quality,
        ),
        StrategyName.QUALITY: QualityStrategy(
            runner,
            evaluator,
            outline_model=models.fast,
            primary_model=models.premium,
            alternate_model=models.quality,
            max_iterations=tuning.quality_max_iterations,
            quality_threshold=tuning.quality_threshold,
        ),
        StrategyName.COST_OPTIMIZED: CostOptimizedStrategy(
            runner,
            pricing,
            model=models.fast,
            default_max_cost=tuning.cost_optimized_default_max_cost,
            token_cap=tuning.cost_optimized_token_cap,
            ceiling_forwarded=settings.runner.forwards_max_tokens,
        ),
    }
    return MappingProxyType(registry)

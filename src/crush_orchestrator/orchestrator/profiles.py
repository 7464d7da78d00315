"""Static cost/latency/quality profiles used for estimates."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from crush_orchestrator.orchestrator.models import StrategyName

REFERENCE_PROMPT_TOKENS = 500


@dataclass(frozen=True, slots=True)
class StrategyProfile:
    """Typical cost and latency for a reference-size prompt."""

    estimated_cost: float
    estimated_time_seconds: float
    expected_quality: float
    description: str


STRATEGY_PROFILES: Mapping[StrategyName, StrategyProfile] = MappingProxyType(
    {
        StrategyName.FAST: StrategyProfile(
            estimated_cost=0.002,
            estimated_time_seconds=5,
            expected_quality=0.6,
            description="Single cheap model call. Target <10s, <$0.005.",
        ),
        StrategyName.BALANCED: StrategyProfile(
            estimated_cost=0.015,
            estimated_time_seconds=20,
            expected_quality=0.75,
            description="Fast outline refined by a stronger model. Target <30s, ~$0.015.",
        ),
        StrategyName.QUALITY: StrategyProfile(
            estimated_cost=0.06,
            estimated_time_seconds=45,
            expected_quality=0.9,
            description="Outline, detailed analysis and gated refinement. Target <60s, ~$0.06.",
        ),
        StrategyName.COST_OPTIMIZED: StrategyProfile(
            estimated_cost=0.01,
            estimated_time_seconds=8,
            expected_quality=0.5,
            description="Single budget-bounded call to the cheapest model.",
        ),
    },
)


def prompt_scale(prompt_tokens: int) -> float:
    """Cost multiplier for prompts larger than the reference size."""

    return max(1.0, prompt_tokens / REFERENCE_PROMPT_TOKENS)

"""Token cost estimation helpers for model invocations."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

FALLBACK_MODEL = "claude-haiku-4-5"
WILDCARD = "*"


@dataclass(frozen=True, slots=True)
class ModelPricing:
    """Per-model input/output pricing in USD per 1M tokens."""

    input_per_1m: float
    output_per_1m: float


DEFAULT_PRICING: Mapping[str, ModelPricing] = MappingProxyType(
    {
        "grok-3-mini": ModelPricing(input_per_1m=0.50, output_per_1m=0.50),
        "grok-code-fast": ModelPricing(input_per_1m=0.50, output_per_1m=0.50),
        "claude-haiku-4-5": ModelPricing(input_per_1m=1.00, output_per_1m=5.00),
        "claude-haiku-4-5-20251001": ModelPricing(input_per_1m=1.00, output_per_1m=5.00),
        "claude-sonnet-4-5": ModelPricing(input_per_1m=3.00, output_per_1m=15.00),
        "claude-sonnet-4-5-20250929": ModelPricing(input_per_1m=3.00, output_per_1m=15.00),
        "claude-opus-4-1": ModelPricing(input_per_1m=15.00, output_per_1m=75.00),
    },
)


class PricingTable:
    """Immutable model pricing lookup built once at startup."""

    def __init__(self, entries: Mapping[str, ModelPricing] | None = None) -> None:
        merged = dict(DEFAULT_PRICING if entries is None else entries)
        self._entries: Mapping[str, ModelPricing] = MappingProxyType(merged)

    @classmethod
    def with_overrides(cls, raw: str) -> PricingTable:
        """Build table from defaults extended by `model:in:out` overrides."""

        merged = dict(DEFAULT_PRICING)
        merged.update(parse_pricing_overrides(raw))
        return cls(merged)

    @property
    def models(self) -> tuple[str, ...]:
        return tuple(name for name in self._entries if name != WILDCARD)

    def lookup(self, model_id: str) -> ModelPricing:
        """Return pricing for model, falling back to wildcard then default tier."""

        direct = self._entries.get(model_id.strip())
        if direct is not None:
            return direct
        wildcard = self._entries.get(WILDCARD)
        if wildcard is not None:
            return wildcard
        fallback = self._entries.get(FALLBACK_MODEL)
        if fallback is not None:
            return fallback
        return DEFAULT_PRICING[FALLBACK_MODEL]

    def cost_usd(self, *, model_id: str, tokens_in: int, tokens_out: int) -> float:
        """Compute invocation cost in USD from token counts."""

        pricing = self.lookup(model_id)
        return (tokens_in / 1_000_000) * pricing.input_per_1m + (
            tokens_out / 1_000_000
        ) * pricing.output_per_1m


def parse_pricing_overrides(raw: str) -> dict[str, ModelPricing]:
    """Parse `CRUSH_PRICING` mapping.

    Format:
    - `model:input_per_1m:output_per_1m`
    - multiple entries separated by `,`
    - `*` as model defines the fallback row for unknown models

    Malformed, non-finite or negative rows are skipped.
    """

    parsed: dict[str, ModelPricing] = {}
    if not raw.strip():
        return parsed

    for entry in raw.split(","):
        value = entry.strip()
        if not value:
            continue
        parts = [part.strip() for part in value.rsplit(":", 2)]
        if len(parts) != 3 or not parts[0]:
            continue
        model, input_price, output_price = parts
        try:
            input_per_1m = float(input_price)
            output_per_1m = float(output_price)
        except ValueError:
            continue
        if not (math.isfinite(input_per_1m) and math.isfinite(output_per_1m)):
            continue
        if input_per_1m < 0 or output_per_1m < 0:
            continue
        parsed[model] = ModelPricing(input_per_1m=input_per_1m, output_per_1m=output_per_1m)
    return parsed

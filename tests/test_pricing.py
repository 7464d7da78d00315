from __future__ import annotations

import allure
import pytest

from crush_orchestrator.orchestrator.pricing import (
    DEFAULT_PRICING,
    ModelPricing,
    PricingTable,
    parse_pricing_overrides,
)

pytestmark = [
    allure.epic("Runner Client"),
    allure.feature("Pricing"),
]


def test_cost_uses_input_and_output_rates_per_million() -> None:
    table = PricingTable()
    cost = table.cost_usd(model_id="claude-sonnet-4-5", tokens_in=1_000_000, tokens_out=500_000)
    assert cost == pytest.approx(3.0 + 7.5)


def test_cost_is_deterministic_for_same_tokens() -> None:
    table = PricingTable()
    first = table.cost_usd(model_id="grok-3-mini", tokens_in=1234, tokens_out=567)
    second = table.cost_usd(model_id="grok-3-mini", tokens_in=1234, tokens_out=567)
    assert first == second


def test_unknown_model_falls_back_to_haiku_rates() -> None:
    table = PricingTable()
    assert table.lookup("mystery-model") == DEFAULT_PRICING["claude-haiku-4-5"]


def test_overrides_extend_defaults_and_wildcard_wins_for_unknown_models() -> None:
    table = PricingTable.with_overrides("custom-model:2.0:4.0,*:9.0:9.0")
    assert table.lookup("custom-model") == ModelPricing(input_per_1m=2.0, output_per_1m=4.0)
    assert table.lookup("grok-3-mini") == DEFAULT_PRICING["grok-3-mini"]
    assert table.lookup("unlisted") == ModelPricing(input_per_1m=9.0, output_per_1m=9.0)
    assert "*" not in table.models


def test_parse_overrides_skips_malformed_and_negative_rows() -> None:
    parsed = parse_pricing_overrides("bad-row, a:1:x, b:-1:2, c:0.5:0.25,,")
    assert parsed == {"c": ModelPricing(input_per_1m=0.5, output_per_1m=0.25)}


def test_pricing_table_is_read_only() -> None:
    table = PricingTable()
    with pytest.raises(TypeError):
        table._entries["grok-3-mini"] = ModelPricing(0, 0)  # type: ignore[index]


@pytest.mark.parametrize(
    "raw",
    ["grok-3-mini:nan:nan", "grok-3-mini:inf:0.5", "grok-3-mini:0.5:-inf", "*:nan:1"],
)
def test_non_finite_override_rows_are_skipped(raw: str) -> None:
    assert parse_pricing_overrides(raw) == {}

    table = PricingTable.with_overrides(raw)
    cost = table.cost_usd(model_id="grok-3-mini", tokens_in=1000, tokens_out=1000)
    assert cost == pytest.approx(0.001)

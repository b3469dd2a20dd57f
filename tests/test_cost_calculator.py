"""Tests for CostCalculator."""

from __future__ import annotations

import pytest

from jasaoseo.logging.cost_calculator import (
    MODEL_PRICING,
    WEB_SEARCH_COST_PER_USE,
    calculate_cost,
)


class TestCostCalculator:
    def test_haiku_cost(self):
        # 1M input + 1M output for Haiku: $1.00 + $5.00 = $6.00
        cost = calculate_cost([("claude-haiku-4-5-20251001", 1_000_000, 1_000_000)])
        assert cost == pytest.approx(6.00)

    def test_sonnet_cost(self):
        # 1M input + 1M output for Sonnet: $3.00 + $15.00 = $18.00
        cost = calculate_cost([("claude-sonnet-4-6", 1_000_000, 1_000_000)])
        assert cost == pytest.approx(18.00)

    def test_five_stage_run(self):
        calls = [("claude-sonnet-4-6", 2000, 1000)] * 5
        expected = 5 * ((2000 / 1e6) * 3.00 + (1000 / 1e6) * 15.00)
        assert calculate_cost(calls) == pytest.approx(expected)

    def test_web_search_cost(self):
        assert calculate_cost([], search_count=5) == pytest.approx(5 * WEB_SEARCH_COST_PER_USE)

    def test_unknown_model_is_free(self):
        assert calculate_cost([("unknown-model", 1_000_000, 1_000_000)]) == 0.0

    def test_empty(self):
        assert calculate_cost([]) == 0.0

    def test_pricing_has_both_models(self):
        assert set(MODEL_PRICING) == {
            "claude-haiku-4-5-20251001",
            "claude-sonnet-4-6",
        }

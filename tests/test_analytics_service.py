"""Tests for the concentration, allocation and diversification analyzers."""

import math
import pytest
from datetime import datetime, timezone

from app.models import Holding
from app.services.analytics import (
    AllocationAggregator, AnalyticsThresholds, ConcentrationAnalyzer,
    DiversificationScorer, allocation_fraction
)
from app.services.engine import compute_analytics
from conftest import make_holding

FIXED_TIME = datetime(2026, 1, 2, 15, 30, tzinfo=timezone.utc)


# Concentration

def test_concentration_empty_is_neutral():
    risk = ConcentrationAnalyzer().analyze([])
    assert risk.top_holding_symbol == ""
    assert risk.top_holding_name == ""
    assert risk.top_holding_weight == 0
    assert risk.herfindahl_index == 0
    assert risk.is_highly_concentrated is False


def test_concentration_mixed_portfolio(mixed_holdings):
    risk = ConcentrationAnalyzer().analyze(mixed_holdings)
    assert risk.top_holding_symbol == "VTI"
    assert risk.top_holding_name == "Vanguard Total Stock Market ETF"
    assert risk.top_holding_weight == pytest.approx(0.30)
    assert risk.herfindahl_index == pytest.approx(0.225)
    assert risk.is_highly_concentrated is False


def test_concentration_tie_keeps_first_holding():
    holdings = [
        make_holding("MSFT", 0.3, "EQUITY"),
        make_holding("AAPL", 0.3, "EQUITY"),
        make_holding("BND", 0.2, "FIXED_INCOME"),
    ]
    assert ConcentrationAnalyzer().analyze(holdings).top_holding_symbol == "MSFT"


def test_concentration_name_falls_back_to_symbol():
    risk = ConcentrationAnalyzer().analyze([make_holding("TSLA", 0.4, "EQUITY")])
    assert risk.top_holding_name == "TSLA"


def test_concentration_missing_weights_count_as_zero():
    holdings = [
        make_holding("AAA", None, "EQUITY"),
        make_holding("BBB", 0.1, "EQUITY"),
    ]
    risk = ConcentrationAnalyzer().analyze(holdings)
    assert risk.top_holding_symbol == "BBB"
    assert risk.herfindahl_index == pytest.approx(0.01)


def test_concentration_hhi_rounded_to_four_decimals():
    holdings = [make_holding(f"S{i}", 1 / 3, "EQUITY") for i in range(3)]
    assert ConcentrationAnalyzer().analyze(holdings).herfindahl_index == 0.3333


def test_concentration_threshold_is_strict():
    # A single half-weight holding sits exactly on the 0.25 line
    risk = ConcentrationAnalyzer().analyze([make_holding("SPY", 0.5, "EQUITY")])
    assert risk.herfindahl_index == 0.25
    assert risk.is_highly_concentrated is False


def test_concentration_over_summed_weights_stay_bounded():
    holdings = [make_holding("A", 0.9, "EQUITY"), make_holding("B", 0.9, "EQUITY")]
    risk = ConcentrationAnalyzer().analyze(holdings)
    assert risk.herfindahl_index == 1.0
    assert risk.is_highly_concentrated is True


def test_concentration_custom_threshold():
    thresholds = AnalyticsThresholds(high_concentration_hhi=0.1)
    holdings = [make_holding("A", 0.4, "EQUITY"), make_holding("B", 0.6, "EQUITY")]
    assert ConcentrationAnalyzer(thresholds).analyze(holdings).is_highly_concentrated is True


@pytest.mark.parametrize("weights", [
    [],
    [0.0],
    [1.0],
    [0.25] * 4,
    [0.6, 0.3, 0.1],
    [0.7, 0.7, 0.7],
    [-0.2, 0.5, None],
])
def test_hhi_bounds_and_flag_consistency(weights):
    holdings = [make_holding(f"S{i}", w, "EQUITY") for i, w in enumerate(weights)]
    risk = ConcentrationAnalyzer().analyze(holdings)
    assert 0 <= risk.herfindahl_index <= 1
    assert risk.is_highly_concentrated == (risk.herfindahl_index > 0.25)


def test_allocation_fraction_clamps_and_defaults():
    assert allocation_fraction(Holding(symbol="X")) == 0.0
    assert allocation_fraction(Holding(symbol="X", allocation_fraction=-0.1)) == 0.0
    assert allocation_fraction(Holding(symbol="X", allocation_fraction=1.5)) == 1.0
    assert allocation_fraction(Holding(symbol="X", allocation_fraction=0.42)) == 0.42


# Allocation

def test_allocation_groups_and_sorts(mixed_holdings):
    allocation = AllocationAggregator().aggregate(mixed_holdings)
    assert [e.asset_class for e in allocation] == [
        "EQUITY", "FIXED_INCOME", "COMMODITY", "LIQUIDITY"
    ]
    equity = allocation[0]
    assert equity.weight == pytest.approx(0.5)
    assert equity.value_in_base_currency == pytest.approx(50000.0)


def test_allocation_missing_class_is_unknown():
    allocation = AllocationAggregator().aggregate([
        make_holding("MYST", 0.4),
        make_holding("SPY", 0.6, "EQUITY"),
    ])
    assert [e.asset_class for e in allocation] == ["EQUITY", "UNKNOWN"]


def test_allocation_ties_keep_encounter_order(even_holdings):
    allocation = AllocationAggregator().aggregate(even_holdings)
    assert [e.asset_class for e in allocation] == [
        "EQUITY", "FIXED_INCOME", "COMMODITY", "REAL_ESTATE", "ALTERNATIVE_INVESTMENT"
    ]


def test_allocation_keeps_full_precision():
    allocation = AllocationAggregator().aggregate([make_holding("A", 1 / 3, "EQUITY")])
    assert allocation[0].weight == 1 / 3


def test_allocation_conservation(mixed_holdings):
    allocation = AllocationAggregator().aggregate(mixed_holdings)
    total_entries = sum(e.weight for e in allocation)
    total_holdings = sum(h.allocation_fraction for h in mixed_holdings)
    assert total_entries == pytest.approx(total_holdings, abs=1e-4)


def test_allocation_missing_values_default_to_zero():
    allocation = AllocationAggregator().aggregate([make_holding("A", 0.5, "EQUITY")])
    assert allocation[0].value_in_base_currency == 0.0


def test_allocation_empty():
    assert AllocationAggregator().aggregate([]) == []


# Diversification

def _score(holdings):
    allocation = AllocationAggregator().aggregate(holdings)
    return DiversificationScorer().score(holdings, allocation)


def test_diversification_empty_scores_zero():
    result = _score([])
    assert result.score == 0
    assert result.holdings_count == 0
    assert result.asset_class_count == 0
    assert result.top_asset_class == "UNKNOWN"
    assert result.top_asset_class_weight == 0


def test_diversification_single_full_weight_holding():
    result = _score([make_holding("AAPL", 1.0, "EQUITY")])
    # 40 * 1/20 + 30 * 1/5 + 0 evenness
    assert result.score == 8
    assert result.holdings_count == 1
    assert result.asset_class_count == 1
    assert result.top_asset_class == "EQUITY"
    assert result.top_asset_class_weight == 1.0


def test_diversification_even_portfolio(even_holdings):
    result = _score(even_holdings)
    # 40 + 30 + (1 - 0.2) * 30
    assert result.score == 94
    assert result.holdings_count == 20
    assert result.asset_class_count == 5


def test_diversification_mixed_portfolio(mixed_holdings):
    result = _score(mixed_holdings)
    # 8 + 18 + (1 - 0.335) * 30 = 45.95
    assert result.score == 46
    assert result.holdings_count == 4
    assert result.asset_class_count == 3
    assert result.top_asset_class == "EQUITY"


def test_diversification_ignores_liquidity_and_unknown():
    holdings = [
        make_holding("USD", 0.5, "LIQUIDITY"),
        make_holding("MYST", 0.5),
    ]
    result = _score(holdings)
    assert result.holdings_count == 1  # UNKNOWN still counts as a holding
    assert result.asset_class_count == 0
    # 40 * 1/20 + 0 + (1 - 0) * 30
    assert result.score == 32


def test_diversification_unclassified_portfolio_is_evenly_spread():
    result = _score([make_holding(f"S{i}", 0.05) for i in range(20)])
    # 40 + 0 + 30: no classified weight to concentrate
    assert result.asset_class_count == 0
    assert result.score == 70


def test_diversification_cash_only_portfolio():
    result = _score([make_holding("USD", 1.0, "LIQUIDITY")])
    assert result.holdings_count == 0
    assert result.top_asset_class == "LIQUIDITY"
    assert result.score == 30


def test_diversification_score_is_capped_at_100(even_holdings):
    generous = AnalyticsThresholds(holdings_points=60.0, asset_class_points=60.0)
    allocation = AllocationAggregator().aggregate(even_holdings)
    assert DiversificationScorer(generous).score(even_holdings, allocation).score == 100


@pytest.mark.parametrize("count", [0, 1, 3, 7, 25, 60])
def test_diversification_score_bounds(count):
    holdings = [make_holding(f"S{i}", 1 / max(count, 1), "EQUITY") for i in range(count)]
    assert 0 <= _score(holdings).score <= 100


# Full computation

def test_compute_analytics_is_idempotent(mixed_holdings):
    first = compute_analytics(mixed_holdings, "USD", computed_at=FIXED_TIME)
    second = compute_analytics(mixed_holdings, "USD", computed_at=FIXED_TIME)
    assert first == second


def test_compute_analytics_stamps_utc_time(mixed_holdings):
    analytics = compute_analytics(mixed_holdings, "USD")
    assert analytics.computed_at.tzinfo is not None
    assert analytics.computed_at.utcoffset().total_seconds() == 0


def test_compute_analytics_empty_portfolio():
    analytics = compute_analytics([], "EUR", computed_at=FIXED_TIME)
    assert analytics.base_currency == "EUR"
    assert analytics.allocation == ()
    assert analytics.diversification.score == 0
    assert analytics.concentration.herfindahl_index == 0
    assert analytics.insights == (
        "Low diversification (score: 0/100). "
        "Portfolio is heavily weighted in UNKNOWN (0.0%).",
        "No significant fixed income allocation detected.",
    )


def test_compute_analytics_single_holding():
    analytics = compute_analytics(
        [make_holding("AAPL", 1.0, "EQUITY")], "USD", computed_at=FIXED_TIME
    )
    assert analytics.concentration.herfindahl_index == 1.0
    assert analytics.concentration.is_highly_concentrated is True
    assert analytics.diversification.score == 8
    assert analytics.insights == (
        "High concentration risk: AAPL (AAPL) represents 100.0% of the portfolio. "
        "HHI is 1.0000, which exceeds the 0.25 threshold.",
        "Low diversification (score: 8/100). "
        "Portfolio is heavily weighted in EQUITY (100.0%).",
        "Portfolio is 100.0% equities; consider adding bonds or fixed income for stability.",
        "No significant fixed income allocation detected.",
    )


def test_compute_analytics_does_not_mutate_input(mixed_holdings):
    before = [h.model_copy() for h in mixed_holdings]
    compute_analytics(mixed_holdings, "USD")
    assert mixed_holdings == before


def test_compute_analytics_equity_heavy_without_fixed_income():
    holdings = [make_holding(f"EQ{i}", 0.1, "EQUITY") for i in range(9)]
    holdings.append(make_holding("USD", 0.1, "LIQUIDITY"))
    analytics = compute_analytics(holdings, "USD", computed_at=FIXED_TIME)

    insights = list(analytics.insights)
    equity = insights.index(
        "Portfolio is 90.0% equities; consider adding bonds or fixed income for stability."
    )
    fixed_income = insights.index("No significant fixed income allocation detected.")
    assert equity < fixed_income


@pytest.mark.parametrize("bad_value", [math.nan, math.inf, -250.0, None])
def test_compute_analytics_tolerates_malformed_values(bad_value):
    holdings = [
        make_holding("A", 0.5, "EQUITY", value_in_base_currency=bad_value, market_price=bad_value),
        make_holding("B", 0.5, "FIXED_INCOME", value_in_base_currency=100.0),
    ]
    analytics = compute_analytics(holdings, "USD", computed_at=FIXED_TIME)

    values = {e.asset_class: e.value_in_base_currency for e in analytics.allocation}
    assert values == {"EQUITY": 0.0, "FIXED_INCOME": 100.0}

"""Rule-based insight strings derived from portfolio metrics."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from ..models import AllocationEntry, AssetClass, ConcentrationRisk, DiversificationScore
from .analytics import AnalyticsThresholds, DEFAULT_THRESHOLDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsightContext:
    """Metric bundle every rule is evaluated against."""
    concentration: ConcentrationRisk
    diversification: DiversificationScore
    allocation: Tuple[AllocationEntry, ...]
    thresholds: AnalyticsThresholds = DEFAULT_THRESHOLDS

    def allocation_weight(self, asset_class: str) -> Optional[float]:
        """Weight of an asset class, or None when it is not held."""
        for entry in self.allocation:
            if entry.asset_class == asset_class:
                return entry.weight
        return None


@dataclass(frozen=True)
class InsightRule:
    """A predicate plus the message it emits when the predicate holds."""
    name: str
    applies: Callable[[InsightContext], bool]
    render: Callable[[InsightContext], str]


def format_percent(fraction: float) -> str:
    return f"{fraction * 100:.1f}%"


# Concentration

def _is_highly_concentrated(ctx: InsightContext) -> bool:
    return ctx.concentration.is_highly_concentrated


def _high_concentration(ctx: InsightContext) -> str:
    c = ctx.concentration
    return (
        f"High concentration risk: {c.top_holding_name} ({c.top_holding_symbol}) "
        f"represents {format_percent(c.top_holding_weight)} of the portfolio. "
        f"HHI is {c.herfindahl_index:.4f}, which exceeds the "
        f"{ctx.thresholds.high_concentration_hhi:g} threshold."
    )


def _is_moderately_concentrated(ctx: InsightContext) -> bool:
    # Keyed on the top holding weight, not the HHI
    return (
        not ctx.concentration.is_highly_concentrated
        and ctx.concentration.top_holding_weight > ctx.thresholds.moderate_top_holding_weight
    )


def _moderate_concentration(ctx: InsightContext) -> str:
    c = ctx.concentration
    return (
        f"Moderate concentration: {c.top_holding_name} is the largest position "
        f"at {format_percent(c.top_holding_weight)}."
    )


# Diversification; exactly one of the three applies

def _is_well_diversified(ctx: InsightContext) -> bool:
    return ctx.diversification.score >= ctx.thresholds.good_score


def _good_diversification(ctx: InsightContext) -> str:
    d = ctx.diversification
    return (
        f"Good diversification (score: {d.score}/100) across "
        f"{d.holdings_count} holdings and {d.asset_class_count} asset classes."
    )


def _is_moderately_diversified(ctx: InsightContext) -> bool:
    t = ctx.thresholds
    return t.moderate_score <= ctx.diversification.score < t.good_score


def _moderate_diversification(ctx: InsightContext) -> str:
    return (
        f"Moderate diversification (score: {ctx.diversification.score}/100). "
        "Consider adding more asset classes or holdings."
    )


def _is_poorly_diversified(ctx: InsightContext) -> bool:
    return ctx.diversification.score < ctx.thresholds.moderate_score


def _low_diversification(ctx: InsightContext) -> str:
    d = ctx.diversification
    return (
        f"Low diversification (score: {d.score}/100). "
        f"Portfolio is heavily weighted in {d.top_asset_class} "
        f"({format_percent(d.top_asset_class_weight)})."
    )


# Asset classes

def _is_equity_overweight(ctx: InsightContext) -> bool:
    weight = ctx.allocation_weight(AssetClass.EQUITY.value)
    return weight is not None and weight > ctx.thresholds.equity_overweight


def _equity_overweight(ctx: InsightContext) -> str:
    weight = ctx.allocation_weight(AssetClass.EQUITY.value)
    return (
        f"Portfolio is {format_percent(weight)} equities; "
        "consider adding bonds or fixed income for stability."
    )


def _lacks_fixed_income(ctx: InsightContext) -> bool:
    weight = ctx.allocation_weight(AssetClass.FIXED_INCOME.value)
    return weight is None or weight < ctx.thresholds.min_fixed_income_weight


def _fixed_income_absent(ctx: InsightContext) -> str:
    return "No significant fixed income allocation detected."


INSIGHT_RULES: Tuple[InsightRule, ...] = (
    InsightRule("high_concentration", _is_highly_concentrated, _high_concentration),
    InsightRule("moderate_concentration", _is_moderately_concentrated, _moderate_concentration),
    InsightRule("good_diversification", _is_well_diversified, _good_diversification),
    InsightRule("moderate_diversification", _is_moderately_diversified, _moderate_diversification),
    InsightRule("low_diversification", _is_poorly_diversified, _low_diversification),
    InsightRule("equity_overweight", _is_equity_overweight, _equity_overweight),
    InsightRule("fixed_income_absent", _lacks_fixed_income, _fixed_income_absent),
)


class InsightGenerator:
    """Evaluates insight rules in order and collects the messages that apply."""

    def __init__(
        self,
        rules: Sequence[InsightRule] = INSIGHT_RULES,
        thresholds: AnalyticsThresholds = DEFAULT_THRESHOLDS
    ):
        self.rules = tuple(rules)
        self.thresholds = thresholds

    def generate(
        self,
        concentration: ConcentrationRisk,
        diversification: DiversificationScore,
        allocation: Sequence[AllocationEntry]
    ) -> List[str]:
        ctx = InsightContext(
            concentration=concentration,
            diversification=diversification,
            allocation=tuple(allocation),
            thresholds=self.thresholds,
        )

        insights = []
        for rule in self.rules:
            if rule.applies(ctx):
                insights.append(rule.render(ctx))
                logger.debug(f"Insight rule {rule.name} fired")
        return insights

"""Concentration, allocation and diversification metrics for a holdings snapshot.

All metrics are computed on allocation fractions (0-1) at full precision.
Percentage scaling and display rounding happen in ``responses``.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Sequence

from ..models import (
    AllocationEntry, AssetClass, ConcentrationRisk, DiversificationScore, Holding
)

logger = logging.getLogger(__name__)

HHI_DECIMALS = 4

# Asset classes that do not count toward asset-class variety or evenness
NON_DIVERSIFYING_CLASSES = frozenset({AssetClass.LIQUIDITY.value, AssetClass.UNKNOWN.value})


@dataclass(frozen=True)
class AnalyticsThresholds:
    """Fixed thresholds and scoring caps used by the scorer and insight rules."""
    high_concentration_hhi: float = 0.25
    moderate_top_holding_weight: float = 0.15
    equity_overweight: float = 0.8
    min_fixed_income_weight: float = 0.05

    holdings_cap: int = 20
    asset_class_cap: int = 5
    holdings_points: float = 40.0
    asset_class_points: float = 30.0
    evenness_points: float = 30.0

    good_score: int = 70
    moderate_score: int = 40


DEFAULT_THRESHOLDS = AnalyticsThresholds()


def allocation_fraction(holding: Holding) -> float:
    """Allocation fraction of a holding, 0 when absent, clamped into [0, 1]."""
    value = holding.allocation_fraction
    if value is None or math.isnan(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


def non_negative(value) -> float:
    """Numeric field as a finite non-negative float; None, NaN and negatives become 0."""
    if value is None or not math.isfinite(value):
        return 0.0
    return max(value, 0.0)


def asset_class_of(holding: Holding) -> str:
    return holding.asset_class or AssetClass.UNKNOWN.value


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ConcentrationAnalyzer:
    """Top holding and Herfindahl-Hirschman Index over all holdings."""

    def __init__(self, thresholds: AnalyticsThresholds = DEFAULT_THRESHOLDS):
        self.thresholds = thresholds

    def analyze(self, holdings: Sequence[Holding]) -> ConcentrationRisk:
        if not holdings:
            return ConcentrationRisk()

        # max() keeps the first of equally weighted holdings
        top = max(holdings, key=allocation_fraction)

        hhi = sum(allocation_fraction(h) ** 2 for h in holdings)
        # Over-summed weights can push the raw index past 1
        hhi = min(round(hhi, HHI_DECIMALS), 1.0)

        return ConcentrationRisk(
            top_holding_symbol=top.symbol or "",
            top_holding_name=top.name or top.symbol or "",
            top_holding_weight=allocation_fraction(top),
            herfindahl_index=hhi,
            is_highly_concentrated=hhi > self.thresholds.high_concentration_hhi,
        )


class AllocationAggregator:
    """Groups holdings into per-asset-class weight and value buckets."""

    def aggregate(self, holdings: Sequence[Holding]) -> List[AllocationEntry]:
        """Return one entry per asset class, heaviest first.

        Groups keep the order in which they were first seen, so equally
        weighted classes stay in encounter order after the stable sort.
        """
        weights: Dict[str, float] = {}
        values: Dict[str, float] = {}

        for holding in holdings:
            asset_class = asset_class_of(holding)
            weights[asset_class] = weights.get(asset_class, 0.0) + allocation_fraction(holding)
            value = non_negative(holding.value_in_base_currency)
            values[asset_class] = values.get(asset_class, 0.0) + value

        entries = [
            AllocationEntry(
                asset_class=asset_class,
                weight=weight,
                value_in_base_currency=values[asset_class],
            )
            for asset_class, weight in weights.items()
        ]
        return sorted(entries, key=lambda entry: entry.weight, reverse=True)


class DiversificationScorer:
    """Blends holding breadth, asset-class variety and evenness into a 0-100 score.

    - breadth: non-liquidity holdings, full points at ``holdings_cap``
    - variety: asset classes other than LIQUIDITY/UNKNOWN, full points at
      ``asset_class_cap``
    - evenness: ``1 - HHI`` of those asset-class weights; an empty
      snapshot earns nothing
    """

    def __init__(self, thresholds: AnalyticsThresholds = DEFAULT_THRESHOLDS):
        self.thresholds = thresholds

    def score(
        self,
        holdings: Sequence[Holding],
        allocation: Sequence[AllocationEntry]
    ) -> DiversificationScore:
        t = self.thresholds

        holdings_count = sum(
            1 for h in holdings if asset_class_of(h) != AssetClass.LIQUIDITY.value
        )
        diversifying = [
            entry for entry in allocation
            if entry.asset_class not in NON_DIVERSIFYING_CLASSES
        ]
        asset_class_count = len(diversifying)

        if allocation:
            top_asset_class = allocation[0].asset_class
            top_asset_class_weight = allocation[0].weight
        else:
            top_asset_class = AssetClass.UNKNOWN.value
            top_asset_class_weight = 0.0

        holdings_score = min(holdings_count / t.holdings_cap, 1.0) * t.holdings_points
        class_score = min(asset_class_count / t.asset_class_cap, 1.0) * t.asset_class_points

        # An empty snapshot is neutral rather than perfectly even
        evenness_score = 0.0
        if holdings:
            class_hhi = sum(entry.weight ** 2 for entry in diversifying)
            evenness_score = max(0.0, 1.0 - class_hhi) * t.evenness_points

        score = round_half_up(min(holdings_score + class_score + evenness_score, 100.0))

        return DiversificationScore(
            score=score,
            asset_class_count=asset_class_count,
            holdings_count=holdings_count,
            top_asset_class=top_asset_class,
            top_asset_class_weight=top_asset_class_weight,
        )

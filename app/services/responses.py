"""Renders canonical analytics into the dashboard and agent response shapes.

Only representation changes happen here: rounding, percentage scaling and
per-holding rows. No metric is recomputed.
"""

from typing import List

from ..models import (
    AiSummaryResponse, AllocationEntry, AnalyticsResponse, AssetClass,
    ConcentrationRisk, DiversificationScore, PortfolioAnalytics,
    SummaryAllocation, SummaryConcentration, SummaryDiversification, SummaryHolding
)
from .analytics import HHI_DECIMALS, allocation_fraction, non_negative

WEIGHT_DECIMALS = 4
PERCENT_DECIMALS = 2
VALUE_DECIMALS = 2


def to_percent(fraction: float) -> float:
    return round(fraction * 100, PERCENT_DECIMALS)


def to_analytics_response(analytics: PortfolioAnalytics) -> AnalyticsResponse:
    """Dashboard shape with weights as fractions rounded to 4 decimals."""
    c = analytics.concentration
    d = analytics.diversification

    return AnalyticsResponse(
        concentration_risk=ConcentrationRisk(
            top_holding_symbol=c.top_holding_symbol,
            top_holding_name=c.top_holding_name,
            top_holding_weight=round(c.top_holding_weight, WEIGHT_DECIMALS),
            herfindahl_index=c.herfindahl_index,
            is_highly_concentrated=c.is_highly_concentrated,
        ),
        diversification=DiversificationScore(
            score=d.score,
            asset_class_count=d.asset_class_count,
            holdings_count=d.holdings_count,
            top_asset_class=d.top_asset_class,
            top_asset_class_weight=round(d.top_asset_class_weight, WEIGHT_DECIMALS),
        ),
        asset_allocation=[
            AllocationEntry(
                asset_class=entry.asset_class,
                weight=round(entry.weight, WEIGHT_DECIMALS),
                value_in_base_currency=round(entry.value_in_base_currency, VALUE_DECIMALS),
            )
            for entry in analytics.allocation
        ],
        insights=list(analytics.insights),
        computed_at=analytics.computed_at,
    )


def _summary_holdings(analytics: PortfolioAnalytics) -> List[SummaryHolding]:
    # Stable sort keeps input order among equally weighted holdings
    ranked = sorted(analytics.holdings, key=allocation_fraction, reverse=True)

    return [
        SummaryHolding(
            symbol=h.symbol or "",
            name=h.name or h.symbol or "",
            asset_class=h.asset_class or AssetClass.UNKNOWN.value,
            asset_sub_class=h.asset_sub_class or AssetClass.UNKNOWN.value,
            currency=h.currency or analytics.base_currency,
            allocation_percentage=to_percent(allocation_fraction(h)),
            value_in_base_currency=round(non_negative(h.value_in_base_currency), VALUE_DECIMALS),
            market_price=non_negative(h.market_price),
        )
        for h in ranked
    ]


def to_summary_response(analytics: PortfolioAnalytics) -> AiSummaryResponse:
    """Agent shape with weights as percentages and one row per holding."""
    c = analytics.concentration
    d = analytics.diversification

    return AiSummaryResponse(
        base_currency=analytics.base_currency,
        holdings=_summary_holdings(analytics),
        concentration=SummaryConcentration(
            top_holding_symbol=c.top_holding_symbol,
            top_holding_name=c.top_holding_name,
            top_holding_weight=to_percent(c.top_holding_weight),
            herfindahl_index=round(c.herfindahl_index, HHI_DECIMALS),
            is_highly_concentrated=c.is_highly_concentrated,
        ),
        diversification=SummaryDiversification(
            score=d.score,
            asset_class_count=d.asset_class_count,
            holdings_count=d.holdings_count,
            top_asset_class=d.top_asset_class,
            top_asset_class_weight=to_percent(d.top_asset_class_weight),
        ),
        asset_allocation=[
            SummaryAllocation(
                asset_class=entry.asset_class,
                weight=to_percent(entry.weight),
                value_in_base_currency=round(entry.value_in_base_currency, VALUE_DECIMALS),
            )
            for entry in analytics.allocation
        ],
        insights=list(analytics.insights),
        computed_at=analytics.computed_at,
    )

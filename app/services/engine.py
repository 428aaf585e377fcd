"""Single entry point for computing portfolio analytics from a holdings snapshot."""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from ..models import Holding, PortfolioAnalytics
from .analytics import (
    AllocationAggregator, AnalyticsThresholds, ConcentrationAnalyzer,
    DEFAULT_THRESHOLDS, DiversificationScorer
)
from .insights import InsightGenerator

logger = logging.getLogger(__name__)


def compute_analytics(
    holdings: Sequence[Holding],
    base_currency: str,
    thresholds: AnalyticsThresholds = DEFAULT_THRESHOLDS,
    computed_at: Optional[datetime] = None
) -> PortfolioAnalytics:
    """Compute concentration, allocation, diversification and insights.

    Pure and synchronous. Both API response shapes are rendered from the
    returned bundle, so they always agree on every metric. ``computed_at``
    defaults to the current UTC time.
    """
    snapshot = tuple(holdings)

    concentration = ConcentrationAnalyzer(thresholds).analyze(snapshot)
    allocation = AllocationAggregator().aggregate(snapshot)
    diversification = DiversificationScorer(thresholds).score(snapshot, allocation)
    insights = InsightGenerator(thresholds=thresholds).generate(
        concentration, diversification, allocation
    )

    logger.debug(
        f"Computed analytics for {len(snapshot)} holdings: "
        f"HHI={concentration.herfindahl_index}, score={diversification.score}, "
        f"{len(insights)} insights"
    )

    return PortfolioAnalytics(
        base_currency=base_currency,
        holdings=snapshot,
        concentration=concentration,
        allocation=tuple(allocation),
        diversification=diversification,
        insights=tuple(insights),
        computed_at=computed_at or datetime.now(timezone.utc),
    )

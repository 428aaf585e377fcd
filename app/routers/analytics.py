"""Portfolio analytics endpoint for dashboards."""

import logging

from fastapi import APIRouter, Depends

from ..config import settings
from ..models import AnalyticsResponse, HoldingFilter
from ..services.engine import compute_analytics
from ..services.positions import PositionProvider, get_position_provider
from ..services.responses import to_analytics_response
from .filters import holding_filter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("", response_model=AnalyticsResponse)
async def get_analytics(
    filters: HoldingFilter = Depends(holding_filter),
    provider: PositionProvider = Depends(get_position_provider)
) -> AnalyticsResponse:
    """Concentration risk, diversification score, asset allocation and insights.

    Weights are fractions (0-1).
    """
    holdings = await provider.get_holdings(filters)
    analytics = compute_analytics(holdings, settings.base_currency)

    logger.info(
        f"Analytics for {len(holdings)} holdings: "
        f"score={analytics.diversification.score}"
    )
    return to_analytics_response(analytics)

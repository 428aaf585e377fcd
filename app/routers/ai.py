"""Structured portfolio summary for AI agents."""

import logging

from fastapi import APIRouter, Depends

from ..config import settings
from ..models import AiSummaryResponse, HoldingFilter
from ..services.engine import compute_analytics
from ..services.positions import PositionProvider, get_position_provider
from ..services.responses import to_summary_response
from .filters import holding_filter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])


@router.get("/summary", response_model=AiSummaryResponse)
async def get_summary(
    filters: HoldingFilter = Depends(holding_filter),
    provider: PositionProvider = Depends(get_position_provider)
) -> AiSummaryResponse:
    """Holdings list plus the same metrics as /analytics, as percentages.

    Agents get pre-computed risk metrics and insight strings instead of
    deriving them client-side.
    """
    holdings = await provider.get_holdings(filters)
    analytics = compute_analytics(holdings, settings.base_currency)

    logger.info(
        f"AI summary for {len(holdings)} holdings: "
        f"score={analytics.diversification.score}"
    )
    return to_summary_response(analytics)

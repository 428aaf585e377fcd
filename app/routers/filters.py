"""Query-parameter parsing shared by the analytics endpoints."""

from typing import Optional

from fastapi import Query

from ..models import HoldingFilter


def holding_filter(
    asset_classes: Optional[str] = Query(
        default=None, description="Comma-separated asset classes, e.g. EQUITY,FIXED_INCOME"
    ),
    symbol: Optional[str] = Query(default=None, description="Restrict to a single symbol")
) -> HoldingFilter:
    """Build a holding filter from query parameters."""
    classes = []
    if asset_classes:
        classes = [c.strip().upper() for c in asset_classes.split(",") if c.strip()]
    return HoldingFilter(asset_classes=classes, symbol=symbol or None)

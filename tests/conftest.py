"""
Pytest configuration and fixtures for the portfolio analytics tests.
"""

import pytest
import pytest_asyncio
from typing import List
from httpx import AsyncClient, ASGITransport

from app.main import app
from app.models import Holding
from app.services.positions import StaticPositionProvider, get_position_provider


def make_holding(symbol: str, weight, asset_class=None, **kwargs) -> Holding:
    """Shorthand for building a holding in tests."""
    return Holding(
        symbol=symbol,
        allocation_fraction=weight,
        asset_class=asset_class,
        **kwargs
    )


@pytest.fixture
def mixed_holdings() -> List[Holding]:
    """A small multi-asset portfolio whose weights sum to one."""
    return [
        make_holding("VTI", 0.30, "EQUITY", name="Vanguard Total Stock Market ETF",
                     asset_sub_class="ETF", currency="USD",
                     value_in_base_currency=30000.0, market_price=250.0),
        make_holding("AAPL", 0.20, "EQUITY", name="Apple Inc.",
                     asset_sub_class="STOCK", currency="USD",
                     value_in_base_currency=20000.0, market_price=190.0),
        make_holding("BND", 0.25, "FIXED_INCOME", name="Vanguard Total Bond Market ETF",
                     asset_sub_class="ETF", currency="USD",
                     value_in_base_currency=25000.0, market_price=72.5),
        make_holding("GLD", 0.15, "COMMODITY", name="SPDR Gold Shares",
                     asset_sub_class="ETF", currency="USD",
                     value_in_base_currency=15000.0, market_price=185.0),
        make_holding("USD", 0.10, "LIQUIDITY", name="Cash",
                     asset_sub_class="CASH", currency="USD",
                     value_in_base_currency=10000.0, market_price=1.0),
    ]


@pytest.fixture
def even_holdings() -> List[Holding]:
    """20 holdings split evenly over five asset classes."""
    classes = ["EQUITY", "FIXED_INCOME", "COMMODITY", "REAL_ESTATE", "ALTERNATIVE_INVESTMENT"]
    return [
        make_holding(f"{asset_class[:3]}{i}", 0.05, asset_class, value_in_base_currency=500.0)
        for asset_class in classes
        for i in range(4)
    ]


@pytest_asyncio.fixture
async def client(mixed_holdings):
    """Create a test client serving a static holdings snapshot."""

    def get_test_provider():
        return StaticPositionProvider(mixed_holdings)

    app.dependency_overrides[get_position_provider] = get_test_provider

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()

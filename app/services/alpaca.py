"""Alpaca brokerage position provider."""

import asyncio
import logging
from typing import List, Optional, Tuple

from alpaca.trading.client import TradingClient

from ..config import settings
from ..models import AssetClass, Holding, HoldingFilter
from .positions import PositionProviderError

logger = logging.getLogger(__name__)

# Alpaca asset class -> (asset class, asset sub class)
ASSET_CLASS_MAP = {
    "us_equity": (AssetClass.EQUITY.value, "STOCK"),
    "us_option": (AssetClass.EQUITY.value, "OPTION"),
    "crypto": (AssetClass.ALTERNATIVE_INVESTMENT.value, "CRYPTOCURRENCY"),
}


def _to_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def map_asset_class(alpaca_class) -> Tuple[str, str]:
    key = getattr(alpaca_class, "value", alpaca_class)
    return ASSET_CLASS_MAP.get(key, (AssetClass.UNKNOWN.value, AssetClass.UNKNOWN.value))


class AlpacaPositionProvider:
    """Builds a holdings snapshot from an Alpaca account's positions and cash."""

    def __init__(self, base_currency: str = "USD", trading_client: Optional[TradingClient] = None):
        """Initialize the Alpaca trading client."""
        self.base_currency = base_currency
        self.trading_client = trading_client or TradingClient(
            api_key=settings.alpaca_api_key,
            secret_key=settings.alpaca_secret_key,
            paper=settings.alpaca_paper
        )

    async def get_holdings(self, holding_filter: Optional[HoldingFilter] = None) -> List[Holding]:
        """Fetch positions and cash as holdings weighted by portfolio value."""
        try:
            loop = asyncio.get_event_loop()
            account = await loop.run_in_executor(
                None, self.trading_client.get_account
            )
            positions = await loop.run_in_executor(
                None, self.trading_client.get_all_positions
            )
        except Exception as e:
            logger.error(f"Error fetching Alpaca positions: {e}")
            raise PositionProviderError("Alpaca positions unavailable") from e

        portfolio_value = _to_float(account.portfolio_value)

        def weight(value: float) -> float:
            return value / portfolio_value if portfolio_value > 0 else 0.0

        holdings = []
        for pos in positions:
            market_value = _to_float(pos.market_value)
            asset_class, asset_sub_class = map_asset_class(pos.asset_class)
            holdings.append(Holding(
                symbol=pos.symbol,
                name=pos.symbol,  # Alpaca positions carry no display name
                asset_class=asset_class,
                asset_sub_class=asset_sub_class,
                currency=self.base_currency,
                allocation_fraction=weight(market_value),
                value_in_base_currency=market_value,
                market_price=_to_float(pos.current_price),
            ))

        cash = _to_float(account.cash)
        if cash > 0:
            currency = getattr(account, "currency", None) or self.base_currency
            holdings.append(Holding(
                symbol=currency,
                name="Cash",
                asset_class=AssetClass.LIQUIDITY.value,
                asset_sub_class="CASH",
                currency=currency,
                allocation_fraction=weight(cash),
                value_in_base_currency=cash,
                market_price=1.0,
            ))

        if holding_filter is not None:
            holdings = [h for h in holdings if holding_filter.matches(h)]

        logger.info(f"Retrieved {len(holdings)} holdings from Alpaca")
        return holdings

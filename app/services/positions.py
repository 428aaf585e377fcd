"""Position providers: where holdings snapshots come from."""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from pydantic import TypeAdapter, ValidationError

from ..config import settings, PositionSource
from ..models import Holding, HoldingFilter

logger = logging.getLogger(__name__)


class PositionProviderError(Exception):
    """Raised when a holdings snapshot cannot be retrieved."""


class PositionProvider(Protocol):
    async def get_holdings(self, holding_filter: Optional[HoldingFilter] = None) -> List[Holding]:
        ...


class StaticPositionProvider:
    """Serves a fixed holdings snapshot, e.g. loaded from a JSON export."""

    def __init__(self, holdings: Sequence[Holding]):
        self.holdings = list(holdings)

    @classmethod
    def from_file(cls, path: str) -> "StaticPositionProvider":
        """Load holdings from a JSON array of holding objects."""
        try:
            raw = Path(path).read_text()
            holdings = TypeAdapter(List[Holding]).validate_python(json.loads(raw))
        except (OSError, ValueError, ValidationError) as e:
            logger.error(f"Error loading holdings from {path}: {e}")
            raise PositionProviderError(f"Cannot load holdings file {path}") from e

        logger.info(f"Loaded {len(holdings)} holdings from {path}")
        return cls(holdings)

    async def get_holdings(self, holding_filter: Optional[HoldingFilter] = None) -> List[Holding]:
        if holding_filter is None:
            return list(self.holdings)
        return [h for h in self.holdings if holding_filter.matches(h)]


@lru_cache(maxsize=1)
def get_position_provider() -> PositionProvider:
    """FastAPI dependency returning the configured position provider.

    Built once per process; call ``get_position_provider.cache_clear()`` after
    changing settings.
    """
    source = settings.position_source

    if source == PositionSource.ALPACA.value:
        from .alpaca import AlpacaPositionProvider
        return AlpacaPositionProvider(base_currency=settings.base_currency)

    if source == PositionSource.FILE.value:
        if not settings.holdings_file:
            raise PositionProviderError("HOLDINGS_FILE is not set")
        return StaticPositionProvider.from_file(settings.holdings_file)

    raise PositionProviderError(f"Unknown position source: {source}")

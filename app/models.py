"""Pydantic schemas for holdings, derived metrics and API responses."""

from datetime import datetime
from typing import Optional, List, Tuple
from pydantic import BaseModel, Field
from enum import Enum


class AssetClass(str, Enum):
    """Coarse asset classes understood by the analytics engine."""

    EQUITY = "EQUITY"
    FIXED_INCOME = "FIXED_INCOME"
    LIQUIDITY = "LIQUIDITY"
    COMMODITY = "COMMODITY"
    REAL_ESTATE = "REAL_ESTATE"
    ALTERNATIVE_INVESTMENT = "ALTERNATIVE_INVESTMENT"
    UNKNOWN = "UNKNOWN"


# Position snapshot
class Holding(BaseModel):
    """A single position as supplied by a position provider."""
    symbol: str = ""
    name: Optional[str] = None
    asset_class: Optional[str] = None
    asset_sub_class: Optional[str] = None
    currency: Optional[str] = None
    allocation_fraction: Optional[float] = None  # 0-1 of total portfolio value
    value_in_base_currency: Optional[float] = None
    market_price: Optional[float] = None

    class Config:
        frozen = True
        from_attributes = True


class HoldingFilter(BaseModel):
    """Filters a provider applies before handing holdings to the engine."""
    asset_classes: List[str] = Field(default_factory=list)
    symbol: Optional[str] = None

    def matches(self, holding: Holding) -> bool:
        if self.asset_classes:
            if (holding.asset_class or AssetClass.UNKNOWN.value) not in self.asset_classes:
                return False
        if self.symbol and holding.symbol.upper() != self.symbol.upper():
            return False
        return True


# Canonical metrics (fractions, full precision)
class ConcentrationRisk(BaseModel):
    """Largest holding and Herfindahl index over all holdings."""
    top_holding_symbol: str = ""
    top_holding_name: str = ""
    top_holding_weight: float = Field(default=0.0, ge=0.0)
    herfindahl_index: float = Field(default=0.0, ge=0.0, le=1.0)
    is_highly_concentrated: bool = False

    class Config:
        frozen = True


class AllocationEntry(BaseModel):
    """Aggregated weight and value of one asset class."""
    asset_class: str
    weight: float = Field(default=0.0, ge=0.0)
    value_in_base_currency: float = Field(default=0.0, ge=0.0)

    class Config:
        frozen = True


class DiversificationScore(BaseModel):
    """Composite 0-100 diversification score and its inputs."""
    score: int = Field(default=0, ge=0, le=100)
    asset_class_count: int = 0
    holdings_count: int = 0
    top_asset_class: str = AssetClass.UNKNOWN.value
    top_asset_class_weight: float = Field(default=0.0, ge=0.0)

    class Config:
        frozen = True


class PortfolioAnalytics(BaseModel):
    """Result of one canonical analytics computation."""
    base_currency: str
    holdings: Tuple[Holding, ...] = ()
    concentration: ConcentrationRisk
    allocation: Tuple[AllocationEntry, ...] = ()
    diversification: DiversificationScore
    insights: Tuple[str, ...] = ()
    computed_at: datetime

    class Config:
        frozen = True


# Response shapes
class AnalyticsResponse(BaseModel):
    """Dashboard shape: weights as fractions (0-1)."""
    concentration_risk: ConcentrationRisk
    diversification: DiversificationScore
    asset_allocation: List[AllocationEntry]
    insights: List[str]
    computed_at: datetime


class SummaryHolding(BaseModel):
    """One row of the agent-facing holdings list."""
    symbol: str
    name: str
    asset_class: str
    asset_sub_class: str
    currency: str
    allocation_percentage: float
    value_in_base_currency: float
    market_price: float


class SummaryConcentration(BaseModel):
    top_holding_symbol: str
    top_holding_name: str
    top_holding_weight: float  # percent
    herfindahl_index: float
    is_highly_concentrated: bool


class SummaryDiversification(BaseModel):
    score: int
    asset_class_count: int
    holdings_count: int
    top_asset_class: str
    top_asset_class_weight: float  # percent


class SummaryAllocation(BaseModel):
    asset_class: str
    weight: float  # percent
    value_in_base_currency: float


class AiSummaryResponse(BaseModel):
    """Agent shape: weights as percentages (0-100) plus per-holding rows."""
    base_currency: str
    holdings: List[SummaryHolding]
    concentration: SummaryConcentration
    diversification: SummaryDiversification
    asset_allocation: List[SummaryAllocation]
    insights: List[str]
    computed_at: datetime

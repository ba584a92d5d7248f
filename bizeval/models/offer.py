from enum import Enum
from pydantic import BaseModel, Field

from bizeval.models.valuations import ConfidenceLevel


class RiskSeverity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class RiskFactor(BaseModel):
    title: str
    description: str
    severity: RiskSeverity
    mitigation: str


class MarketFactor(BaseModel):
    description: str
    is_positive: bool


class NextStep(BaseModel):
    order: int
    description: str


class OfferRecommendation(BaseModel):
    minimum_offer: float
    recommended_offer: float
    maximum_offer: float
    opening_offer: float
    average_valuation: float
    valuation_range: tuple[float, float] = Field(..., description="(lowest, highest) supplied valuation")
    discount_to_asking: float
    risk_adjustment: float = Field(..., description="Fraction taken off the average valuation")
    benchmark_fit_score: float
    market_position_score: float
    confidence_level: ConfidenceLevel
    market_factors: list[MarketFactor] = Field(default_factory=list)
    risk_factors: list[RiskFactor] = Field(default_factory=list)
    next_steps: list[NextStep] = Field(default_factory=list)
    executive_summary: str
    industry_comparison: str
    opening_strategy: str
    key_talking_points: list[str] = Field(default_factory=list)
    concession_strategy: str

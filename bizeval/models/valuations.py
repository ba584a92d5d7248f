from enum import Enum
from pydantic import BaseModel
from typing import Optional


class ValuationMethodology(str, Enum):
    REVENUE_MULTIPLE = "Revenue Multiple"
    PROFIT_MULTIPLE = "Profit Multiple"
    EBITDA_MULTIPLE = "EBITDA Multiple"
    SDE_MULTIPLE = "SDE Multiple"
    ASSET_BASED = "Asset Based"
    DISCOUNTED_CASH_FLOW = "Discounted Cash Flow"
    MARKET_COMPARISON = "Market Comparison"


class ConfidenceLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "Very High"


class ValuationResult(BaseModel):
    calculated_value: float
    multiple: float
    methodology: ValuationMethodology
    confidence_level: ConfidenceLevel = ConfidenceLevel.MEDIUM
    notes: Optional[str] = None

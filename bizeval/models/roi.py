from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional


class ROIInputs(BaseModel):
    purchase_price: float = Field(..., description="Price paid for the business")
    investment_period_years: int = Field(5, description="Holding period in years")
    revenue_growth_rate: float = Field(0.08, description="Annual revenue growth (fractional, may be negative)")
    profit_margin: float = Field(0.20, description="Projected profit margin (fractional)")
    exit_multiple: float = Field(3.0, description="Multiple of final-year profit realised at exit")
    additional_investment: float = Field(0.0, description="Capital invested on top of the purchase price")
    working_capital: float = Field(0.0, description="Working capital injected at purchase")
    discount_rate: float = Field(0.10, description="Discount rate used for NPV")


class SensitivitySettings(BaseModel):
    growth_delta: float = Field(0.03, description="Growth rate perturbation in absolute terms (0.03 = 3pp)")
    margin_delta: float = Field(0.03, description="Profit margin perturbation in absolute terms")
    exit_multiple_delta: float = Field(1.0, description="Exit multiple perturbation")


class SensitivityBand(BaseModel):
    factor: str
    low_input: float
    base_input: float
    high_input: float
    low_roi: float
    base_roi: float
    high_roi: float


class RiskTier(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ROIResults(BaseModel):
    yearly_cash_flows: list[float]
    cumulative_cash_flows: list[float]
    exit_value: float
    total_investment: float
    total_cash_flow: float = Field(..., description="Sum of yearly cash flows plus exit value")
    net_profit: float
    total_roi: float
    annual_roi: float
    irr: Optional[float] = Field(None, description="Internal rate of return, None when not computable")
    npv: float
    discount_rate: float
    payback_period: float = Field(..., description="Years to recover the investment, saturated at the horizon")
    payback_achieved: bool
    volatility: float = Field(..., description="Coefficient of variation of yearly cash flows")
    growth_sensitivity: SensitivityBand
    margin_sensitivity: SensitivityBand
    exit_multiple_sensitivity: SensitivityBand
    risk_tier: RiskTier
    risk_description: str
    risk_factors: list[str] = Field(default_factory=list)

from pydantic import BaseModel, Field
from typing import Optional

from bizeval.models.profile import FinancialProfile
from bizeval.models.roi import ROIInputs
from bizeval.models.valuations import ConfidenceLevel, ValuationMethodology


class ValuationInput(BaseModel):
    methodology: ValuationMethodology
    multiple: float = Field(1.0, description="Multiple applied to the methodology's driver")
    manual_asset_value: Optional[float] = Field(None, description="Asset value for asset-based valuations")
    manual_blue_sky: Optional[float] = Field(None, description="Blue sky (goodwill) value for asset-based valuations")
    manual_value: Optional[float] = Field(None, description="Externally computed value for DCF / market comparison")
    confidence_level: ConfidenceLevel = ConfidenceLevel.MEDIUM
    notes: Optional[str] = None


class FinancingInput(BaseModel):
    down_payment_percent: float = Field(20.0, description="Down payment as percent of purchase price")
    annual_rate_percent: float = Field(..., description="Annual loan interest rate in percent")
    term_years: int = Field(10, description="Loan term in years")
    purchase_price: Optional[float] = Field(None, description="Defaults to the asking price")


class AnalysisRequest(BaseModel):
    company_name: str = Field(..., description="Name of the business under evaluation")
    profile: FinancialProfile
    valuations: list[ValuationInput] = Field(default_factory=list)
    base_valuation: Optional[float] = Field(
        None, description="Seed for scenario generation; defaults to the average valuation"
    )
    business_growth_rate: Optional[float] = Field(None, description="Business growth rate for benchmark comparison")
    roi: Optional[ROIInputs] = Field(None, description="ROI projection inputs")
    financing: Optional[FinancingInput] = Field(None, description="Acquisition loan inputs")

from pydantic import BaseModel, Field
from typing import Optional


class FinancialProfile(BaseModel):
    annual_revenue: float = Field(..., description="Latest annual revenue")
    annual_profit: float = Field(..., description="Latest annual profit (may be negative)")
    asking_price: float = Field(0.0, description="Seller's asking price")
    industry: Optional[str] = Field(None, description="Industry name used for benchmark lookup")
    years_established: Optional[int] = Field(None, description="Years the business has been operating")

    @property
    def profit_margin(self) -> float:
        """Profit over revenue, 0 when there is no revenue."""
        if self.annual_revenue == 0:
            return 0.0
        return self.annual_profit / self.annual_revenue


class LoanTerms(BaseModel):
    principal: float = Field(..., description="Loan amount")
    annual_rate_percent: float = Field(..., description="Annual interest rate in percent, e.g. 6.0")
    term_years: int = Field(..., description="Loan term in years")

    @property
    def monthly_rate(self) -> float:
        return self.annual_rate_percent / 100.0 / 12.0

    @property
    def number_of_payments(self) -> int:
        return self.term_years * 12


class FinancingSummary(BaseModel):
    purchase_price: float
    down_payment_percent: float
    down_payment: float
    loan_amount: float
    annual_payment: float
    monthly_payment: float
    cash_flow_after_debt: float = Field(..., description="Annual profit less annual debt service")

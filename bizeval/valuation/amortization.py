import math

from bizeval.models.profile import FinancingSummary, LoanTerms


def _monthly_payment(principal: float, monthly_rate: float, n_payments: int) -> float:
    # (1+r)^n - 1 via expm1/log1p so very small rates keep their precision
    growth_minus_one = math.expm1(n_payments * math.log1p(monthly_rate))
    return principal * monthly_rate * (growth_minus_one + 1.0) / growth_minus_one


def annual_payment(loan_amount: float, annual_rate_percent: float, years: int) -> float:
    """Annual debt service on a fixed-rate, monthly-amortizing loan.

    Returns 0 when the amount, rate or term is not positive.
    """
    if loan_amount <= 0 or annual_rate_percent <= 0 or years <= 0:
        return 0.0
    monthly_rate = annual_rate_percent / 100.0 / 12.0
    return _monthly_payment(loan_amount, monthly_rate, years * 12) * 12.0


def monthly_payment(terms: LoanTerms) -> float:
    return annual_payment(terms.principal, terms.annual_rate_percent, terms.term_years) / 12.0


def financing_summary(
    purchase_price: float,
    down_payment_percent: float,
    annual_rate_percent: float,
    term_years: int,
    annual_profit: float,
) -> FinancingSummary:
    """Split a purchase into down payment and loan, and net the debt service against profit."""
    down_payment = purchase_price * (down_payment_percent / 100.0)
    loan_amount = purchase_price - down_payment
    payment = annual_payment(loan_amount, annual_rate_percent, term_years)
    return FinancingSummary(
        purchase_price=purchase_price,
        down_payment_percent=down_payment_percent,
        down_payment=down_payment,
        loan_amount=loan_amount,
        annual_payment=payment,
        monthly_payment=payment / 12.0,
        cash_flow_after_debt=annual_profit - payment,
    )

from typing import Callable

from bizeval.models.profile import FinancialProfile
from bizeval.models.valuations import ConfidenceLevel, ValuationMethodology, ValuationResult

# Quick-valuation starting points per methodology
INDUSTRY_STANDARD_MULTIPLES: dict[ValuationMethodology, float] = {
    ValuationMethodology.REVENUE_MULTIPLE: 2.5,
    ValuationMethodology.PROFIT_MULTIPLE: 3.0,
    ValuationMethodology.EBITDA_MULTIPLE: 6.0,
    ValuationMethodology.SDE_MULTIPLE: 3.5,
    ValuationMethodology.ASSET_BASED: 1.0,
    ValuationMethodology.DISCOUNTED_CASH_FLOW: 1.0,
    ValuationMethodology.MARKET_COMPARISON: 1.0,
}


def _revenue_multiple(profile: FinancialProfile, multiple: float, **_) -> float:
    return profile.annual_revenue * multiple


def _profit_multiple(profile: FinancialProfile, multiple: float, **_) -> float:
    # Profit stands in for EBITDA and SDE as well; no addbacks are modelled.
    return profile.annual_profit * multiple


def _asset_based(
    profile: FinancialProfile,
    multiple: float,
    manual_asset_value: float | None = None,
    manual_blue_sky: float | None = None,
    **_,
) -> float:
    return (manual_asset_value or 0.0) + (manual_blue_sky or 0.0)


def _manual_or_asking(
    profile: FinancialProfile,
    multiple: float,
    manual_value: float | None = None,
    **_,
) -> float:
    if manual_value is not None:
        return manual_value
    return profile.asking_price * multiple


_CALCULATORS: dict[ValuationMethodology, Callable[..., float]] = {
    ValuationMethodology.REVENUE_MULTIPLE: _revenue_multiple,
    ValuationMethodology.PROFIT_MULTIPLE: _profit_multiple,
    ValuationMethodology.EBITDA_MULTIPLE: _profit_multiple,
    ValuationMethodology.SDE_MULTIPLE: _profit_multiple,
    ValuationMethodology.ASSET_BASED: _asset_based,
    ValuationMethodology.DISCOUNTED_CASH_FLOW: _manual_or_asking,
    ValuationMethodology.MARKET_COMPARISON: _manual_or_asking,
}


def calculate_valuation(
    profile: FinancialProfile,
    methodology: ValuationMethodology,
    multiple: float,
    manual_asset_value: float | None = None,
    manual_blue_sky: float | None = None,
    manual_value: float | None = None,
    confidence_level: ConfidenceLevel = ConfidenceLevel.MEDIUM,
    notes: str | None = None,
) -> ValuationResult:
    """Value a business with a single methodology.

    Multiple-based methodologies multiply their driver (revenue, or profit for
    profit/EBITDA/SDE) by ``multiple``. Asset-based valuations add the manual
    asset and blue sky values and ignore the multiple. DCF and market
    comparison take ``manual_value`` when given and fall back to
    ``asking_price * multiple``. Inputs are not range-checked.
    """
    calculator = _CALCULATORS[methodology]
    value = calculator(
        profile,
        multiple,
        manual_asset_value=manual_asset_value,
        manual_blue_sky=manual_blue_sky,
        manual_value=manual_value,
    )
    return ValuationResult(
        calculated_value=value,
        multiple=multiple,
        methodology=methodology,
        confidence_level=confidence_level,
        notes=notes,
    )


def standard_multiple(methodology: ValuationMethodology) -> float:
    return INDUSTRY_STANDARD_MULTIPLES.get(methodology, 1.0)


def driver_value(profile: FinancialProfile, methodology: ValuationMethodology) -> float | None:
    """The profile field a multiple-based methodology multiplies, None otherwise."""
    if methodology == ValuationMethodology.REVENUE_MULTIPLE:
        return profile.annual_revenue
    if methodology in (
        ValuationMethodology.PROFIT_MULTIPLE,
        ValuationMethodology.EBITDA_MULTIPLE,
        ValuationMethodology.SDE_MULTIPLE,
    ):
        return profile.annual_profit
    return None

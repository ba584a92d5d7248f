import logging
import math

from bizeval.models.profile import FinancialProfile
from bizeval.models.roi import (
    ROIInputs, ROIResults, RiskTier, SensitivityBand, SensitivitySettings,
)
from bizeval.valuation.errors import InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_DISCOUNT_RATE = 0.10

# IRR search bracket and budget
IRR_LOWER_BOUND = -0.99
IRR_UPPER_BOUND = 10.0
IRR_TOLERANCE = 1e-6
IRR_MAX_ITERATIONS = 200

# Risk tier thresholds
LOW_RISK_MIN_ROI = 0.30
LOW_RISK_MAX_PAYBACK_YEARS = 3.0
LOW_RISK_MAX_VOLATILITY = 0.20
MEDIUM_RISK_MIN_ROI = 0.15
MEDIUM_RISK_MAX_PAYBACK_YEARS = 5.0
MEDIUM_RISK_MAX_VOLATILITY = 0.40

# Risk factor thresholds
LOW_ROI_THRESHOLD = 0.10
LONG_PAYBACK_YEARS = 5.0
HIGH_VOLATILITY_THRESHOLD = 0.30


def _project(
    annual_revenue: float,
    years: int,
    growth_rate: float,
    profit_margin: float,
    exit_multiple: float,
) -> tuple[list[float], float]:
    """Core projection. Returns (yearly cash flows, exit value)."""
    cash_flows = [
        annual_revenue * (1 + growth_rate) ** year * profit_margin
        for year in range(1, years + 1)
    ]
    exit_value = cash_flows[-1] * exit_multiple
    return cash_flows, exit_value


def _roi(cash_flows: list[float], exit_value: float, total_investment: float) -> float:
    if total_investment == 0:
        return 0.0
    return (sum(cash_flows) + exit_value - total_investment) / total_investment


def _discounted(cf: float, rate: float, year: int) -> float:
    try:
        return cf * (1 + rate) ** -year
    except (OverflowError, ZeroDivisionError):
        # Discount factor beyond float range; keep the sign of the flow
        if cf == 0:
            return 0.0
        return math.copysign(math.inf, cf)


def _npv_at(rate: float, initial_investment: float, cash_flows: list[float]) -> float:
    """NPV at ``rate``. May be +/-inf for extreme rates, or nan when infinite terms cancel."""
    return -initial_investment + sum(_discounted(cf, rate, i + 1) for i, cf in enumerate(cash_flows))


def solve_irr(initial_investment: float, cash_flows: list[float]) -> float | None:
    """Rate at which the discounted ``cash_flows`` repay ``initial_investment``.

    ``cash_flows[i]`` is received at the end of year i+1. Solved by bisection
    over [IRR_LOWER_BOUND, IRR_UPPER_BOUND]. An NPV that overflows at a bracket
    end still counts by its sign. Returns None when the bracket has no sign
    change, the NPV is undefined, or the iteration budget runs out.
    """
    if not cash_flows:
        return None

    lo, hi = IRR_LOWER_BOUND, IRR_UPPER_BOUND
    npv_lo = _npv_at(lo, initial_investment, cash_flows)
    npv_hi = _npv_at(hi, initial_investment, cash_flows)
    if math.isnan(npv_lo) or math.isnan(npv_hi):
        logger.warning("IRR bracket NPV is undefined over %d periods; no root found", len(cash_flows))
        return None
    if npv_lo == 0:
        return lo
    if npv_hi == 0:
        return hi
    if (npv_lo > 0) == (npv_hi > 0):
        logger.warning("IRR not bracketed in [%s, %s]; no root found", lo, hi)
        return None

    for _ in range(IRR_MAX_ITERATIONS):
        mid = (lo + hi) / 2
        npv_mid = _npv_at(mid, initial_investment, cash_flows)
        if math.isnan(npv_mid):
            logger.warning("IRR search hit an undefined NPV at rate %s", mid)
            return None
        if npv_mid == 0 or (hi - lo) / 2 < IRR_TOLERANCE:
            return mid
        if (npv_mid > 0) == (npv_lo > 0):
            lo, npv_lo = mid, npv_mid
        else:
            hi = mid

    logger.warning("IRR did not converge after %d iterations", IRR_MAX_ITERATIONS)
    return None


def net_present_value(rate: float, initial_investment: float, cash_flows: list[float]) -> float:
    return _npv_at(rate, initial_investment, cash_flows)


def _volatility(cash_flows: list[float]) -> float:
    """Coefficient of variation (population std / |mean|)."""
    if len(cash_flows) < 2:
        return 0.0
    mean = sum(cash_flows) / len(cash_flows)
    if mean == 0:
        return 0.0
    variance = sum((cf - mean) ** 2 for cf in cash_flows) / len(cash_flows)
    return math.sqrt(variance) / abs(mean)


def _payback(cumulative: list[float], total_investment: float) -> tuple[float, bool]:
    if total_investment <= 0:
        return 0.0, True
    for year, value in enumerate(cumulative, start=1):
        if value >= total_investment:
            return float(year), True
    # Saturated at the horizon; not a true payback period
    return float(len(cumulative)), False


def _assess_risk(
    roi: float,
    payback_years: float,
    payback_achieved: bool,
    volatility: float,
) -> tuple[RiskTier, str, list[str]]:
    effective_payback = payback_years if payback_achieved else math.inf

    if (
        roi > LOW_RISK_MIN_ROI
        and effective_payback < LOW_RISK_MAX_PAYBACK_YEARS
        and volatility < LOW_RISK_MAX_VOLATILITY
    ):
        tier = RiskTier.LOW
        description = "Low risk investment with strong returns and quick payback"
    elif (
        roi > MEDIUM_RISK_MIN_ROI
        and effective_payback < MEDIUM_RISK_MAX_PAYBACK_YEARS
        and volatility < MEDIUM_RISK_MAX_VOLATILITY
    ):
        tier = RiskTier.MEDIUM
        description = "Moderate risk investment with reasonable returns"
    else:
        tier = RiskTier.HIGH
        description = "High risk investment with uncertain returns and longer payback"

    factors: list[str] = []
    if roi < LOW_ROI_THRESHOLD:
        factors.append("Low projected ROI")
    if effective_payback > LONG_PAYBACK_YEARS:
        if payback_achieved:
            factors.append("Long payback period")
        else:
            factors.append("Investment not recovered within the holding period")
    if volatility > HIGH_VOLATILITY_THRESHOLD:
        factors.append("High cash flow volatility")
    if roi < 0:
        factors.append("Negative projected returns")
    if not factors:
        factors.append("No significant risk factors identified")

    return tier, description, factors


def _sensitivity_band(
    factor: str,
    base_input: float,
    delta: float,
    base_roi: float,
    roi_at,
) -> SensitivityBand:
    low_input = base_input - delta
    high_input = base_input + delta
    return SensitivityBand(
        factor=factor,
        low_input=low_input,
        base_input=base_input,
        high_input=high_input,
        low_roi=roi_at(low_input),
        base_roi=base_roi,
        high_roi=roi_at(high_input),
    )


def compute_roi(
    profile: FinancialProfile,
    inputs: ROIInputs,
    sensitivity: SensitivitySettings | None = None,
) -> ROIResults:
    """Project holding-period cash flows and derive ROI, IRR, NPV, payback and risk."""
    years = inputs.investment_period_years
    if years < 1:
        raise InvalidInputError(
            f"Investment period must be at least 1 year (got {years})",
            missing_fields=["investment_period_years"],
        )
    sensitivity = sensitivity or SensitivitySettings()

    total_investment = inputs.purchase_price + inputs.additional_investment + inputs.working_capital
    cash_flows, exit_value = _project(
        profile.annual_revenue, years,
        inputs.revenue_growth_rate, inputs.profit_margin, inputs.exit_multiple,
    )

    cumulative: list[float] = []
    running = 0.0
    for cf in cash_flows:
        running += cf
        cumulative.append(running)

    total_cash_flow = running + exit_value
    net_profit = total_cash_flow - total_investment
    total_roi = _roi(cash_flows, exit_value, total_investment)
    annual_roi = total_roi / years

    payback_period, payback_achieved = _payback(cumulative, total_investment)

    # Exit proceeds arrive with the final year's cash flow
    discounted_flows = cash_flows[:-1] + [cash_flows[-1] + exit_value]
    irr = solve_irr(total_investment, discounted_flows)
    npv = net_present_value(inputs.discount_rate, total_investment, discounted_flows)

    volatility = _volatility(cash_flows)
    tier, description, factors = _assess_risk(total_roi, payback_period, payback_achieved, volatility)

    def roi_with(growth: float, margin: float, exit_multiple: float) -> float:
        flows, exit_v = _project(profile.annual_revenue, years, growth, margin, exit_multiple)
        return _roi(flows, exit_v, total_investment)

    growth_band = _sensitivity_band(
        "revenue_growth_rate", inputs.revenue_growth_rate, sensitivity.growth_delta, total_roi,
        lambda g: roi_with(g, inputs.profit_margin, inputs.exit_multiple),
    )
    margin_band = _sensitivity_band(
        "profit_margin", inputs.profit_margin, sensitivity.margin_delta, total_roi,
        lambda m: roi_with(inputs.revenue_growth_rate, m, inputs.exit_multiple),
    )
    exit_band = _sensitivity_band(
        "exit_multiple", inputs.exit_multiple, sensitivity.exit_multiple_delta, total_roi,
        lambda x: roi_with(inputs.revenue_growth_rate, inputs.profit_margin, x),
    )

    logger.debug(
        f"ROI over {years}y: total={total_roi:.4f}, irr={irr}, npv={npv:.2f}, tier={tier.value}"
    )

    return ROIResults(
        yearly_cash_flows=cash_flows,
        cumulative_cash_flows=cumulative,
        exit_value=exit_value,
        total_investment=total_investment,
        total_cash_flow=total_cash_flow,
        net_profit=net_profit,
        total_roi=total_roi,
        annual_roi=annual_roi,
        irr=irr,
        npv=npv,
        discount_rate=inputs.discount_rate,
        payback_period=payback_period,
        payback_achieved=payback_achieved,
        volatility=volatility,
        growth_sensitivity=growth_band,
        margin_sensitivity=margin_band,
        exit_multiple_sensitivity=exit_band,
        risk_tier=tier,
        risk_description=description,
        risk_factors=factors,
    )


def calculate_roi(
    profile: FinancialProfile,
    purchase_price: float,
    investment_period_years: int,
    revenue_growth_rate: float,
    profit_margin: float,
    exit_multiple: float,
    additional_investment: float = 0.0,
    working_capital: float = 0.0,
    discount_rate: float = DEFAULT_DISCOUNT_RATE,
    sensitivity: SensitivitySettings | None = None,
) -> ROIResults:
    """Keyword form of :func:`compute_roi`."""
    inputs = ROIInputs(
        purchase_price=purchase_price,
        investment_period_years=investment_period_years,
        revenue_growth_rate=revenue_growth_rate,
        profit_margin=profit_margin,
        exit_multiple=exit_multiple,
        additional_investment=additional_investment,
        working_capital=working_capital,
        discount_rate=discount_rate,
    )
    return compute_roi(profile, inputs, sensitivity)

import logging

from bizeval.models.benchmarks import BenchmarkAnalysis, IndustryBenchmark, RiskLevel
from bizeval.models.offer import (
    MarketFactor, NextStep, OfferRecommendation, RiskFactor, RiskSeverity,
)
from bizeval.models.profile import FinancialProfile
from bizeval.models.valuations import ConfidenceLevel, ValuationResult
from bizeval.valuation.benchmarks import (
    ABOVE_INDUSTRY_RATIO, BELOW_INDUSTRY_RATIO, compare_to_benchmark,
)
from bizeval.valuation.errors import InvalidInputError

logger = logging.getLogger(__name__)

# Risk adjustment = BASE + (1 - fit score) * FIT_SCORE_PENALTY + industry premium, capped
BASE_RISK_ADJUSTMENT = 0.05
FIT_SCORE_PENALTY = 0.10
MAX_RISK_ADJUSTMENT = 0.30
NEUTRAL_FIT_SCORE = 0.5
INDUSTRY_RISK_PREMIUM: dict[RiskLevel, float] = {
    RiskLevel.LOW: 0.0,
    RiskLevel.MEDIUM: 0.02,
    RiskLevel.HIGH: 0.04,
    RiskLevel.VERY_HIGH: 0.06,
}

OFFER_BAND = 0.15
OPENING_OFFER_FACTOR = 0.90

# Market position score
BASE_MARKET_POSITION = 0.5
LARGE_REVENUE = 2_000_000
MID_REVENUE = 1_000_000
HIGH_MARGIN = 0.25
GOOD_MARGIN = 0.15
YOUNG_BUSINESS_YEARS = 5

# Risk factor triggers
VALUATION_VARIANCE_MIN_COUNT = 3
VALUATION_VARIANCE_RATIO = 0.30
LOW_MARGIN = 0.10
HEALTHY_MARGIN = 0.20
SMALL_BUSINESS_REVENUE = 500_000

INDUSTRY_SEVERITY: dict[RiskLevel, RiskSeverity | None] = {
    RiskLevel.LOW: None,
    RiskLevel.MEDIUM: RiskSeverity.MEDIUM,
    RiskLevel.HIGH: RiskSeverity.HIGH,
    RiskLevel.VERY_HIGH: RiskSeverity.CRITICAL,
}

INDUSTRY_OUTLOOK: dict[str, str] = {
    "technology": "positive",
    "healthcare": "positive",
    "financial services": "positive",
    "manufacturing": "moderate",
    "retail": "moderate",
}

_SEVERITY_ORDER = {
    RiskSeverity.CRITICAL: 0,
    RiskSeverity.HIGH: 1,
    RiskSeverity.MEDIUM: 2,
    RiskSeverity.LOW: 3,
}


def _risk_adjustment(fit_score: float, benchmark: IndustryBenchmark | None) -> float:
    premium = INDUSTRY_RISK_PREMIUM[benchmark.risk_level] if benchmark else 0.0
    adjustment = BASE_RISK_ADJUSTMENT + (1 - fit_score) * FIT_SCORE_PENALTY + premium
    return min(MAX_RISK_ADJUSTMENT, max(0.0, adjustment))


def _market_position_score(profile: FinancialProfile) -> float:
    score = BASE_MARKET_POSITION

    if profile.annual_revenue > LARGE_REVENUE:
        score += 0.2
    elif profile.annual_revenue > MID_REVENUE:
        score += 0.1

    margin = profile.profit_margin
    if margin > HIGH_MARGIN:
        score += 0.2
    elif margin > GOOD_MARGIN:
        score += 0.1

    if profile.years_established is not None and profile.years_established < YOUNG_BUSINESS_YEARS:
        score += 0.1

    return min(1.0, max(0.0, score))


def _market_factors(profile: FinancialProfile, industry: str | None) -> list[MarketFactor]:
    factors: list[MarketFactor] = []

    if profile.annual_revenue > MID_REVENUE:
        factors.append(MarketFactor(description="Strong revenue base provides stability", is_positive=True))

    margin = profile.profit_margin
    if margin > HEALTHY_MARGIN:
        factors.append(MarketFactor(description="Healthy profit margins indicate efficiency", is_positive=True))
    elif margin < LOW_MARGIN:
        factors.append(MarketFactor(
            description="Low profit margins may indicate operational issues", is_positive=False,
        ))

    if industry:
        outlook = INDUSTRY_OUTLOOK.get(industry.lower(), "neutral")
        factors.append(MarketFactor(
            description=f"{industry} industry has {outlook} outlook",
            is_positive=outlook == "positive",
        ))

    return factors


def _risk_factors(
    profile: FinancialProfile,
    values: list[float],
    average: float,
    industry: str | None,
    benchmark: IndustryBenchmark | None,
) -> list[RiskFactor]:
    factors: list[RiskFactor] = []

    if len(values) >= VALUATION_VARIANCE_MIN_COUNT and average != 0:
        spread = (max(values) - min(values)) / abs(average)
        if spread > VALUATION_VARIANCE_RATIO:
            factors.append(RiskFactor(
                title="Valuation Variance",
                description=f"Valuations spread {spread:.0%} around their average, indicating uncertainty",
                severity=RiskSeverity.MEDIUM,
                mitigation="Seek additional valuation methods or professional appraisal",
            ))

    if profile.profit_margin < LOW_MARGIN:
        factors.append(RiskFactor(
            title="Low Profit Margin",
            description="Profit margin below 10% may indicate operational challenges",
            severity=RiskSeverity.HIGH,
            mitigation="Investigate cost structure and efficiency improvements",
        ))

    if benchmark:
        severity = INDUSTRY_SEVERITY[benchmark.risk_level]
        if severity is not None:
            factors.append(RiskFactor(
                title="Industry Risk",
                description=f"{industry or benchmark.industry} industry faces {benchmark.risk_level.value.lower()} risk factors",
                severity=severity,
                mitigation="Conduct thorough industry analysis and competitive assessment",
            ))

    if profile.annual_revenue < SMALL_BUSINESS_REVENUE:
        factors.append(RiskFactor(
            title="Small Business Risk",
            description="Small revenue base may be vulnerable to market changes",
            severity=RiskSeverity.MEDIUM,
            mitigation="Diversify revenue streams and strengthen customer relationships",
        ))

    return sorted(factors, key=lambda f: _SEVERITY_ORDER[f.severity])


def _confidence_level(profile: FinancialProfile, valuation_count: int, risks: list[RiskFactor]) -> ConfidenceLevel:
    score = 3
    if valuation_count >= VALUATION_VARIANCE_MIN_COUNT:
        score += 1
    score -= sum(1 for r in risks if r.severity in (RiskSeverity.HIGH, RiskSeverity.CRITICAL))
    if profile.annual_revenue > 0 and profile.annual_profit > 0:
        score += 1

    if score <= 1:
        return ConfidenceLevel.LOW
    if score <= 3:
        return ConfidenceLevel.MEDIUM
    if score <= 5:
        return ConfidenceLevel.HIGH
    return ConfidenceLevel.VERY_HIGH


def _industry_comparison(analysis: BenchmarkAnalysis | None) -> str:
    if analysis is None:
        return "No industry data available"
    ratio = analysis.revenue_multiple_comparison
    if ratio == 0:
        return "Revenue multiple not comparable with industry data"
    if ratio > ABOVE_INDUSTRY_RATIO:
        return f"Above industry average by {(ratio - 1) * 100:.0f}%"
    if ratio < BELOW_INDUSTRY_RATIO:
        return f"Below industry average by {(1 - ratio) * 100:.0f}%"
    return "In line with industry averages"


def _executive_summary(industry_label: str, recommended: float, discount: float) -> str:
    if discount >= 0:
        position = f"a {discount * 100:.1f}% discount to the asking price"
    else:
        position = f"a {-discount * 100:.1f}% premium over the asking price"
    return (
        f"Based on the valuation analysis and market assessment, we recommend an offer of "
        f"${recommended:,.0f}. This represents {position} and is benchmarked against "
        f"{industry_label} businesses. The recommendation considers multiple valuation "
        f"methods, industry fit and risk factors to provide a balanced offer position."
    )


def _concession_strategy(minimum: float, recommended: float, maximum: float) -> str:
    span = maximum - minimum
    target = (recommended - minimum) / span if span else 0.5
    return (
        f"Plan concessions in phases: initial offer at minimum, target offer at "
        f"{target * 100:.0f}% of range, maximum offer as final position. Each concession "
        f"should be justified with additional value discovery or seller concessions."
    )


def _next_steps(industry_label: str) -> list[NextStep]:
    steps = [
        "Prepare detailed valuation report with supporting documentation",
        f"Research recent comparable sales in {industry_label} industry",
        "Prepare letter of intent with proposed terms",
        "Schedule initial meeting with business owner",
        "Conduct due diligence investigation",
        "Finalize purchase agreement and close transaction",
    ]
    return [NextStep(order=i, description=d) for i, d in enumerate(steps, start=1)]


def recommend_offer(
    profile: FinancialProfile,
    valuations: list[ValuationResult],
    benchmark: IndustryBenchmark | None = None,
    business_growth_rate: float | None = None,
    offer_band: float = OFFER_BAND,
) -> OfferRecommendation:
    """Turn one or more valuations into an offer range and negotiation notes.

    recommended = average valuation less risk adjustment * |average|, where the
    risk adjustment grows as the benchmark fit score falls and with the
    industry's risk level. Minimum and maximum sit ``offer_band`` * |recommended|
    either side, so min <= recommended <= max holds for negative valuations too.
    """
    if not valuations:
        raise InvalidInputError(
            "At least one valuation is required to recommend an offer", ["valuations"]
        )

    values = [v.calculated_value for v in valuations]
    average = sum(values) / len(values)
    valuation_range = (min(values), max(values))

    analysis = compare_to_benchmark(profile, benchmark, business_growth_rate) if benchmark else None
    fit_score = analysis.overall_score if analysis else NEUTRAL_FIT_SCORE
    risk_adjustment = _risk_adjustment(fit_score, benchmark)

    recommended = average - abs(average) * risk_adjustment
    minimum = recommended - abs(recommended) * offer_band
    maximum = recommended + abs(recommended) * offer_band
    opening = minimum - abs(minimum) * (1 - OPENING_OFFER_FACTOR)

    discount = (
        (profile.asking_price - recommended) / profile.asking_price
        if profile.asking_price > 0 else 0.0
    )

    industry = profile.industry or (benchmark.industry if benchmark else None)
    industry_label = industry or "comparable"

    risks = _risk_factors(profile, values, average, industry, benchmark)

    logger.info(
        f"Offer: avg={average:,.0f} fit={fit_score:.2f} adj={risk_adjustment:.3f} "
        f"recommended={recommended:,.0f}"
    )

    return OfferRecommendation(
        minimum_offer=minimum,
        recommended_offer=recommended,
        maximum_offer=maximum,
        opening_offer=opening,
        average_valuation=average,
        valuation_range=valuation_range,
        discount_to_asking=discount,
        risk_adjustment=risk_adjustment,
        benchmark_fit_score=fit_score,
        market_position_score=_market_position_score(profile),
        confidence_level=_confidence_level(profile, len(valuations), risks),
        market_factors=_market_factors(profile, industry),
        risk_factors=risks,
        next_steps=_next_steps(industry_label),
        executive_summary=_executive_summary(industry_label, recommended, discount),
        industry_comparison=_industry_comparison(analysis),
        opening_strategy=(
            f"Begin negotiations at ${opening:,.0f} to establish an anchor point. This position "
            f"is supported by valuation analysis and leaves room for concessions toward the "
            f"${recommended:,.0f} target."
        ),
        key_talking_points=[
            f"Our offer of ${recommended:,.0f} reflects comprehensive valuation analysis",
            f"Average independent valuation: ${average:,.0f}",
            f"Current market conditions in {industry_label} industry",
            "Profit margin analysis and growth potential",
            "Comparable business sales in the market",
            "Risk factors and mitigation strategies",
        ],
        concession_strategy=_concession_strategy(minimum, recommended, maximum),
    )

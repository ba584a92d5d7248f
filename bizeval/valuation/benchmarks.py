from types import MappingProxyType
from typing import Mapping

from bizeval.models.benchmarks import (
    BenchmarkAnalysis, IndustryBenchmark, MultipleComparison, MultiplePosition, RiskLevel,
)
from bizeval.models.profile import FinancialProfile

# Ratio of implied to benchmark multiple
ABOVE_INDUSTRY_RATIO = 1.2
BELOW_INDUSTRY_RATIO = 0.8

# Fit score bands for the recommendation text
EXCELLENT_FIT_SCORE = 0.8
GOOD_FIT_SCORE = 0.6
FAIR_FIT_SCORE = 0.4

DEFAULT_FALLBACK_INDUSTRY = "Services"

_SOURCE = "Industry Reports 2024"

_DEFAULT_BENCHMARKS: tuple[IndustryBenchmark, ...] = (
    IndustryBenchmark(
        industry="Technology", revenue_multiple=4.5, profit_multiple=15.0, ebitda_multiple=12.0,
        sde_multiple=6.0, average_business_size=2_500_000, typical_growth_rate=0.25,
        risk_level=RiskLevel.HIGH, data_source=_SOURCE,
    ),
    IndustryBenchmark(
        industry="Manufacturing", revenue_multiple=1.2, profit_multiple=8.5, ebitda_multiple=7.0,
        sde_multiple=4.0, average_business_size=5_000_000, typical_growth_rate=0.08,
        risk_level=RiskLevel.MEDIUM, data_source=_SOURCE,
    ),
    IndustryBenchmark(
        industry="Retail", revenue_multiple=0.8, profit_multiple=12.0, ebitda_multiple=6.5,
        sde_multiple=3.5, average_business_size=1_200_000, typical_growth_rate=0.05,
        risk_level=RiskLevel.MEDIUM, data_source=_SOURCE,
    ),
    IndustryBenchmark(
        industry="Services", revenue_multiple=2.8, profit_multiple=10.0, ebitda_multiple=8.5,
        sde_multiple=4.5, average_business_size=800_000, typical_growth_rate=0.15,
        risk_level=RiskLevel.LOW, data_source=_SOURCE,
    ),
    IndustryBenchmark(
        industry="Healthcare", revenue_multiple=3.2, profit_multiple=18.0, ebitda_multiple=14.0,
        sde_multiple=7.0, average_business_size=3_500_000, typical_growth_rate=0.12,
        risk_level=RiskLevel.LOW, data_source=_SOURCE,
    ),
    IndustryBenchmark(
        industry="Construction", revenue_multiple=0.9, profit_multiple=7.5, ebitda_multiple=6.0,
        sde_multiple=3.8, average_business_size=3_000_000, typical_growth_rate=0.06,
        risk_level=RiskLevel.HIGH, data_source=_SOURCE,
    ),
    IndustryBenchmark(
        industry="Food & Beverage", revenue_multiple=1.5, profit_multiple=9.0, ebitda_multiple=7.5,
        sde_multiple=4.2, average_business_size=900_000, typical_growth_rate=0.08,
        risk_level=RiskLevel.MEDIUM, data_source=_SOURCE,
    ),
    IndustryBenchmark(
        industry="Real Estate", revenue_multiple=6.0, profit_multiple=12.5, ebitda_multiple=10.0,
        sde_multiple=5.5, average_business_size=4_500_000, typical_growth_rate=0.10,
        risk_level=RiskLevel.LOW, data_source=_SOURCE,
    ),
    IndustryBenchmark(
        industry="Financial Services", revenue_multiple=5.5, profit_multiple=20.0, ebitda_multiple=16.0,
        sde_multiple=8.0, average_business_size=8_000_000, typical_growth_rate=0.18,
        risk_level=RiskLevel.VERY_HIGH, data_source=_SOURCE,
    ),
    IndustryBenchmark(
        industry="Transportation", revenue_multiple=1.1, profit_multiple=8.0, ebitda_multiple=6.5,
        sde_multiple=3.9, average_business_size=2_200_000, typical_growth_rate=0.07,
        risk_level=RiskLevel.HIGH, data_source=_SOURCE,
    ),
)


def default_benchmarks() -> Mapping[str, IndustryBenchmark]:
    """Read-only industry name -> benchmark table of the built-in reference data."""
    return MappingProxyType({b.industry: b for b in _DEFAULT_BENCHMARKS})


def find_benchmark(
    industry: str | None,
    benchmarks: Mapping[str, IndustryBenchmark],
    fallback: str | None = DEFAULT_FALLBACK_INDUSTRY,
) -> IndustryBenchmark | None:
    """Exact (case-insensitive) match, then substring match either way, then ``fallback``."""
    if industry:
        wanted = industry.strip().lower()
        for name, benchmark in benchmarks.items():
            if name.lower() == wanted:
                return benchmark
        for name, benchmark in benchmarks.items():
            if name.lower() in wanted or wanted in name.lower():
                return benchmark
    if fallback is not None:
        return benchmarks.get(fallback)
    return None


def _safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, 0 when the denominator is not positive."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def _compare_multiple(metric: str, implied: float, benchmark_multiple: float) -> MultipleComparison:
    ratio = _safe_ratio(implied, benchmark_multiple)
    if implied == 0 or benchmark_multiple <= 0:
        position = MultiplePosition.NOT_APPLICABLE
    elif ratio >= ABOVE_INDUSTRY_RATIO:
        position = MultiplePosition.ABOVE
    elif ratio <= BELOW_INDUSTRY_RATIO:
        position = MultiplePosition.BELOW
    else:
        position = MultiplePosition.IN_LINE
    return MultipleComparison(
        metric=metric,
        implied_multiple=implied,
        benchmark_multiple=benchmark_multiple,
        ratio=ratio,
        position=position,
    )


def _recommendation(score: float) -> str:
    if score >= EXCELLENT_FIT_SCORE:
        return "Excellent opportunity - above industry standards"
    if score >= GOOD_FIT_SCORE:
        return "Good opportunity - meets industry standards"
    if score >= FAIR_FIT_SCORE:
        return "Fair opportunity - below industry standards"
    return "Poor opportunity - significantly below industry standards"


def compare_to_benchmark(
    profile: FinancialProfile,
    benchmark: IndustryBenchmark,
    business_growth_rate: float | None = None,
) -> BenchmarkAnalysis:
    """Compare a business's implied multiples, size and growth with its industry.

    The fit score is the unweighted mean of four signals, each in [0, 1]:
    revenue-multiple closeness ``max(0, 1 - |ratio - 1|)``, the same for the
    profit multiple, size ``min(1, revenue / average size)`` and growth
    ``min(1, (1 + growth) / (1 + typical growth))``. Growth defaults to 0.
    """
    implied_revenue_multiple = _safe_ratio(profile.asking_price, profile.annual_revenue)
    implied_profit_multiple = _safe_ratio(profile.asking_price, profile.annual_profit)

    comparisons = [
        _compare_multiple("revenue", implied_revenue_multiple, benchmark.revenue_multiple),
        _compare_multiple("profit", implied_profit_multiple, benchmark.profit_multiple),
        # Profit is the EBITDA / SDE proxy
        _compare_multiple("ebitda", implied_profit_multiple, benchmark.ebitda_multiple),
        _compare_multiple("sde", implied_profit_multiple, benchmark.sde_multiple),
    ]
    revenue_ratio = comparisons[0].ratio
    profit_ratio = comparisons[1].ratio

    size_comparison = _safe_ratio(profile.annual_revenue, benchmark.average_business_size)
    growth = business_growth_rate if business_growth_rate is not None else 0.0
    growth_comparison = _safe_ratio(1 + growth, 1 + benchmark.typical_growth_rate)

    revenue_score = max(0.0, 1 - abs(revenue_ratio - 1))
    profit_score = max(0.0, 1 - abs(profit_ratio - 1))
    size_score = min(1.0, max(0.0, size_comparison))
    growth_score = min(1.0, max(0.0, growth_comparison))
    score = (revenue_score + profit_score + size_score + growth_score) / 4
    score = min(1.0, max(0.0, score))

    return BenchmarkAnalysis(
        industry=benchmark.industry,
        implied_revenue_multiple=implied_revenue_multiple,
        implied_profit_multiple=implied_profit_multiple,
        revenue_multiple_comparison=revenue_ratio,
        profit_multiple_comparison=profit_ratio,
        size_comparison=size_comparison,
        growth_comparison=growth_comparison,
        comparisons=comparisons,
        risk_level=benchmark.risk_level,
        overall_score=score,
        recommendation=_recommendation(score),
    )

import pytest

from bizeval.models.offer import RiskSeverity
from bizeval.models.profile import FinancialProfile
from bizeval.models.valuations import ConfidenceLevel, ValuationMethodology, ValuationResult
from bizeval.valuation.benchmarks import compare_to_benchmark
from bizeval.valuation.errors import InvalidInputError
from bizeval.valuation.multiples import calculate_valuation
from bizeval.valuation.offer import recommend_offer


def _valuation(value: float) -> ValuationResult:
    return ValuationResult(
        calculated_value=value, multiple=1.0, methodology=ValuationMethodology.MARKET_COMPARISON,
    )


def test_requires_a_valuation(profile):
    with pytest.raises(InvalidInputError) as exc:
        recommend_offer(profile, [])
    assert exc.value.missing_fields == ["valuations"]


def test_profit_multiple_to_offer(profile):
    valuation = calculate_valuation(profile, ValuationMethodology.PROFIT_MULTIPLE, 3.0)
    offer = recommend_offer(profile, [valuation])

    assert offer.average_valuation == 600_000
    assert offer.valuation_range == (600_000, 600_000)
    assert offer.minimum_offer < offer.recommended_offer < offer.maximum_offer
    # Neutral fit without a benchmark
    assert offer.benchmark_fit_score == 0.5
    assert offer.risk_adjustment == pytest.approx(0.10)
    assert offer.recommended_offer == pytest.approx(540_000)
    assert offer.minimum_offer == pytest.approx(459_000)
    assert offer.maximum_offer == pytest.approx(621_000)
    assert offer.opening_offer == pytest.approx(459_000 * 0.9)


def test_premium_over_asking(profile):
    offer = recommend_offer(profile, [_valuation(600_000)])
    assert offer.discount_to_asking == pytest.approx(-0.08)
    assert "premium" in offer.executive_summary


def test_discount_to_asking():
    profile = FinancialProfile(annual_revenue=1_000_000, annual_profit=200_000, asking_price=900_000)
    offer = recommend_offer(profile, [_valuation(600_000)])
    assert offer.discount_to_asking == pytest.approx((900_000 - 540_000) / 900_000)
    assert "discount" in offer.executive_summary


def test_zero_asking_price():
    profile = FinancialProfile(annual_revenue=1_000_000, annual_profit=200_000)
    offer = recommend_offer(profile, [_valuation(600_000)])
    assert offer.discount_to_asking == 0.0


def test_benchmark_raises_adjustment(profile, benchmarks):
    manufacturing = benchmarks["Manufacturing"]
    offer = recommend_offer(profile, [_valuation(600_000)], manufacturing)
    fit = compare_to_benchmark(profile, manufacturing).overall_score

    assert offer.benchmark_fit_score == pytest.approx(fit)
    assert offer.risk_adjustment == pytest.approx(0.05 + (1 - fit) * 0.10 + 0.02)
    assert offer.recommended_offer == pytest.approx(600_000 * (1 - offer.risk_adjustment))
    assert any(r.title == "Industry Risk" and r.severity == RiskSeverity.MEDIUM for r in offer.risk_factors)
    assert offer.industry_comparison.startswith("Below industry average")


def test_risk_factors_sorted_by_severity(benchmarks):
    profile = FinancialProfile(
        annual_revenue=400_000, annual_profit=20_000, asking_price=300_000, industry="Technology",
    )
    offer = recommend_offer(
        profile,
        [_valuation(100_000), _valuation(200_000), _valuation(300_000)],
        benchmarks["Technology"],
    )
    assert [r.title for r in offer.risk_factors] == [
        "Low Profit Margin", "Industry Risk", "Valuation Variance", "Small Business Risk",
    ]
    assert offer.confidence_level == ConfidenceLevel.MEDIUM


def test_very_high_industry_is_critical(benchmarks):
    profile = FinancialProfile(
        annual_revenue=3_000_000, annual_profit=600_000, asking_price=2_000_000, industry="Financial Services",
    )
    offer = recommend_offer(profile, [_valuation(2_000_000)], benchmarks["Financial Services"])
    assert offer.risk_factors[0].severity == RiskSeverity.CRITICAL


def test_market_position_and_confidence(profile):
    offer = recommend_offer(profile, [_valuation(600_000)])
    assert offer.market_position_score == pytest.approx(0.6)
    assert offer.confidence_level == ConfidenceLevel.HIGH
    assert offer.risk_factors == []
    assert offer.industry_comparison == "No industry data available"


def test_young_high_margin_business():
    profile = FinancialProfile(
        annual_revenue=2_500_000, annual_profit=750_000, asking_price=2_000_000,
        industry="Technology", years_established=3,
    )
    offer = recommend_offer(profile, [_valuation(2_000_000)])
    assert offer.market_position_score == pytest.approx(1.0)
    descriptions = [f.description for f in offer.market_factors]
    assert "Strong revenue base provides stability" in descriptions
    assert "Technology industry has positive outlook" in descriptions


def test_next_steps(profile):
    offer = recommend_offer(profile, [_valuation(600_000)])
    assert [s.order for s in offer.next_steps] == [1, 2, 3, 4, 5, 6]
    assert "Manufacturing" in offer.next_steps[1].description
    assert len(offer.key_talking_points) == 6
    assert "$540,000" in offer.opening_strategy


def test_negative_valuation_keeps_band_ordered():
    profile = FinancialProfile(annual_revenue=1_000_000, annual_profit=-100_000, asking_price=250_000)
    valuation = calculate_valuation(profile, ValuationMethodology.PROFIT_MULTIPLE, 3.0)
    offer = recommend_offer(profile, [valuation])

    assert offer.average_valuation == -300_000
    # Risk adjustment pushes the offer down, not toward zero
    assert offer.recommended_offer == pytest.approx(-330_000)
    assert offer.minimum_offer == pytest.approx(-379_500)
    assert offer.maximum_offer == pytest.approx(-280_500)
    assert offer.minimum_offer <= offer.recommended_offer <= offer.maximum_offer
    assert offer.opening_offer <= offer.minimum_offer


def test_zero_valuation_collapses_band(profile):
    offer = recommend_offer(profile, [_valuation(0.0)])
    assert offer.minimum_offer == offer.recommended_offer == offer.maximum_offer == 0.0


def test_custom_offer_band(profile):
    offer = recommend_offer(profile, [_valuation(600_000)], offer_band=0.10)
    assert offer.recommended_offer == pytest.approx(540_000)
    assert offer.minimum_offer == pytest.approx(486_000)
    assert offer.maximum_offer == pytest.approx(594_000)

import pytest

from bizeval.models.profile import FinancialProfile
from bizeval.models.scenarios import MarketConditions, ScenarioSet, ScenarioType
from bizeval.models.valuations import ValuationMethodology
from bizeval.valuation.errors import InvalidInputError
from bizeval.valuation.scenarios import analyze_scenarios, custom_scenario, generate_scenarios

BASE = 600_000


def test_three_default_scenarios(profile):
    scenarios = generate_scenarios(profile, BASE)
    assert [s.scenario_type for s in scenarios.scenarios] == [
        ScenarioType.OPTIMISTIC, ScenarioType.REALISTIC, ScenarioType.PESSIMISTIC,
    ]
    assert [s.name for s in scenarios.scenarios] == ["Optimistic", "Realistic", "Pessimistic"]
    assert all(s.base_valuation == BASE for s in scenarios.scenarios)


def test_scenarios_ordered_by_value(profile):
    scenarios = generate_scenarios(profile, BASE)
    optimistic = scenarios.get(ScenarioType.OPTIMISTIC).calculated_value
    realistic = scenarios.get(ScenarioType.REALISTIC).calculated_value
    pessimistic = scenarios.get(ScenarioType.PESSIMISTIC).calculated_value
    assert optimistic > realistic > pessimistic


def test_scenario_values(profile):
    scenarios = generate_scenarios(profile, BASE)
    assert scenarios.get(ScenarioType.REALISTIC).calculated_value == pytest.approx(BASE * 1.08 * 0.90)
    assert scenarios.get(ScenarioType.OPTIMISTIC).calculated_value == pytest.approx(
        BASE * 1.30 * 1.15 * 0.95 * 1.15
    )
    assert scenarios.get(ScenarioType.PESSIMISTIC).calculated_value == pytest.approx(
        BASE * 0.80 * 0.95 * 0.80 * 0.85
    )


def test_adjusted_drivers(profile):
    optimistic = generate_scenarios(profile, BASE).get(ScenarioType.OPTIMISTIC)
    assert optimistic.adjusted_revenue == pytest.approx(1_200_000)
    assert optimistic.adjusted_profit == pytest.approx(260_000)
    assert optimistic.market_conditions == MarketConditions.GOOD
    assert optimistic.methodology == ValuationMethodology.PROFIT_MULTIPLE
    assert optimistic.calculated_value == pytest.approx(optimistic.adjusted_profit * optimistic.multiple)


def test_revenue_driver_when_unprofitable():
    profile = FinancialProfile(annual_revenue=800_000, annual_profit=-40_000)
    realistic = generate_scenarios(profile, 400_000).get(ScenarioType.REALISTIC)
    assert realistic.methodology == ValuationMethodology.REVENUE_MULTIPLE
    assert realistic.calculated_value == pytest.approx(400_000 * 1.08 * 0.90)


def test_no_drivers_scales_base_directly():
    profile = FinancialProfile(annual_revenue=0, annual_profit=0)
    scenarios = generate_scenarios(profile, 100_000)
    pessimistic = scenarios.get(ScenarioType.PESSIMISTIC)
    assert pessimistic.methodology == ValuationMethodology.MARKET_COMPARISON
    assert pessimistic.calculated_value == pytest.approx(100_000 * 0.95 * 0.80 * 0.85)
    assert scenarios.get(ScenarioType.OPTIMISTIC).calculated_value > pessimistic.calculated_value


def test_market_multipliers():
    assert MarketConditions.EXCELLENT.multiplier == 1.3
    assert MarketConditions.AVERAGE.multiplier == 1.0
    assert MarketConditions.RECESSION.multiplier == 0.7
    assert "downturn" in MarketConditions.RECESSION.description


def test_analysis(profile):
    analysis = analyze_scenarios(generate_scenarios(profile, BASE))
    o, r, p = analysis.optimistic_value, analysis.realistic_value, analysis.pessimistic_value
    assert analysis.value_range == pytest.approx(o - p)
    assert analysis.risk_premium == pytest.approx((o - p) / r)
    assert analysis.recommended_value == pytest.approx((o + 2 * r + p) / 4)
    assert analysis.risk_level == "High Risk"
    assert analysis.investment_recommendation.startswith("Consider")
    assert set(analysis.scenario_values) == {"Optimistic", "Realistic", "Pessimistic"}


def test_custom_scenario_excluded_by_default(profile):
    scenarios = generate_scenarios(profile, BASE)
    bullish = custom_scenario(
        profile, BASE, "Expansion", revenue_factor=2.0, profit_factor=2.0,
        growth_rate=0.30, market_conditions=MarketConditions.EXCELLENT,
    )
    extended = scenarios.with_scenario(bullish)

    baseline = analyze_scenarios(scenarios)
    without = analyze_scenarios(extended)
    assert without.value_range == baseline.value_range
    assert without.recommended_value == baseline.recommended_value
    assert without.scenario_values["Expansion"] == bullish.calculated_value
    assert not without.includes_custom

    with_custom = analyze_scenarios(extended, include_custom=True)
    assert with_custom.includes_custom
    assert with_custom.value_range == pytest.approx(bullish.calculated_value - baseline.pessimistic_value)
    o, r, p = baseline.optimistic_value, baseline.realistic_value, baseline.pessimistic_value
    assert with_custom.recommended_value == pytest.approx((o + 2 * r + p + bullish.calculated_value) / 5)


def test_with_scenario_returns_new_set(profile):
    scenarios = generate_scenarios(profile, BASE)
    extended = scenarios.with_scenario(custom_scenario(profile, BASE, "Flat"))
    assert len(scenarios.scenarios) == 3
    assert len(extended.scenarios) == 4
    assert extended.custom()[0].scenario_type == ScenarioType.CUSTOM


def test_zero_realistic_value():
    profile = FinancialProfile(annual_revenue=0, annual_profit=0)
    analysis = analyze_scenarios(generate_scenarios(profile, 0))
    assert analysis.risk_premium == 0.0
    assert analysis.recommended_value == 0.0


def test_empty_set_rejected():
    with pytest.raises(InvalidInputError):
        analyze_scenarios(ScenarioSet())

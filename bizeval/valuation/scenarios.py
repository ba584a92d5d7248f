import logging
from dataclasses import dataclass

from bizeval.models.profile import FinancialProfile
from bizeval.models.scenarios import (
    MarketConditions, Scenario, ScenarioAnalysis, ScenarioSet, ScenarioType,
)
from bizeval.models.valuations import ConfidenceLevel, ValuationMethodology
from bizeval.valuation.errors import InvalidInputError
from bizeval.valuation.multiples import calculate_valuation, driver_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScenarioPolicy:
    revenue_factor: float
    profit_factor: float
    growth_rate: float
    risk_adjustment: float
    market_conditions: MarketConditions
    confidence_level: ConfidenceLevel
    assumptions: str


OPTIMISTIC_POLICY = ScenarioPolicy(
    revenue_factor=1.20,
    profit_factor=1.30,
    growth_rate=0.15,
    risk_adjustment=0.05,
    market_conditions=MarketConditions.GOOD,
    confidence_level=ConfidenceLevel.MEDIUM,
    assumptions="Revenue growth of 20%, profit margin improvement, favorable market conditions",
)
REALISTIC_POLICY = ScenarioPolicy(
    revenue_factor=1.0,
    profit_factor=1.0,
    growth_rate=0.08,
    risk_adjustment=0.10,
    market_conditions=MarketConditions.AVERAGE,
    confidence_level=ConfidenceLevel.HIGH,
    assumptions="Current revenue and profit levels maintained, moderate growth, normal market conditions",
)
PESSIMISTIC_POLICY = ScenarioPolicy(
    revenue_factor=0.85,
    profit_factor=0.80,
    growth_rate=-0.05,
    risk_adjustment=0.20,
    market_conditions=MarketConditions.POOR,
    confidence_level=ConfidenceLevel.MEDIUM,
    assumptions="Revenue decline of 15%, profit margin pressure, challenging market conditions",
)

DEFAULT_POLICIES: dict[ScenarioType, ScenarioPolicy] = {
    ScenarioType.OPTIMISTIC: OPTIMISTIC_POLICY,
    ScenarioType.REALISTIC: REALISTIC_POLICY,
    ScenarioType.PESSIMISTIC: PESSIMISTIC_POLICY,
}

# Drivers tried in order when re-expressing the base valuation as a multiple
_DRIVER_PREFERENCE = (
    ValuationMethodology.PROFIT_MULTIPLE,
    ValuationMethodology.REVENUE_MULTIPLE,
)

# Weights for the recommended value blend
OPTIMISTIC_WEIGHT = 1.0
REALISTIC_WEIGHT = 2.0
PESSIMISTIC_WEIGHT = 1.0
CUSTOM_WEIGHT = 1.0

# Value range / realistic value thresholds for the risk label
LOW_RISK_RANGE_RATIO = 0.3
MEDIUM_RISK_RANGE_RATIO = 0.6


def _build_scenario(
    profile: FinancialProfile,
    base_valuation: float,
    scenario_type: ScenarioType,
    name: str,
    policy: ScenarioPolicy,
) -> Scenario:
    adjusted = profile.model_copy(update={
        "annual_revenue": profile.annual_revenue * policy.revenue_factor,
        "annual_profit": profile.annual_profit * policy.profit_factor,
    })
    adjustment = (1 + policy.growth_rate) * (1 - policy.risk_adjustment) * policy.market_conditions.multiplier

    # Re-express the seed as a multiple of the strongest positive driver
    for methodology in _DRIVER_PREFERENCE:
        driver = driver_value(profile, methodology)
        if driver is not None and driver > 0:
            multiple = base_valuation / driver * adjustment
            result = calculate_valuation(adjusted, methodology, multiple)
            break
    else:
        methodology = ValuationMethodology.MARKET_COMPARISON
        multiple = adjustment
        result = calculate_valuation(
            adjusted, methodology, multiple, manual_value=base_valuation * adjustment,
        )

    return Scenario(
        scenario_type=scenario_type,
        name=name,
        base_valuation=base_valuation,
        adjusted_revenue=adjusted.annual_revenue,
        adjusted_profit=adjusted.annual_profit,
        growth_rate=policy.growth_rate,
        risk_adjustment=policy.risk_adjustment,
        market_conditions=policy.market_conditions,
        methodology=methodology,
        multiple=multiple,
        calculated_value=result.calculated_value,
        confidence_level=policy.confidence_level,
        assumptions=policy.assumptions,
    )


def generate_scenarios(profile: FinancialProfile, base_valuation: float) -> ScenarioSet:
    """Build the optimistic, realistic and pessimistic scenarios around ``base_valuation``."""
    scenarios = [
        _build_scenario(profile, base_valuation, scenario_type, scenario_type.value, policy)
        for scenario_type, policy in DEFAULT_POLICIES.items()
    ]
    return ScenarioSet(scenarios=scenarios)


def custom_scenario(
    profile: FinancialProfile,
    base_valuation: float,
    name: str,
    revenue_factor: float = 1.0,
    profit_factor: float = 1.0,
    growth_rate: float = 0.0,
    risk_adjustment: float = 0.0,
    market_conditions: MarketConditions = MarketConditions.AVERAGE,
    assumptions: str | None = None,
) -> Scenario:
    """User-defined scenario valued with the same rules as the default three."""
    policy = ScenarioPolicy(
        revenue_factor=revenue_factor,
        profit_factor=profit_factor,
        growth_rate=growth_rate,
        risk_adjustment=risk_adjustment,
        market_conditions=market_conditions,
        confidence_level=ConfidenceLevel.LOW,
        assumptions=assumptions or "",
    )
    return _build_scenario(profile, base_valuation, ScenarioType.CUSTOM, name, policy)


def _risk_label(value_range: float, realistic: float) -> str:
    ratio = value_range / realistic if realistic else float("inf")
    if 0 <= ratio < LOW_RISK_RANGE_RATIO:
        return "Low Risk"
    if LOW_RISK_RANGE_RATIO <= ratio < MEDIUM_RISK_RANGE_RATIO:
        return "Medium Risk"
    return "High Risk"


def _investment_recommendation(optimistic: float, realistic: float, pessimistic: float) -> str:
    if realistic == 0:
        return "Avoid - Limited upside with significant risk"
    upside = (optimistic - realistic) / realistic
    downside = (realistic - pessimistic) / realistic
    if upside > 0.3 and downside < 0.2:
        return "Strong Buy - High upside with limited downside"
    if upside > 0.2 and downside < 0.3:
        return "Buy - Good risk-reward balance"
    if upside > 0.1:
        return "Consider - Moderate opportunity with some risk"
    return "Avoid - Limited upside with significant risk"


def analyze_scenarios(scenarios: ScenarioSet, include_custom: bool = False) -> ScenarioAnalysis:
    """Summarise a scenario set into range, risk premium and a weighted recommended value.

    Custom scenarios always appear in ``scenario_values``; they only move the
    range, risk premium and recommended value when ``include_custom`` is set.
    """
    if not scenarios.scenarios:
        raise InvalidInputError("Scenario analysis requires at least one scenario", ["scenarios"])

    def value_of(scenario_type: ScenarioType) -> float:
        scenario = scenarios.get(scenario_type)
        return scenario.calculated_value if scenario else 0.0

    optimistic = value_of(ScenarioType.OPTIMISTIC)
    realistic = value_of(ScenarioType.REALISTIC)
    pessimistic = value_of(ScenarioType.PESSIMISTIC)

    weighted = [
        (optimistic, OPTIMISTIC_WEIGHT),
        (realistic, REALISTIC_WEIGHT),
        (pessimistic, PESSIMISTIC_WEIGHT),
    ]
    if include_custom:
        weighted += [(s.calculated_value, CUSTOM_WEIGHT) for s in scenarios.custom()]

    values = [v for v, _ in weighted]
    value_range = max(values) - min(values)
    risk_premium = value_range / realistic if realistic else 0.0
    total_weight = sum(w for _, w in weighted)
    recommended = sum(v * w for v, w in weighted) / total_weight

    return ScenarioAnalysis(
        optimistic_value=optimistic,
        realistic_value=realistic,
        pessimistic_value=pessimistic,
        value_range=value_range,
        risk_premium=risk_premium,
        risk_level=_risk_label(value_range, realistic),
        recommended_value=recommended,
        investment_recommendation=_investment_recommendation(optimistic, realistic, pessimistic),
        includes_custom=include_custom,
        scenario_values={s.name: s.calculated_value for s in scenarios.scenarios},
    )

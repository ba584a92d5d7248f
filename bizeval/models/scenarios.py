from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional

from bizeval.models.valuations import ConfidenceLevel, ValuationMethodology


class ScenarioType(str, Enum):
    OPTIMISTIC = "Optimistic"
    REALISTIC = "Realistic"
    PESSIMISTIC = "Pessimistic"
    CUSTOM = "Custom"


class MarketConditions(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    AVERAGE = "Average"
    POOR = "Poor"
    RECESSION = "Recession"

    @property
    def multiplier(self) -> float:
        return _MARKET_MULTIPLIERS[self]

    @property
    def description(self) -> str:
        return _MARKET_DESCRIPTIONS[self]


_MARKET_MULTIPLIERS = {
    MarketConditions.EXCELLENT: 1.3,
    MarketConditions.GOOD: 1.15,
    MarketConditions.AVERAGE: 1.0,
    MarketConditions.POOR: 0.85,
    MarketConditions.RECESSION: 0.7,
}

_MARKET_DESCRIPTIONS = {
    MarketConditions.EXCELLENT: "Strong economic growth, high buyer demand, low interest rates",
    MarketConditions.GOOD: "Moderate growth, stable demand, reasonable financing",
    MarketConditions.AVERAGE: "Normal market conditions, balanced supply and demand",
    MarketConditions.POOR: "Economic uncertainty, reduced demand, higher financing costs",
    MarketConditions.RECESSION: "Economic downturn, low demand, difficult financing",
}


class Scenario(BaseModel):
    scenario_type: ScenarioType
    name: str
    base_valuation: float
    adjusted_revenue: float
    adjusted_profit: float
    growth_rate: float
    risk_adjustment: float
    market_conditions: MarketConditions
    methodology: ValuationMethodology
    multiple: float = Field(..., description="Effective multiple applied to the adjusted driver")
    calculated_value: float
    confidence_level: ConfidenceLevel
    assumptions: Optional[str] = None


class ScenarioSet(BaseModel):
    scenarios: list[Scenario] = Field(default_factory=list)

    def get(self, scenario_type: ScenarioType) -> Scenario | None:
        return next((s for s in self.scenarios if s.scenario_type == scenario_type), None)

    def custom(self) -> list[Scenario]:
        return [s for s in self.scenarios if s.scenario_type == ScenarioType.CUSTOM]

    def with_scenario(self, scenario: Scenario) -> "ScenarioSet":
        """Return a new set with ``scenario`` appended."""
        return ScenarioSet(scenarios=[*self.scenarios, scenario])


class ScenarioAnalysis(BaseModel):
    optimistic_value: float
    realistic_value: float
    pessimistic_value: float
    value_range: float
    risk_premium: float
    risk_level: str
    recommended_value: float
    investment_recommendation: str
    includes_custom: bool = False
    scenario_values: dict[str, float] = Field(
        default_factory=dict, description="Value per scenario name, custom scenarios included"
    )

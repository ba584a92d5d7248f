from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "Very High"


class IndustryBenchmark(BaseModel):
    model_config = ConfigDict(frozen=True)

    industry: str
    revenue_multiple: float
    profit_multiple: float
    ebitda_multiple: float
    sde_multiple: float
    average_business_size: float = Field(..., description="Average annual revenue of businesses in the industry")
    typical_growth_rate: float
    risk_level: RiskLevel
    data_source: Optional[str] = None


class MultiplePosition(str, Enum):
    ABOVE = "above industry"
    IN_LINE = "matches industry"
    BELOW = "below industry"
    NOT_APPLICABLE = "not applicable"


class MultipleComparison(BaseModel):
    metric: str
    implied_multiple: float
    benchmark_multiple: float
    ratio: float
    position: MultiplePosition


class BenchmarkAnalysis(BaseModel):
    industry: str
    implied_revenue_multiple: float
    implied_profit_multiple: float
    revenue_multiple_comparison: float
    profit_multiple_comparison: float
    size_comparison: float
    growth_comparison: float
    comparisons: list[MultipleComparison] = Field(default_factory=list)
    risk_level: RiskLevel
    overall_score: float = Field(..., description="Benchmark fit score in [0, 1]")
    recommendation: str

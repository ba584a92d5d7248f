from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, timezone

from bizeval.models.benchmarks import BenchmarkAnalysis
from bizeval.models.offer import OfferRecommendation
from bizeval.models.profile import FinancingSummary
from bizeval.models.roi import ROIResults
from bizeval.models.scenarios import ScenarioAnalysis, ScenarioSet
from bizeval.models.valuations import ValuationResult


class PipelineStep(BaseModel):
    step_name: str
    status: str = "pending"  # pending, running, completed, failed, skipped
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_ms: Optional[float] = None
    error: Optional[str] = None


class AnalysisReport(BaseModel):
    id: Optional[str] = None
    company_name: str
    valuations: list[ValuationResult] = Field(default_factory=list)
    benchmark_analysis: Optional[BenchmarkAnalysis] = None
    scenario_set: Optional[ScenarioSet] = None
    scenario_analysis: Optional[ScenarioAnalysis] = None
    roi: Optional[ROIResults] = None
    financing: Optional[FinancingSummary] = None
    offer: Optional[OfferRecommendation] = None
    error: Optional[str] = Field(None, description="Error message if the offer could not be composed")
    missing_data: list[str] = Field(default_factory=list, description="Inputs missing for a complete analysis")
    pipeline_steps: list[PipelineStep] = Field(default_factory=list)
    assumptions: dict = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

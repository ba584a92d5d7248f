from bizeval.models.profile import FinancialProfile, LoanTerms, FinancingSummary
from bizeval.models.valuations import ValuationMethodology, ConfidenceLevel, ValuationResult
from bizeval.models.roi import ROIInputs, SensitivitySettings, SensitivityBand, RiskTier, ROIResults
from bizeval.models.scenarios import (
    ScenarioType, MarketConditions, Scenario, ScenarioSet, ScenarioAnalysis,
)
from bizeval.models.benchmarks import (
    RiskLevel, IndustryBenchmark, MultiplePosition, MultipleComparison, BenchmarkAnalysis,
)
from bizeval.models.offer import RiskSeverity, RiskFactor, MarketFactor, NextStep, OfferRecommendation
from bizeval.models.request import ValuationInput, FinancingInput, AnalysisRequest
from bizeval.models.report import PipelineStep, AnalysisReport

__all__ = [
    "FinancialProfile", "LoanTerms", "FinancingSummary",
    "ValuationMethodology", "ConfidenceLevel", "ValuationResult",
    "ROIInputs", "SensitivitySettings", "SensitivityBand", "RiskTier", "ROIResults",
    "ScenarioType", "MarketConditions", "Scenario", "ScenarioSet", "ScenarioAnalysis",
    "RiskLevel", "IndustryBenchmark", "MultiplePosition", "MultipleComparison", "BenchmarkAnalysis",
    "RiskSeverity", "RiskFactor", "MarketFactor", "NextStep", "OfferRecommendation",
    "ValuationInput", "FinancingInput", "AnalysisRequest",
    "PipelineStep", "AnalysisReport",
]

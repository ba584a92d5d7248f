import time
import uuid
import logging
from datetime import datetime, timezone
from typing import Mapping

from bizeval.config import Settings, get_settings
from bizeval.models.benchmarks import BenchmarkAnalysis, IndustryBenchmark
from bizeval.models.offer import OfferRecommendation
from bizeval.models.profile import FinancingSummary
from bizeval.models.report import AnalysisReport, PipelineStep
from bizeval.models.request import AnalysisRequest
from bizeval.models.roi import ROIResults
from bizeval.models.scenarios import ScenarioAnalysis, ScenarioSet
from bizeval.models.valuations import ValuationResult
from bizeval.valuation.amortization import financing_summary
from bizeval.valuation.benchmarks import compare_to_benchmark, default_benchmarks, find_benchmark
from bizeval.valuation.errors import InvalidInputError
from bizeval.valuation.multiples import calculate_valuation
from bizeval.valuation.offer import recommend_offer
from bizeval.valuation.roi import compute_roi
from bizeval.valuation.scenarios import analyze_scenarios, generate_scenarios

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    def __init__(
        self,
        benchmarks: Mapping[str, IndustryBenchmark] | None = None,
        settings: Settings | None = None,
    ):
        self.benchmarks = benchmarks if benchmarks is not None else default_benchmarks()
        self.settings = settings or get_settings()

    def run(self, request: AnalysisRequest, report_id: str | None = None) -> AnalysisReport:
        if report_id is None:
            report_id = str(uuid.uuid4())
        steps: list[PipelineStep] = []
        profile = request.profile

        logger.info(f"=== Analysis started for '{request.company_name}' (id={report_id}) ===")

        assumptions: dict = {
            "company_name": request.company_name,
            "industry": profile.industry,
            "annual_revenue": profile.annual_revenue,
            "annual_profit": profile.annual_profit,
            "asking_price": profile.asking_price,
        }

        # Step 1: Valuate
        valuations = self._run_step("valuate", steps, self._valuate, request) or []

        # Step 2: Benchmark
        benchmark = find_benchmark(profile.industry, self.benchmarks, fallback=self.settings.default_industry)
        benchmark_analysis = None
        if benchmark:
            assumptions["benchmark_industry"] = benchmark.industry
            benchmark_analysis = self._run_step(
                "benchmark", steps, self._benchmark, request, benchmark
            )
        else:
            steps.append(_skipped("benchmark", "No industry benchmark available"))

        # Step 3: Scenarios (seeded from the explicit base valuation or the average)
        base_valuation = request.base_valuation
        if base_valuation is None and valuations:
            base_valuation = sum(v.calculated_value for v in valuations) / len(valuations)
        scenario_set = None
        scenario_analysis = None
        if base_valuation is not None:
            assumptions["scenario_base_valuation"] = base_valuation
            outcome = self._run_step("scenarios", steps, self._scenarios, request, base_valuation)
            if outcome:
                scenario_set, scenario_analysis = outcome
        else:
            steps.append(_skipped("scenarios", "No base valuation to seed scenarios"))

        # Step 4: ROI
        roi = None
        if request.roi:
            roi = self._run_step("roi", steps, self._roi, request)
            if roi:
                assumptions["discount_rate"] = roi.discount_rate
        else:
            steps.append(_skipped("roi", "No ROI inputs provided"))

        # Step 5: Financing
        financing = None
        if request.financing:
            financing = self._run_step("financing", steps, self._financing, request)
        else:
            steps.append(_skipped("financing", "No financing inputs provided"))

        # Step 6: Offer, handle InvalidInputError explicitly
        offer = None
        error_message = None
        missing_data: list[str] = []

        offer_step = PipelineStep(step_name="offer", status="running", started_at=datetime.now(timezone.utc))
        offer_start = time.time()
        try:
            offer = self._offer(request, valuations, benchmark)
            offer_step.status = "completed"
            logger.info(f"Step 'offer' completed in {(time.time() - offer_start) * 1000:.0f}ms")
        except InvalidInputError as e:
            offer_step.status = "failed"
            offer_step.error = str(e)
            error_message = str(e)
            missing_data = e.missing_fields
            logger.error(f"Offer failed, insufficient data: {e}")
        except Exception as e:
            offer_step.status = "failed"
            offer_step.error = str(e)
            error_message = f"Offer step encountered an unexpected error: {e}"
            logger.error(f"Step 'offer' failed: {e}")
        offer_step.completed_at = datetime.now(timezone.utc)
        offer_step.duration_ms = (time.time() - offer_start) * 1000
        steps.append(offer_step)

        report = AnalysisReport(
            id=report_id,
            company_name=request.company_name,
            valuations=valuations,
            benchmark_analysis=benchmark_analysis,
            scenario_set=scenario_set,
            scenario_analysis=scenario_analysis,
            roi=roi,
            financing=financing,
            offer=offer,
            error=error_message,
            missing_data=missing_data,
            pipeline_steps=steps,
            assumptions=assumptions,
            created_at=datetime.now(timezone.utc),
        )

        logger.info(
            f"=== Analysis completed for '{request.company_name}': "
            f"recommended_offer={offer.recommended_offer if offer else 'FAILED'} ==="
        )
        return report

    def _run_step(self, name: str, steps: list[PipelineStep], fn, *args):
        step = PipelineStep(step_name=name, status="running", started_at=datetime.now(timezone.utc))
        start = time.time()
        logger.info(f"Step '{name}' started")
        try:
            result = fn(*args)
            step.status = "completed"
            step.completed_at = datetime.now(timezone.utc)
            step.duration_ms = (time.time() - start) * 1000
            steps.append(step)
            logger.info(f"Step '{name}' completed in {step.duration_ms:.0f}ms")
            return result
        except Exception as e:
            step.status = "failed"
            step.error = str(e)
            step.completed_at = datetime.now(timezone.utc)
            step.duration_ms = (time.time() - start) * 1000
            steps.append(step)
            logger.error(f"Step '{name}' failed in {step.duration_ms:.0f}ms: {e}")
            return None

    def _valuate(self, request: AnalysisRequest) -> list[ValuationResult]:
        return [
            calculate_valuation(
                request.profile,
                v.methodology,
                v.multiple,
                manual_asset_value=v.manual_asset_value,
                manual_blue_sky=v.manual_blue_sky,
                manual_value=v.manual_value,
                confidence_level=v.confidence_level,
                notes=v.notes,
            )
            for v in request.valuations
        ]

    def _benchmark(self, request: AnalysisRequest, benchmark: IndustryBenchmark) -> BenchmarkAnalysis:
        return compare_to_benchmark(request.profile, benchmark, request.business_growth_rate)

    def _scenarios(
        self, request: AnalysisRequest, base_valuation: float
    ) -> tuple[ScenarioSet, ScenarioAnalysis]:
        scenario_set = generate_scenarios(request.profile, base_valuation)
        return scenario_set, analyze_scenarios(scenario_set)

    def _roi(self, request: AnalysisRequest) -> ROIResults:
        inputs = request.roi
        if "discount_rate" not in inputs.model_fields_set:
            inputs = inputs.model_copy(update={"discount_rate": self.settings.discount_rate})
        return compute_roi(request.profile, inputs, self.settings.sensitivity)

    def _financing(self, request: AnalysisRequest) -> FinancingSummary:
        financing = request.financing
        price = financing.purchase_price if financing.purchase_price is not None else request.profile.asking_price
        return financing_summary(
            price,
            financing.down_payment_percent,
            financing.annual_rate_percent,
            financing.term_years,
            request.profile.annual_profit,
        )

    def _offer(
        self,
        request: AnalysisRequest,
        valuations: list[ValuationResult],
        benchmark: IndustryBenchmark | None,
    ) -> OfferRecommendation:
        return recommend_offer(
            request.profile, valuations, benchmark, request.business_growth_rate,
            offer_band=self.settings.offer_band,
        )


def _skipped(name: str, reason: str) -> PipelineStep:
    now = datetime.now(timezone.utc)
    return PipelineStep(
        step_name=name, status="skipped", started_at=now, completed_at=now, duration_ms=0, error=reason,
    )

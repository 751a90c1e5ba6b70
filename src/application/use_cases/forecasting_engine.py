"""
Application Service - Forecasting Engine

Explicit engine instance holding the model registry and the result cache for
the process lifetime. A forecast run orchestrates:
  * Request validation and fingerprinting
  * Cache lookup with single-flight sharing per fingerprint
  * Data preparation and pattern analysis
  * Per-period, per-model predictions combined into one prediction per period
  * Business rules, confidence decay, risk, scenarios and insights
"""

from __future__ import annotations

import asyncio
import hashlib
import json
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timedelta, timezone
from time import perf_counter
from typing import Callable, Dict, List, Optional, Sequence
from uuid import uuid4

import numpy as np
import pandas as pd
import structlog
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from src.domain.entities.errors import ForecastValidationError, TextGenerationError
from src.domain.entities.forecast import (
    CalibrationRequest,
    ForecastAlgorithm,
    ForecastRequest,
    ForecastType,
    TimeUnit,
)
from src.domain.entities.model import (
    BacktestSummary,
    ForecastModel,
    ModelAccuracy,
    ModelPerformance,
)
from src.domain.entities.patterns import HistoricalPatterns
from src.domain.entities.prediction import (
    AlgorithmOutput,
    ConfidenceInterval,
    ForecastPrediction,
)
from src.domain.entities.result import (
    ForecastInsight,
    ForecastMetadata,
    ForecastResult,
    ModelCalibration,
    QualityAssessment,
)
from src.domain.entities.risk import RiskAssessment
from src.domain.gateways.text_generation_gateway import (
    ITextGenerationGateway,
    TextGenerationResult,
)
from src.domain.repositories.forecast_cache_repository import IForecastCacheRepository
from src.domain.services import insight_builder
from src.domain.services.data_preparer import DataPreparer, PreparedSeries, as_utc
from src.domain.services.ensemble_combiner import (
    apply_rules,
    combine,
    decay_confidence,
)
from src.domain.services.model_registry import ModelRegistry
from src.domain.services.pattern_analyzer import PatternAnalyzer
from src.domain.services.predictors import predict_one
from src.domain.services.request_validator import (
    MAX_HORIZON,
    MIN_POINTS,
    validate_calibration_request,
    validate_forecast_request,
)
from src.domain.services.risk_engine import RiskEngine, tag_risk_levels
from src.domain.services.scenario_builder import ScenarioBuilder

logger = structlog.get_logger(__name__)

SUPPORTED_METRICS = [
    "revenue",
    "client_demand",
    "team_utilization",
    "task_completion",
    "client_satisfaction",
    "profit_margin",
    "cash_flow",
    "new_client_acquisition",
    "employee_retention",
    "compliance_score",
]

NEXT_UPDATE_DAYS: Dict[TimeUnit, int] = {
    TimeUnit.DAY: 7,
    TimeUnit.WEEK: 14,
    TimeUnit.MONTH: 30,
    TimeUnit.QUARTER: 90,
    TimeUnit.YEAR: 180,
}

NAIVE_MODEL_NAME = "NAIVE_LAST_VALUE"
NAIVE_CONFIDENCE = 0.5
NAIVE_MAPE = 0.5
SPARSE_DATA_PENALTY = 0.10
TEXT_GENERATION_PENALTY = 0.05
DRIFT_THRESHOLD = 0.10
CALIBRATION_INTERVAL = timedelta(days=30)


@dataclass(slots=True, frozen=True)
class ForecastingCapabilities:
    supported_metrics: List[str]
    forecast_types: List[str]
    algorithms: List[ForecastAlgorithm]
    max_horizon: Dict[str, int]
    minimum_data_points: Dict[str, int]
    supported_frequencies: List[str]


@dataclass(slots=True)
class _Degradation:
    warnings: List[str] = field(default_factory=list)
    penalty: float = 0.0
    cap: Optional[float] = None


def _canonical(value) -> str:
    return json.dumps(
        asdict(value), sort_keys=True, separators=(",", ":"), default=str
    )


def compute_fingerprint(request: ForecastRequest) -> str:
    """Deterministic hash of every field that shapes the forecast result.

    Covers metric, horizon, organization, forecast type, model configuration,
    preferences, contextual data and the content of the historical series.
    """
    content = sorted(
        (as_utc(point.timestamp).isoformat(), point.value)
        for point in request.historical_data
    )
    data_hash = hashlib.sha256(
        json.dumps(content, separators=(",", ":")).encode("utf-8")
    ).hexdigest()
    key = {
        "target_metric": request.target_metric,
        "horizon": {
            "periods": request.forecast_horizon.periods,
            "unit": request.forecast_horizon.unit.value,
        },
        "organization_id": request.organization_id,
        "forecast_type": request.forecast_type.value,
        "model_configuration": _canonical(request.model_configuration),
        "preferences": _canonical(request.preferences),
        "contextual_data": (
            _canonical(request.contextual_data)
            if request.contextual_data is not None
            else None
        ),
        "data_hash": data_hash,
    }
    return hashlib.sha256(
        json.dumps(key, sort_keys=True, separators=(",", ":")).encode("utf-8")
    ).hexdigest()


def period_dates(last: datetime, unit: TimeUnit, periods: int) -> List[datetime]:
    """Chronological forecast dates following the last observation."""
    months = unit.calendar_months
    if months is None:
        return [
            last + timedelta(days=unit.cadence_days * step)
            for step in range(1, periods + 1)
        ]
    anchor = pd.Timestamp(last)
    return [
        (anchor + pd.DateOffset(months=months * step)).to_pydatetime()
        for step in range(1, periods + 1)
    ]


def _observed_mape(actual: np.ndarray, predicted: np.ndarray) -> float:
    eps = 1e-8
    mask = np.abs(actual) > eps
    errors = (actual[mask] - predicted[mask]) / np.abs(actual[mask])
    return float(np.mean(np.abs(errors)))


class ForecastingEngine:
    """Time-series forecasting engine."""

    def __init__(
        self,
        model_registry: ModelRegistry,
        cache_repository: IForecastCacheRepository,
        text_generation_gateway: Optional[ITextGenerationGateway] = None,
        *,
        text_generation_enabled: bool = True,
        text_generation_timeout: float = 10.0,
        text_generation_retries: int = 1,
        data_preparer: Optional[DataPreparer] = None,
        pattern_analyzer: Optional[PatternAnalyzer] = None,
        risk_engine: Optional[RiskEngine] = None,
        scenario_builder: Optional[ScenarioBuilder] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.model_registry = model_registry
        self.cache_repository = cache_repository
        self.text_generation_gateway = text_generation_gateway
        self.text_generation_enabled = text_generation_enabled
        self.text_generation_timeout = text_generation_timeout
        self.text_generation_retries = max(0, text_generation_retries)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._preparer = data_preparer or DataPreparer(clock=self._clock)
        self._analyzer = pattern_analyzer or PatternAnalyzer()
        self._risk_engine = risk_engine or RiskEngine()
        self._scenario_builder = scenario_builder or ScenarioBuilder()
        self._inflight: Dict[str, asyncio.Future] = {}

    async def generate_forecast(self, request: ForecastRequest) -> ForecastResult:
        """
        Produce a forecast, reusing a cached or in-flight result when the
        request fingerprint matches.

        Raises:
            ForecastValidationError: When the request violates input constraints
        """
        validate_forecast_request(request)
        fingerprint = compute_fingerprint(request)

        cached = await self.cache_repository.get(fingerprint)
        if cached is not None:
            logger.info("forecast.cache.hit", fingerprint=fingerprint)
            return replace(cached, cached=True)

        inflight = self._inflight.get(fingerprint)
        if inflight is not None:
            logger.info("forecast.inflight.join", fingerprint=fingerprint)
            result = await asyncio.shield(inflight)
            return replace(result, cached=True)

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._inflight[fingerprint] = future
        try:
            result = await self._run_pipeline(request, fingerprint)
            await self.cache_repository.save(fingerprint, result)
            future.set_result(result)
            return result
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unobserved failure is not reported twice.
            future.exception()
            raise
        finally:
            if not future.done():
                future.cancel()
            self._inflight.pop(fingerprint, None)

    async def assess_risks(self, request: ForecastRequest) -> RiskAssessment:
        """Risk assessment for a request without predictions or caching."""
        validate_forecast_request(request)
        unit = request.forecast_horizon.unit
        prepared = self._preparer.prepare(request.historical_data, unit)
        patterns = self._analyzer.analyze(prepared.points, unit)

        if self._is_constant(prepared.values):
            best_mape = NAIVE_MAPE
        else:
            models, _ = self.model_registry.select_models(
                patterns, request.model_configuration.algorithms
            )
            best_mape = min((m.accuracy.mape for m in models), default=NAIVE_MAPE)

        return self._risk_engine.assess(
            patterns, request, prepared.quality_score, best_mape
        )

    def get_forecasting_capabilities(self) -> ForecastingCapabilities:
        algorithms: List[ForecastAlgorithm] = []
        seen = set()
        for model in self.model_registry.active():
            if model.algorithm in seen:
                continue
            seen.add(model.algorithm)
            algorithms.append(
                ForecastAlgorithm(
                    name=model.algorithm,
                    weight=model.default_weight,
                    parameters=dict(model.parameters),
                    enabled=model.is_active,
                )
            )

        return ForecastingCapabilities(
            supported_metrics=list(SUPPORTED_METRICS),
            forecast_types=[forecast_type.value for forecast_type in ForecastType],
            algorithms=algorithms,
            max_horizon={unit.value: value for unit, value in MAX_HORIZON.items()},
            minimum_data_points={
                unit.value: value for unit, value in MIN_POINTS.items()
            },
            supported_frequencies=[unit.value for unit in TimeUnit],
        )

    def calibrate_models(self, request: CalibrationRequest) -> ModelCalibration:
        """
        Compare observed accuracy against each model's baseline MAPE.

        Registry statistics are left untouched; the caller decides whether to
        retrain.
        """
        validate_calibration_request(request)

        models = self.model_registry.all()
        if request.model_type is not None:
            models = [m for m in models if m.algorithm == request.model_type]
            if not models:
                raise ForecastValidationError(
                    [f"No registered model uses algorithm {request.model_type.value}."]
                )

        actual = np.asarray([p.actual_value for p in request.data], dtype=float)
        predicted = np.asarray([p.predicted_value for p in request.data], dtype=float)

        mse = float(mean_squared_error(actual, predicted))
        observed = ModelAccuracy(
            mape=_observed_mape(actual, predicted),
            mae=float(mean_absolute_error(actual, predicted)),
            rmse=float(np.sqrt(mse)),
            r2=float(r2_score(actual, predicted)),
        )

        drift_by_model: Dict[str, float] = {}
        triggers: List[str] = []
        for model in models:
            baseline = model.accuracy.mape
            drift = abs(observed.mape - baseline) / baseline if baseline > 0 else 0.0
            drift_by_model[model.id] = drift
            if drift > DRIFT_THRESHOLD:
                triggers.append(
                    f"{model.name} shows {drift * 100:.1f}% performance drift"
                )

        needed = bool(triggers)
        if needed:
            actions = [
                "Retrain models with recent data",
                "Update feature engineering pipeline",
                "Review and adjust hyperparameters",
                "Validate model assumptions against current market conditions",
            ]
        else:
            actions = [
                "Continue monitoring model performance",
                "Schedule next calibration check in 30 days",
            ]

        now = self._clock()
        logger.info(
            "calibration.completed",
            organization_id=request.organization_id,
            recalibration_needed=needed,
            observed_mape=observed.mape,
        )
        return ModelCalibration(
            recalibration_needed=needed,
            performance_drift=max(drift_by_model.values(), default=0.0),
            observed_accuracy=observed,
            last_calibration=now,
            next_calibration=now + CALIBRATION_INTERVAL,
            calibration_triggers=triggers,
            recommended_actions=actions,
            model_drift=drift_by_model,
            model_type=request.model_type.value if request.model_type else None,
        )

    async def _run_pipeline(
        self, request: ForecastRequest, fingerprint: str
    ) -> ForecastResult:
        started = perf_counter()
        horizon = request.forecast_horizon
        logger.info(
            "forecast.start",
            request_id=request.id,
            target_metric=request.target_metric,
            periods=horizon.periods,
            unit=horizon.unit.value,
        )

        degradation = _Degradation()
        prepared = self._preparer.prepare(request.historical_data, horizon.unit)
        if len(prepared.points) < MIN_POINTS[horizon.unit]:
            degradation.warnings.append(
                f"Only {len(prepared.points)} data points available; "
                f"{MIN_POINTS[horizon.unit]} are recommended for reliable "
                f"{horizon.unit.value} forecasts."
            )
            degradation.penalty += SPARSE_DATA_PENALTY

        patterns = self._analyzer.analyze(prepared.points, horizon.unit)
        dates = period_dates(
            prepared.points[-1].timestamp, horizon.unit, horizon.periods
        )

        if self._is_constant(prepared.values):
            models: List[ForecastModel] = []
            predictions = self._naive_predictions(prepared, dates)
            degradation.warnings.append(
                "Zero-variance series; using naive last-value carry-forward."
            )
            degradation.cap = NAIVE_CONFIDENCE
            logger.warning("forecast.zero_variance", request_id=request.id)
        else:
            models, selection_warnings = self.model_registry.select_models(
                patterns, request.model_configuration.algorithms
            )
            degradation.warnings.extend(selection_warnings)
            predictions = await self._predict(prepared.values, models, dates)

        predictions, rules_applied = apply_rules(
            predictions,
            request.model_configuration.business_rules,
            prepared.values[-1],
        )
        if models:
            predictions = decay_confidence(predictions, patterns)
        predictions = tag_risk_levels(predictions, prepared.values)

        performance = self._evaluate_performance(models)
        best_mape = performance.accuracy.mape
        risk = self._risk_engine.assess(
            patterns, request, prepared.quality_score, best_mape
        )

        preferences = request.preferences
        scenarios = (
            self._scenario_builder.build(
                predictions, preferences.scenario_probabilities
            )
            if preferences.include_scenario_analysis
            else []
        )

        insights = (
            insight_builder.build_insights(patterns, request)
            if preferences.include_predictive_insights
            else []
        )
        if preferences.include_predictive_insights:
            narrative = await self._narrative_insight(
                request, predictions, patterns, degradation
            )
            if narrative is not None and len(insights) < insight_builder.MAX_INSIGHTS:
                insights.append(narrative)

        recommendations = (
            insight_builder.build_recommendations(
                predictions, insights, prepared.quality_score
            )
            if preferences.include_recommendations
            else []
        )

        confidence = insight_builder.build_confidence_metrics(
            best_mape=best_mape,
            quality_score=prepared.quality_score,
            patterns=patterns,
            request=request,
            penalty=degradation.penalty,
            cap=degradation.cap,
        )
        summary = insight_builder.build_executive_summary(
            request, predictions, insights, recommendations, confidence
        )

        now = self._clock()
        elapsed_ms = (perf_counter() - started) * 1000
        result = ForecastResult(
            request_id=request.id,
            forecast_id=f"forecast_{uuid4().hex}",
            target_metric=request.target_metric,
            forecast_type=request.forecast_type,
            predictions=predictions,
            patterns=patterns,
            model_performance=performance,
            confidence_metrics=confidence,
            risk_assessment=risk,
            executive_summary=summary,
            quality_assessment=QualityAssessment(
                overall_score=prepared.quality_score,
                raw_points=prepared.raw_count,
                outliers_removed=prepared.outliers_removed,
                gaps_filled=prepared.gaps_filled,
                stale=prepared.stale,
                issues=list(prepared.issues),
            ),
            metadata=ForecastMetadata(
                fingerprint=fingerprint,
                models_used=[m.name for m in models] or [NAIVE_MODEL_NAME],
                processed_data_points=len(prepared.points),
                business_rules_applied=rules_applied,
                forecast_accuracy=1 - best_mape,
                processing_time_ms=elapsed_ms,
                generated_at=now,
                next_update_due=now
                + timedelta(days=NEXT_UPDATE_DAYS[horizon.unit]),
            ),
            scenarios=scenarios,
            insights=insights,
            recommendations=recommendations,
            warnings=degradation.warnings,
        )

        logger.info(
            "forecast.completed",
            request_id=request.id,
            fingerprint=fingerprint,
            confidence=result.confidence,
            warnings=len(result.warnings),
            processing_time_ms=elapsed_ms,
        )
        return result

    @staticmethod
    def _is_constant(values: Sequence[float]) -> bool:
        return max(values) == min(values)

    @staticmethod
    def _naive_predictions(
        prepared: PreparedSeries, dates: Sequence[datetime]
    ) -> List[ForecastPrediction]:
        last = prepared.values[-1]
        return [
            ForecastPrediction(
                period=date,
                predicted_value=last,
                confidence_interval=ConfidenceInterval(
                    lower=last, upper=last, confidence=NAIVE_CONFIDENCE
                ),
                reliability=NAIVE_CONFIDENCE,
            )
            for date in dates
        ]

    async def _predict(
        self,
        values: List[float],
        models: List[ForecastModel],
        dates: Sequence[datetime],
    ) -> List[ForecastPrediction]:
        # gather keeps the input order, so periods stay chronological.
        outputs = await asyncio.gather(
            *(
                asyncio.to_thread(self._predict_period, values, models, step, date)
                for step, date in enumerate(dates, start=1)
            )
        )
        return [combine(date, out, models) for date, out in zip(dates, outputs)]

    @staticmethod
    def _predict_period(
        values: List[float],
        models: List[ForecastModel],
        step: int,
        target: datetime,
    ) -> List[AlgorithmOutput]:
        return [
            predict_one(model.algorithm, values, step, target, model.parameters)
            for model in models
        ]

    @staticmethod
    def _evaluate_performance(models: List[ForecastModel]) -> ModelPerformance:
        if not models:
            return ModelPerformance(
                algorithm=NAIVE_MODEL_NAME,
                accuracy=ModelAccuracy.from_mape(NAIVE_MAPE),
                backtest=BacktestSummary(
                    periods=0,
                    average_error=NAIVE_MAPE,
                    max_error=NAIVE_MAPE,
                    consistency=0.0,
                ),
                best_performing=NAIVE_MODEL_NAME,
                ensemble_weights={NAIVE_MODEL_NAME: 1.0},
                improvement_over_baseline=0.0,
            )

        best = min(models, key=lambda model: model.accuracy.mape)
        total = sum(model.weight_basis for model in models)
        weights = {
            model.name: (model.weight_basis / total if total > 0 else 1 / len(models))
            for model in models
        }
        mape = best.accuracy.mape
        return ModelPerformance(
            algorithm=best.algorithm.value,
            accuracy=best.accuracy,
            backtest=BacktestSummary(
                periods=12,
                average_error=mape,
                max_error=mape * 3,
                consistency=1 - mape / 2,
            ),
            best_performing=best.name,
            ensemble_weights=weights,
        )

    async def _narrative_insight(
        self,
        request: ForecastRequest,
        predictions: List[ForecastPrediction],
        patterns: HistoricalPatterns,
        degradation: _Degradation,
    ) -> Optional[ForecastInsight]:
        if not self.text_generation_enabled or self.text_generation_gateway is None:
            return None

        prompt = insight_builder.build_insight_prompt(request, predictions, patterns)
        try:
            generated = await self._generate_text(prompt)
        except TextGenerationError as exc:
            degradation.warnings.append(
                "Narrative insight generation failed; continuing without it."
            )
            degradation.penalty += TEXT_GENERATION_PENALTY
            logger.warning(
                "text_generation.skipped", request_id=request.id, error=exc.message
            )
            return None

        return insight_builder.narrative_insight(generated.text, generated.confidence)

    async def _generate_text(self, prompt: str) -> TextGenerationResult:
        attempts = self.text_generation_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return await asyncio.wait_for(
                    self.text_generation_gateway.generate(prompt),
                    timeout=self.text_generation_timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "text_generation.timeout",
                    attempt=attempt,
                    timeout=self.text_generation_timeout,
                )
            except TextGenerationError as exc:
                logger.warning(
                    "text_generation.failed", attempt=attempt, error=exc.message
                )
        raise TextGenerationError(
            f"Text generation failed after {attempts} attempt(s)",
            details={"attempts": attempts},
        )


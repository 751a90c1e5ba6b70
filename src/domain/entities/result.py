"""Domain entities for the forecast result envelope."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from .forecast import ForecastType
from .model import ModelAccuracy, ModelPerformance
from .patterns import HistoricalPatterns
from .prediction import ForecastPrediction
from .risk import RiskAssessment, ScenarioAnalysis


class InsightType(str, Enum):
    TREND = "TREND"
    SEASONALITY = "SEASONALITY"
    ANOMALY = "ANOMALY"
    EXTERNAL_IMPACT = "EXTERNAL_IMPACT"


class Significance(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class RecommendationType(str, Enum):
    STRATEGIC = "STRATEGIC"
    OPERATIONAL = "OPERATIONAL"
    MONITORING = "MONITORING"
    RISK_MITIGATION = "RISK_MITIGATION"
    DATA_QUALITY = "DATA_QUALITY"


@dataclass(slots=True, frozen=True)
class ForecastInsight:
    id: str
    type: InsightType
    title: str
    description: str
    significance: Significance
    confidence: float
    suggested_actions: List[str] = field(default_factory=list)
    urgency: Significance = Significance.MEDIUM
    is_actionable: bool = True
    timeline: str = ""


@dataclass(slots=True, frozen=True)
class ForecastRecommendation:
    id: str
    type: RecommendationType
    title: str
    description: str
    priority: Significance
    rationale: str
    timeline: str
    milestones: List[str] = field(default_factory=list)
    kpis: List[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class TemporalConfidence:
    near_term: float
    medium_term: float
    long_term: float


@dataclass(slots=True, frozen=True)
class ConfidenceMetrics:
    overall_confidence: float
    temporal: TemporalConfidence
    factor_contribution: Dict[str, float] = field(default_factory=dict)
    uncertainty_factors: Dict[str, float] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class ExecutiveSummary:
    key_predictions: List[str]
    confidence_level: str
    primary_trend: str
    critical_insights: List[str] = field(default_factory=list)
    action_priorities: List[str] = field(default_factory=list)
    risk_factors: List[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class QualityAssessment:
    overall_score: float
    raw_points: int
    outliers_removed: int
    gaps_filled: int
    stale: bool
    issues: List[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class ForecastMetadata:
    fingerprint: str
    models_used: List[str]
    processed_data_points: int
    business_rules_applied: int
    forecast_accuracy: float
    processing_time_ms: float
    generated_at: datetime
    next_update_due: datetime


@dataclass(slots=True, frozen=True)
class ForecastResult:
    """Immutable output of one forecast run."""

    request_id: str
    forecast_id: str
    target_metric: str
    forecast_type: ForecastType
    predictions: List[ForecastPrediction]
    patterns: HistoricalPatterns
    model_performance: ModelPerformance
    confidence_metrics: ConfidenceMetrics
    risk_assessment: RiskAssessment
    executive_summary: ExecutiveSummary
    quality_assessment: QualityAssessment
    metadata: ForecastMetadata
    scenarios: List[ScenarioAnalysis] = field(default_factory=list)
    insights: List[ForecastInsight] = field(default_factory=list)
    recommendations: List[ForecastRecommendation] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    cached: bool = False

    @property
    def confidence(self) -> float:
        return self.confidence_metrics.overall_confidence


@dataclass(slots=True, frozen=True)
class ModelCalibration:
    recalibration_needed: bool
    performance_drift: float
    observed_accuracy: ModelAccuracy
    last_calibration: datetime
    next_calibration: datetime
    calibration_triggers: List[str] = field(default_factory=list)
    recommended_actions: List[str] = field(default_factory=list)
    model_drift: Dict[str, float] = field(default_factory=dict)
    model_type: Optional[str] = None

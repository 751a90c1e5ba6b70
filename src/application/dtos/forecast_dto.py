"""
Forecast DTOs - Application Layer

This module defines Data Transfer Objects (DTOs) for forecast requests and
results. Request DTOs are deliberately permissive on numeric ranges so that
the domain validator can name every violated constraint in one response.
"""

import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

from src.domain.entities.forecast import (
    AlgorithmName,
    BusinessRuleType,
    DataSource,
    ForecastType,
    SeasonalityMode,
    TimeUnit,
)
from src.domain.entities.patterns import TrendDirection, VolatilityLevel
from src.domain.entities.prediction import RiskLevel
from src.domain.entities.result import (
    ForecastResult,
    InsightType,
    RecommendationType,
    Significance,
)
from src.domain.entities.risk import (
    ImpactLevel,
    RiskAssessment,
    RiskFactorType,
    WarningLevel,
    WarningTrend,
)


class DataPointMetadataDTO(BaseModel):
    source: DataSource = DataSource.OBSERVED
    confidence: float = Field(1.0, description="Confidence in the observation")
    adjustments: List[str] = Field(default_factory=list)
    external_events: List[str] = Field(default_factory=list)


class DataPointDTO(BaseModel):
    """DTO for a single historical observation."""

    timestamp: datetime = Field(..., description="Observation timestamp")
    value: float = Field(..., description="Observed value of the target metric")
    metadata: DataPointMetadataDTO = Field(default_factory=DataPointMetadataDTO)


class ForecastHorizonDTO(BaseModel):
    periods: int = Field(..., description="Number of future periods to forecast")
    unit: TimeUnit = Field(TimeUnit.MONTH, description="Period unit")


class ForecastAlgorithmDTO(BaseModel):
    name: AlgorithmName
    weight: float = 1.0
    parameters: Dict[str, Any] = Field(default_factory=dict)
    enabled: bool = True


class BusinessRuleDTO(BaseModel):
    """DTO for a business rule constraining predicted values."""

    type: BusinessRuleType
    condition: str = Field(
        ...,
        description=(
            "Threshold for MIN_VALUE/MAX_VALUE, fraction for GROWTH_LIMIT, "
            "quarter factors such as 'Q1:0.85,Q4:1.15' for SEASONAL_ADJUSTMENT"
        ),
    )
    name: str = ""
    priority: int = 0
    enabled: bool = True

    @field_validator("condition", mode="before")
    @classmethod
    def _stringify_condition(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class ModelConfigurationDTO(BaseModel):
    algorithms: List[ForecastAlgorithmDTO] = Field(default_factory=list)
    confidence_level: float = 0.95
    seasonality_mode: SeasonalityMode = SeasonalityMode.AUTO
    business_rules: List[BusinessRuleDTO] = Field(default_factory=list)


class MarketConditionsDTO(BaseModel):
    threats: List[str] = Field(default_factory=list)
    opportunities: List[str] = Field(default_factory=list)
    competitive_position: Optional[str] = None
    market_growth: Optional[float] = None


class ContextualDataDTO(BaseModel):
    economic: Dict[str, float] = Field(default_factory=dict)
    market: Optional[MarketConditionsDTO] = None
    business: Dict[str, Any] = Field(default_factory=dict)


class ForecastPreferencesDTO(BaseModel):
    include_scenario_analysis: bool = True
    include_predictive_insights: bool = True
    include_recommendations: bool = True
    scenario_probabilities: Optional[Dict[str, float]] = Field(
        None, description="Overrides for base/optimistic/pessimistic probabilities"
    )


class ForecastRequestDTO(BaseModel):
    """DTO for requesting a forecast."""

    id: Optional[str] = Field(None, description="Caller supplied request ID")
    owner_id: str = Field(..., description="User requesting the forecast")
    organization_id: str = Field(..., description="Organization owning the data")
    target_metric: str = Field(..., description="Metric being forecast")
    historical_data: List[DataPointDTO] = Field(
        ..., description="Historical observations, in any order"
    )
    forecast_horizon: ForecastHorizonDTO
    forecast_type: ForecastType = ForecastType.CUSTOM
    model_configuration: ModelConfigurationDTO = Field(
        default_factory=ModelConfigurationDTO
    )
    contextual_data: Optional[ContextualDataDTO] = None
    preferences: ForecastPreferencesDTO = Field(
        default_factory=ForecastPreferencesDTO
    )

    model_config = {
        "protected_namespaces": (),
        "json_schema_extra": {
            "example": {
                "owner_id": "user-42",
                "organization_id": "org-7",
                "target_metric": "revenue",
                "forecast_type": "REVENUE",
                "historical_data": [
                    {"timestamp": "2024-01-01T00:00:00Z", "value": 100000},
                    {"timestamp": "2024-02-01T00:00:00Z", "value": 105000},
                    {"timestamp": "2024-03-01T00:00:00Z", "value": 110000},
                ],
                "forecast_horizon": {"periods": 6, "unit": "MONTH"},
                "model_configuration": {
                    "business_rules": [{"type": "MIN_VALUE", "condition": "90000"}]
                },
            }
        }
    }


class _DomainDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True, protected_namespaces=())


class ConfidenceIntervalDTO(_DomainDTO):
    lower: float
    upper: float
    confidence: float


class ContributingFactorsDTO(_DomainDTO):
    trend: float
    seasonality: float
    external_factors: float
    random_variation: float


class ForecastPredictionDTO(_DomainDTO):
    period: datetime
    predicted_value: float
    confidence_interval: ConfidenceIntervalDTO
    contributing_factors: ContributingFactorsDTO
    risk_level: RiskLevel
    reliability: float
    assumptions: List[str]


class TrendAnalysisDTO(_DomainDTO):
    long_term: TrendDirection
    short_term: TrendDirection
    slope: float
    change_points: List[datetime]


class SeasonalityAnalysisDTO(_DomainDTO):
    detected: bool
    strength: float
    period: str
    peaks: List[str]
    troughs: List[str]


class VolatilityAnalysisDTO(_DomainDTO):
    level: VolatilityLevel
    coefficient_of_variation: float
    periods: List[datetime]

    @field_serializer("coefficient_of_variation")
    def _finite_or_none(self, value: float) -> Optional[float]:
        # Zero-mean series have an infinite coefficient, which JSON cannot carry.
        return value if math.isfinite(value) else None


class CyclicalAnalysisDTO(_DomainDTO):
    detected: bool
    period: int
    amplitude: float


class HistoricalPatternsDTO(_DomainDTO):
    trend: TrendAnalysisDTO
    seasonality: SeasonalityAnalysisDTO
    volatility: VolatilityAnalysisDTO
    cyclical: CyclicalAnalysisDTO


class ModelAccuracyDTO(_DomainDTO):
    mape: float
    mae: float
    rmse: float
    r2: float


class BacktestSummaryDTO(_DomainDTO):
    periods: int
    average_error: float
    max_error: float
    consistency: float


class ModelPerformanceDTO(_DomainDTO):
    algorithm: str
    accuracy: ModelAccuracyDTO
    backtest: BacktestSummaryDTO
    best_performing: str
    ensemble_weights: Dict[str, float]
    improvement_over_baseline: float


class ForecastInsightDTO(_DomainDTO):
    id: str
    type: InsightType
    title: str
    description: str
    significance: Significance
    confidence: float
    suggested_actions: List[str]
    urgency: Significance
    is_actionable: bool
    timeline: str


class ForecastRecommendationDTO(_DomainDTO):
    id: str
    type: RecommendationType
    title: str
    description: str
    priority: Significance
    rationale: str
    timeline: str
    milestones: List[str]
    kpis: List[str]


class ScenarioImpactDTO(_DomainDTO):
    revenue_impact: float
    operational_impact: str
    strategic_implication: str


class ScenarioAnalysisDTO(_DomainDTO):
    name: str
    description: str
    probability: float
    assumptions: List[str]
    predictions: List[ForecastPredictionDTO]
    impact: ScenarioImpactDTO


class TemporalConfidenceDTO(_DomainDTO):
    near_term: float
    medium_term: float
    long_term: float


class ConfidenceMetricsDTO(_DomainDTO):
    overall_confidence: float
    temporal: TemporalConfidenceDTO
    factor_contribution: Dict[str, float]
    uncertainty_factors: Dict[str, float]


class RiskFactorDTO(_DomainDTO):
    name: str
    type: RiskFactorType
    probability: float
    impact: ImpactLevel
    description: str
    mitigation: List[str]
    monitoring: List[str]


class SensitivityResultDTO(_DomainDTO):
    variable: str
    impact_on_forecast: float
    critical_thresholds: List[float]
    elasticity: float
    business_relevance: str


class EarlyWarningDTO(_DomainDTO):
    indicator: str
    current_value: float
    yellow_threshold: float
    red_threshold: float
    trend: WarningTrend
    level: WarningLevel
    action_required: bool
    recommended_response: List[str]


class RiskAssessmentDTO(_DomainDTO):
    """DTO exposing the risk assessment of a forecast."""

    overall_risk: RiskLevel
    risk_score: float
    risk_factors: List[RiskFactorDTO]
    sensitivity_analysis: List[SensitivityResultDTO]
    early_warning_indicators: List[EarlyWarningDTO]

    @classmethod
    def from_domain(cls, assessment: RiskAssessment) -> "RiskAssessmentDTO":
        return cls.model_validate(assessment)


class ExecutiveSummaryDTO(_DomainDTO):
    key_predictions: List[str]
    confidence_level: str
    primary_trend: str
    critical_insights: List[str]
    action_priorities: List[str]
    risk_factors: List[str]


class QualityAssessmentDTO(_DomainDTO):
    overall_score: float
    raw_points: int
    outliers_removed: int
    gaps_filled: int
    stale: bool
    issues: List[str]


class ForecastMetadataDTO(_DomainDTO):
    fingerprint: str
    models_used: List[str]
    processed_data_points: int
    business_rules_applied: int
    forecast_accuracy: float
    processing_time_ms: float
    generated_at: datetime
    next_update_due: datetime


class ForecastResultDTO(_DomainDTO):
    """DTO for the full forecast result envelope."""

    request_id: str
    forecast_id: str
    target_metric: str
    forecast_type: ForecastType
    cached: bool = Field(..., description="True when served from the result cache")
    confidence: float = Field(..., description="Overall forecast confidence")
    warnings: List[str]
    predictions: List[ForecastPredictionDTO]
    patterns: HistoricalPatternsDTO
    model_performance: ModelPerformanceDTO
    confidence_metrics: ConfidenceMetricsDTO
    risk_assessment: RiskAssessmentDTO
    executive_summary: ExecutiveSummaryDTO
    quality_assessment: QualityAssessmentDTO
    metadata: ForecastMetadataDTO
    scenarios: List[ScenarioAnalysisDTO]
    insights: List[ForecastInsightDTO]
    recommendations: List[ForecastRecommendationDTO]

    @classmethod
    def from_domain(cls, result: ForecastResult) -> "ForecastResultDTO":
        return cls.model_validate(result)


class ForecastAlgorithmInfoDTO(_DomainDTO):
    name: AlgorithmName
    weight: float
    parameters: Dict[str, Any]
    enabled: bool


class ForecastingCapabilitiesDTO(_DomainDTO):
    """DTO describing what the forecasting engine supports."""

    supported_metrics: List[str]
    forecast_types: List[str]
    algorithms: List[ForecastAlgorithmInfoDTO]
    max_horizon: Dict[str, int] = Field(
        ..., description="Maximum forecast periods per time unit"
    )
    minimum_data_points: Dict[str, int] = Field(
        ..., description="Recommended minimum history per time unit"
    )
    supported_frequencies: List[str]


class CalibrationPointDTO(BaseModel):
    timestamp: datetime
    actual_value: float = Field(..., description="Observed value")
    predicted_value: float = Field(..., description="Value forecast earlier")


class CalibrationRequestDTO(BaseModel):
    """DTO for comparing past forecasts against actual values."""

    organization_id: str = Field(..., description="Organization owning the data")
    data: List[CalibrationPointDTO] = Field(
        ..., description="Actual versus predicted pairs"
    )
    model_type: Optional[AlgorithmName] = Field(
        None, description="Restrict drift detection to one algorithm"
    )

    model_config = {
        "protected_namespaces": (),
        "json_schema_extra": {
            "example": {
                "organization_id": "org-7",
                "model_type": "ARIMA",
                "data": [
                    {
                        "timestamp": "2024-07-01T00:00:00Z",
                        "actual_value": 120000,
                        "predicted_value": 118500,
                    },
                    {
                        "timestamp": "2024-08-01T00:00:00Z",
                        "actual_value": 123000,
                        "predicted_value": 126000,
                    },
                ],
            }
        }
    }


class ModelCalibrationDTO(_DomainDTO):
    """DTO for the outcome of a calibration run."""

    recalibration_needed: bool
    performance_drift: float
    observed_accuracy: ModelAccuracyDTO
    last_calibration: datetime
    next_calibration: datetime
    calibration_triggers: List[str]
    recommended_actions: List[str]
    model_drift: Dict[str, float] = Field(
        ..., description="Relative MAPE drift against each model baseline"
    )
    model_type: Optional[str] = None

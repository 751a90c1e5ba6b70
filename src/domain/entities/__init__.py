"""
Domain Entities Package

This package contains the core domain entities of the forecasting engine.
"""

from .errors import DomainError, ForecastValidationError, TextGenerationError
from .forecast import (
    AlgorithmName,
    BusinessRule,
    BusinessRuleType,
    CalibrationPoint,
    CalibrationRequest,
    ContextualData,
    DataPoint,
    DataPointMetadata,
    DataSource,
    ForecastAlgorithm,
    ForecastHorizon,
    ForecastPreferences,
    ForecastRequest,
    ForecastType,
    MarketConditions,
    ModelConfiguration,
    SeasonalityMode,
    TimeUnit,
)
from .health import ApplicationInfo, DependencyStatus, ServiceStatus, SystemHealth
from .model import BacktestSummary, ForecastModel, ModelAccuracy, ModelPerformance
from .patterns import (
    CyclicalAnalysis,
    HistoricalPatterns,
    SeasonalityAnalysis,
    TrendAnalysis,
    TrendDirection,
    VolatilityAnalysis,
    VolatilityLevel,
)
from .prediction import (
    AlgorithmOutput,
    ConfidenceInterval,
    ContributingFactors,
    ForecastPrediction,
    RiskLevel,
)
from .result import (
    ConfidenceMetrics,
    ExecutiveSummary,
    ForecastInsight,
    ForecastMetadata,
    ForecastRecommendation,
    ForecastResult,
    InsightType,
    ModelCalibration,
    QualityAssessment,
    RecommendationType,
    Significance,
    TemporalConfidence,
)
from .risk import (
    EarlyWarning,
    ImpactLevel,
    RiskAssessment,
    RiskFactor,
    RiskFactorType,
    ScenarioAnalysis,
    ScenarioImpact,
    SensitivityResult,
    WarningLevel,
    WarningTrend,
)

__all__ = [
    "AlgorithmName",
    "AlgorithmOutput",
    "ApplicationInfo",
    "BacktestSummary",
    "BusinessRule",
    "BusinessRuleType",
    "CalibrationPoint",
    "CalibrationRequest",
    "ConfidenceInterval",
    "ConfidenceMetrics",
    "ContextualData",
    "ContributingFactors",
    "CyclicalAnalysis",
    "DataPoint",
    "DataPointMetadata",
    "DataSource",
    "DependencyStatus",
    "DomainError",
    "EarlyWarning",
    "ExecutiveSummary",
    "ForecastAlgorithm",
    "ForecastHorizon",
    "ForecastInsight",
    "ForecastMetadata",
    "ForecastModel",
    "ForecastPreferences",
    "ForecastPrediction",
    "ForecastRecommendation",
    "ForecastRequest",
    "ForecastResult",
    "ForecastType",
    "ForecastValidationError",
    "HistoricalPatterns",
    "ImpactLevel",
    "InsightType",
    "MarketConditions",
    "ModelAccuracy",
    "ModelCalibration",
    "ModelConfiguration",
    "ModelPerformance",
    "QualityAssessment",
    "RecommendationType",
    "RiskAssessment",
    "RiskFactor",
    "RiskFactorType",
    "RiskLevel",
    "ScenarioAnalysis",
    "ScenarioImpact",
    "SeasonalityAnalysis",
    "SeasonalityMode",
    "SensitivityResult",
    "ServiceStatus",
    "Significance",
    "SystemHealth",
    "TemporalConfidence",
    "TextGenerationError",
    "TimeUnit",
    "TrendAnalysis",
    "TrendDirection",
    "VolatilityAnalysis",
    "VolatilityLevel",
    "WarningLevel",
    "WarningTrend",
]

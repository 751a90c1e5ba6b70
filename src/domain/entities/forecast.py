"""Domain entities describing a forecast request and its input series."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class TimeUnit(str, Enum):
    """Cadence of the historical series and of the forecast horizon."""

    DAY = "DAY"
    WEEK = "WEEK"
    MONTH = "MONTH"
    QUARTER = "QUARTER"
    YEAR = "YEAR"

    @property
    def cadence_days(self) -> int:
        return _CADENCE_DAYS[self]

    @property
    def calendar_months(self) -> Optional[int]:
        """Months per period for calendar based units, None for day based."""
        return _CALENDAR_MONTHS.get(self)


_CADENCE_DAYS = {
    TimeUnit.DAY: 1,
    TimeUnit.WEEK: 7,
    TimeUnit.MONTH: 30,
    TimeUnit.QUARTER: 90,
    TimeUnit.YEAR: 365,
}

_CALENDAR_MONTHS = {
    TimeUnit.MONTH: 1,
    TimeUnit.QUARTER: 3,
    TimeUnit.YEAR: 12,
}


class ForecastType(str, Enum):
    REVENUE = "REVENUE"
    DEMAND = "DEMAND"
    CAPACITY = "CAPACITY"
    CHURN = "CHURN"
    UTILIZATION = "UTILIZATION"
    CUSTOM = "CUSTOM"


class AlgorithmName(str, Enum):
    """Forecasting algorithms known to the engine."""

    LINEAR_REGRESSION = "LINEAR_REGRESSION"
    ARIMA = "ARIMA"
    EXPONENTIAL_SMOOTHING = "EXPONENTIAL_SMOOTHING"
    PROPHET_LIKE = "PROPHET_LIKE"
    ENSEMBLE = "ENSEMBLE"


class BusinessRuleType(str, Enum):
    MIN_VALUE = "MIN_VALUE"
    MAX_VALUE = "MAX_VALUE"
    GROWTH_LIMIT = "GROWTH_LIMIT"
    SEASONAL_ADJUSTMENT = "SEASONAL_ADJUSTMENT"


class SeasonalityMode(str, Enum):
    AUTO = "AUTO"
    ADDITIVE = "ADDITIVE"
    MULTIPLICATIVE = "MULTIPLICATIVE"
    NONE = "NONE"


class DataSource(str, Enum):
    OBSERVED = "OBSERVED"
    INTERPOLATED = "INTERPOLATED"


@dataclass(slots=True, frozen=True)
class DataPointMetadata:
    source: DataSource = DataSource.OBSERVED
    confidence: float = 1.0
    adjustments: List[str] = field(default_factory=list)
    external_events: List[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class DataPoint:
    """Single observation of the target metric."""

    timestamp: datetime
    value: float
    metadata: DataPointMetadata = field(default_factory=DataPointMetadata)


@dataclass(slots=True, frozen=True)
class ForecastHorizon:
    periods: int
    unit: TimeUnit = TimeUnit.MONTH


@dataclass(slots=True, frozen=True)
class ForecastAlgorithm:
    """Declarative algorithm configuration, either requested or registered."""

    name: AlgorithmName
    weight: float = 1.0
    parameters: Dict[str, Any] = field(default_factory=dict)
    enabled: bool = True


@dataclass(slots=True, frozen=True)
class BusinessRule:
    type: BusinessRuleType
    condition: str
    name: str = ""
    priority: int = 0
    enabled: bool = True


@dataclass(slots=True, frozen=True)
class ModelConfiguration:
    algorithms: List[ForecastAlgorithm] = field(default_factory=list)
    confidence_level: float = 0.95
    seasonality_mode: SeasonalityMode = SeasonalityMode.AUTO
    business_rules: List[BusinessRule] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class MarketConditions:
    threats: List[str] = field(default_factory=list)
    opportunities: List[str] = field(default_factory=list)
    competitive_position: Optional[str] = None
    market_growth: Optional[float] = None


@dataclass(slots=True, frozen=True)
class ContextualData:
    economic: Dict[str, float] = field(default_factory=dict)
    market: Optional[MarketConditions] = None
    business: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class ForecastPreferences:
    include_scenario_analysis: bool = True
    include_predictive_insights: bool = True
    include_recommendations: bool = True
    scenario_probabilities: Optional[Dict[str, float]] = None


@dataclass(slots=True, frozen=True)
class ForecastRequest:
    """Everything the engine needs to produce one forecast.

    Requests are created by the caller and never mutated by the engine.
    """

    id: str
    owner_id: str
    organization_id: str
    target_metric: str
    historical_data: List[DataPoint]
    forecast_horizon: ForecastHorizon
    forecast_type: ForecastType = ForecastType.CUSTOM
    model_configuration: ModelConfiguration = field(
        default_factory=ModelConfiguration
    )
    contextual_data: Optional[ContextualData] = None
    preferences: ForecastPreferences = field(default_factory=ForecastPreferences)

    @property
    def market_threats(self) -> List[str]:
        if self.contextual_data is None or self.contextual_data.market is None:
            return []
        return list(self.contextual_data.market.threats)


@dataclass(slots=True, frozen=True)
class CalibrationPoint:
    timestamp: datetime
    actual_value: float
    predicted_value: float


@dataclass(slots=True, frozen=True)
class CalibrationRequest:
    organization_id: str
    data: List[CalibrationPoint]
    model_type: Optional[AlgorithmName] = None

"""Domain entities for risk assessment and scenario analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from .prediction import ForecastPrediction, RiskLevel


class RiskFactorType(str, Enum):
    DATA = "DATA"
    MARKET = "MARKET"
    MODEL = "MODEL"
    EXTERNAL = "EXTERNAL"


class ImpactLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class WarningTrend(str, Enum):
    IMPROVING = "IMPROVING"
    STABLE = "STABLE"
    DETERIORATING = "DETERIORATING"


class WarningLevel(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


@dataclass(slots=True, frozen=True)
class RiskFactor:
    name: str
    type: RiskFactorType
    probability: float
    impact: ImpactLevel
    description: str
    mitigation: List[str] = field(default_factory=list)
    monitoring: List[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class SensitivityResult:
    variable: str
    impact_on_forecast: float
    critical_thresholds: Tuple[float, float]
    elasticity: float
    business_relevance: str


@dataclass(slots=True, frozen=True)
class EarlyWarning:
    indicator: str
    current_value: float
    yellow_threshold: float
    red_threshold: float
    trend: WarningTrend
    action_required: bool
    recommended_response: List[str] = field(default_factory=list)

    @property
    def level(self) -> WarningLevel:
        # Indicators are "higher is better"; red sits below yellow.
        if self.current_value < self.red_threshold:
            return WarningLevel.RED
        if self.current_value < self.yellow_threshold:
            return WarningLevel.YELLOW
        return WarningLevel.GREEN


@dataclass(slots=True, frozen=True)
class RiskAssessment:
    overall_risk: RiskLevel
    risk_score: float
    risk_factors: List[RiskFactor] = field(default_factory=list)
    sensitivity_analysis: List[SensitivityResult] = field(default_factory=list)
    early_warning_indicators: List[EarlyWarning] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class ScenarioImpact:
    revenue_impact: float
    operational_impact: str
    strategic_implication: str


@dataclass(slots=True, frozen=True)
class ScenarioAnalysis:
    name: str
    description: str
    probability: float
    assumptions: List[str]
    predictions: List[ForecastPrediction]
    impact: ScenarioImpact

"""Domain entities for per-period predictions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


@dataclass(slots=True, frozen=True)
class AlgorithmOutput:
    """Raw value and confidence produced by one algorithm for one period."""

    value: float
    confidence: float


@dataclass(slots=True, frozen=True)
class ConfidenceInterval:
    lower: float
    upper: float
    confidence: float


@dataclass(slots=True, frozen=True)
class ContributingFactors:
    trend: float = 0.4
    seasonality: float = 0.25
    external_factors: float = 0.15
    random_variation: float = 0.2


@dataclass(slots=True, frozen=True)
class ForecastPrediction:
    """Combined prediction for one forecast period."""

    period: datetime
    predicted_value: float
    confidence_interval: ConfidenceInterval
    contributing_factors: ContributingFactors = field(
        default_factory=ContributingFactors
    )
    risk_level: RiskLevel = RiskLevel.LOW
    reliability: float = 0.5
    assumptions: List[str] = field(
        default_factory=lambda: [
            "Historical patterns continue",
            "No major market disruptions",
        ]
    )

"""Domain entities for patterns detected in a historical series."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List


class TrendDirection(str, Enum):
    INCREASING = "INCREASING"
    DECREASING = "DECREASING"
    STABLE = "STABLE"


class VolatilityLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(slots=True, frozen=True)
class TrendAnalysis:
    long_term: TrendDirection = TrendDirection.STABLE
    short_term: TrendDirection = TrendDirection.STABLE
    slope: float = 0.0
    change_points: List[datetime] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class SeasonalityAnalysis:
    detected: bool = False
    strength: float = 0.0
    period: str = "NONE"
    peaks: List[str] = field(default_factory=list)
    troughs: List[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class VolatilityAnalysis:
    level: VolatilityLevel = VolatilityLevel.LOW
    coefficient_of_variation: float = 0.0
    periods: List[datetime] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class CyclicalAnalysis:
    detected: bool = False
    period: int = 0
    amplitude: float = 0.0


@dataclass(slots=True, frozen=True)
class HistoricalPatterns:
    """Read-only summary recomputed for every request."""

    trend: TrendAnalysis = field(default_factory=TrendAnalysis)
    seasonality: SeasonalityAnalysis = field(default_factory=SeasonalityAnalysis)
    volatility: VolatilityAnalysis = field(default_factory=VolatilityAnalysis)
    cyclical: CyclicalAnalysis = field(default_factory=CyclicalAnalysis)

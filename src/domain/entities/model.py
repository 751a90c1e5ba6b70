"""Domain entities for registered forecasting models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

from .forecast import AlgorithmName


@dataclass(slots=True, frozen=True)
class ModelAccuracy:
    mape: float
    mae: float
    rmse: float
    r2: float

    @classmethod
    def from_mape(cls, mape: float) -> "ModelAccuracy":
        """Derive trailing error statistics for a model known only by its MAPE."""
        return cls(mape=mape, mae=mape * 1000, rmse=mape * 1200, r2=1 - mape * 2)


@dataclass(slots=True)
class ForecastModel:
    """A registered algorithm instance with its trailing performance."""

    id: str
    name: str
    algorithm: AlgorithmName
    accuracy: ModelAccuracy
    parameters: Dict[str, Any] = field(default_factory=dict)
    default_weight: float = 1.0
    version: str = "1.0"
    is_active: bool = True
    trained_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def weight_basis(self) -> float:
        """Unnormalised ensemble weight, ``1 - mape``."""
        return 1.0 - self.accuracy.mape


@dataclass(slots=True, frozen=True)
class BacktestSummary:
    periods: int
    average_error: float
    max_error: float
    consistency: float


@dataclass(slots=True, frozen=True)
class ModelPerformance:
    """Accuracy report for the models used in a forecast."""

    algorithm: str
    accuracy: ModelAccuracy
    backtest: BacktestSummary
    best_performing: str
    ensemble_weights: Dict[str, float] = field(default_factory=dict)
    improvement_over_baseline: float = 0.25

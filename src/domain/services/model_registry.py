"""
Domain Service - Model Registry

Holds the forecasting models registered for the engine's lifetime and picks
the subset to run for a request from its detected patterns.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

import structlog

from src.domain.entities.forecast import AlgorithmName, ForecastAlgorithm
from src.domain.entities.model import ForecastModel, ModelAccuracy
from src.domain.entities.patterns import HistoricalPatterns, TrendDirection

logger = structlog.get_logger(__name__)


def default_models() -> List[ForecastModel]:
    """Built-in models registered when the engine starts."""
    return [
        ForecastModel(
            id="revenue_arima",
            name="Revenue ARIMA Model",
            algorithm=AlgorithmName.ARIMA,
            accuracy=ModelAccuracy.from_mape(0.15),
            parameters={"p": 2, "d": 1, "q": 2, "seasonal": True},
            default_weight=0.25,
        ),
        ForecastModel(
            id="utilization_prophet",
            name="Team Utilization Prophet Model",
            algorithm=AlgorithmName.PROPHET_LIKE,
            accuracy=ModelAccuracy.from_mape(0.12),
            parameters={"changepoint_prior_scale": 0.05, "seasonality_mode": "additive"},
            default_weight=0.3,
        ),
        ForecastModel(
            id="demand_ensemble",
            name="Client Demand Ensemble Model",
            algorithm=AlgorithmName.ENSEMBLE,
            accuracy=ModelAccuracy.from_mape(0.10),
            parameters={
                "algorithms": [
                    AlgorithmName.LINEAR_REGRESSION.value,
                    AlgorithmName.ARIMA.value,
                    AlgorithmName.EXPONENTIAL_SMOOTHING.value,
                    AlgorithmName.PROPHET_LIKE.value,
                ]
            },
            default_weight=1.0,
        ),
        ForecastModel(
            id="baseline_linear",
            name="Baseline Linear Regression Model",
            algorithm=AlgorithmName.LINEAR_REGRESSION,
            accuracy=ModelAccuracy.from_mape(0.20),
            default_weight=0.2,
        ),
        ForecastModel(
            id="smoothing_exponential",
            name="Exponential Smoothing Model",
            algorithm=AlgorithmName.EXPONENTIAL_SMOOTHING,
            accuracy=ModelAccuracy.from_mape(0.18),
            parameters={"alpha": 0.3},
            default_weight=0.25,
        ),
    ]


class ModelRegistry:
    """Read-mostly registry of forecasting models."""

    def __init__(self, models: Optional[Iterable[ForecastModel]] = None) -> None:
        self._models: Dict[str, ForecastModel] = {}
        for model in models if models is not None else default_models():
            self._models[model.id] = model
        logger.info("model_registry.initialized", models=len(self._models))

    def all(self) -> List[ForecastModel]:
        return list(self._models.values())

    def active(self) -> List[ForecastModel]:
        return [model for model in self._models.values() if model.is_active]

    def get(self, model_id: str) -> Optional[ForecastModel]:
        return self._models.get(model_id)

    def select_models(
        self,
        patterns: HistoricalPatterns,
        requested: Iterable[ForecastAlgorithm] = (),
    ) -> Tuple[List[ForecastModel], List[str]]:
        """
        Choose the models to run for a request.

        Requested algorithms restrict the pool and override model parameters.
        When the restriction leaves nothing, every active model stays
        eligible and a warning is returned.

        Returns:
            Tuple of (selected models, warnings)
        """
        warnings: List[str] = []
        requested_by_name = {
            algorithm.name: algorithm for algorithm in requested if algorithm.enabled
        }

        pool = self.active()
        if requested_by_name:
            restricted = [m for m in pool if m.algorithm in requested_by_name]
            if restricted:
                pool = restricted
            else:
                warnings.append(
                    "None of the requested algorithms are available; "
                    "falling back to all active models."
                )
                logger.warning(
                    "model_registry.requested_unavailable",
                    requested=[name.value for name in requested_by_name],
                )

        selected: List[ForecastModel] = []

        def _add(model: Optional[ForecastModel]) -> None:
            if model is not None and model not in selected:
                selected.append(model)

        if patterns.seasonality.detected:
            _add(self._first(pool, AlgorithmName.PROPHET_LIKE))
            _add(
                next(
                    (
                        m
                        for m in pool
                        if m.algorithm == AlgorithmName.ARIMA
                        and m.parameters.get("seasonal")
                    ),
                    None,
                )
            )

        if patterns.trend.long_term != TrendDirection.STABLE:
            for model in pool:
                if model.algorithm in (
                    AlgorithmName.PROPHET_LIKE,
                    AlgorithmName.LINEAR_REGRESSION,
                ):
                    _add(model)

        _add(self._first(pool, AlgorithmName.ENSEMBLE))

        if not selected:
            selected = pool[:3]

        return [self._with_overrides(m, requested_by_name) for m in selected], warnings

    @staticmethod
    def _first(
        pool: List[ForecastModel], algorithm: AlgorithmName
    ) -> Optional[ForecastModel]:
        return next((m for m in pool if m.algorithm == algorithm), None)

    @staticmethod
    def _with_overrides(
        model: ForecastModel, requested: Dict[AlgorithmName, ForecastAlgorithm]
    ) -> ForecastModel:
        override = requested.get(model.algorithm)
        if override is None or not override.parameters:
            return model
        return replace(model, parameters={**model.parameters, **override.parameters})

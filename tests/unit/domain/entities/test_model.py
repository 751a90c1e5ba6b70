from __future__ import annotations

from datetime import timezone

import pytest

from src.domain.entities.forecast import AlgorithmName
from src.domain.entities.model import ForecastModel, ModelAccuracy


def test_accuracy_from_mape() -> None:
    accuracy = ModelAccuracy.from_mape(0.1)

    assert accuracy.mae == pytest.approx(100.0)
    assert accuracy.rmse == pytest.approx(120.0)
    assert accuracy.r2 == pytest.approx(0.8)


def test_forecast_model_defaults() -> None:
    model = ForecastModel(
        id="baseline_linear",
        name="Linear Baseline",
        algorithm=AlgorithmName.LINEAR_REGRESSION,
        accuracy=ModelAccuracy.from_mape(0.15),
    )

    assert model.is_active is True
    assert model.parameters == {}
    assert model.trained_at.tzinfo == timezone.utc
    assert model.weight_basis == pytest.approx(0.85)

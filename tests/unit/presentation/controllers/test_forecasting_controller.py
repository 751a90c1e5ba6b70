from __future__ import annotations

from typing import cast

import pytest
from fastapi import HTTPException

from src.application.dtos.forecast_dto import (
    CalibrationRequestDTO,
    ForecastRequestDTO,
)
from src.application.use_cases.forecast_use_cases import (
    AssessForecastRiskUseCase,
    CalibrateModelsUseCase,
    ForecastPipelineError,
    ForecastRequestError,
    GenerateForecastUseCase,
    GetForecastingCapabilitiesUseCase,
)
from src.application.use_cases.forecasting_engine import ForecastingEngine
from src.domain.services.model_registry import ModelRegistry
from src.presentation.controllers import forecasting_controller
from tests.conftest import NOW, FakeCacheRepository, forecast_payload


class _RaisingUseCase:
    def __init__(self, error: Exception):
        self.error = error

    async def execute(self, *args, **kwargs):
        raise self.error


def _engine() -> ForecastingEngine:
    return ForecastingEngine(
        ModelRegistry(),
        FakeCacheRepository(),
        text_generation_enabled=False,
        clock=lambda: NOW,
    )


def _request_dto(values=None) -> ForecastRequestDTO:
    return ForecastRequestDTO.model_validate(forecast_payload(values))


@pytest.mark.asyncio
async def test_generate_forecast_returns_result() -> None:
    dto = await forecasting_controller.generate_forecast(
        request_dto=_request_dto(),
        generate_forecast_use_case=GenerateForecastUseCase(_engine()),
    )

    assert dto.request_id == "req-1"
    assert len(dto.predictions) == 6


@pytest.mark.asyncio
async def test_generate_forecast_maps_invalid_request_to_400() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await forecasting_controller.generate_forecast(
            request_dto=_request_dto([1.0]),
            generate_forecast_use_case=GenerateForecastUseCase(_engine()),
        )

    assert exc_info.value.status_code == 400
    assert "At least 3 historical data points" in exc_info.value.detail


@pytest.mark.asyncio
async def test_generate_forecast_maps_pipeline_error_to_500() -> None:
    use_case = cast(
        GenerateForecastUseCase,
        _RaisingUseCase(ForecastPipelineError("Forecast generation failed: boom")),
    )

    with pytest.raises(HTTPException) as exc_info:
        await forecasting_controller.generate_forecast(
            request_dto=_request_dto(), generate_forecast_use_case=use_case
        )

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail == "Forecast generation failed: boom"


@pytest.mark.asyncio
async def test_get_forecasting_capabilities() -> None:
    dto = await forecasting_controller.get_forecasting_capabilities(
        get_capabilities_use_case=GetForecastingCapabilitiesUseCase(_engine())
    )

    assert dto.max_horizon["YEAR"] == 5


@pytest.mark.asyncio
async def test_assess_forecast_risk_maps_errors() -> None:
    dto = await forecasting_controller.assess_forecast_risk(
        request_dto=_request_dto(),
        assess_risk_use_case=AssessForecastRiskUseCase(_engine()),
    )
    assert dto.risk_score == 0.0

    with pytest.raises(HTTPException) as exc_info:
        await forecasting_controller.assess_forecast_risk(
            request_dto=_request_dto(),
            assess_risk_use_case=cast(
                AssessForecastRiskUseCase,
                _RaisingUseCase(ForecastRequestError("Owner ID is required.")),
            ),
        )
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_calibrate_models() -> None:
    request_dto = CalibrationRequestDTO.model_validate(
        {
            "organization_id": "org-7",
            "data": [
                {"timestamp": NOW, "actual_value": 100, "predicted_value": 110},
                {"timestamp": NOW, "actual_value": 200, "predicted_value": 190},
            ],
        }
    )

    dto = await forecasting_controller.calibrate_models(
        request_dto=request_dto,
        calibrate_models_use_case=CalibrateModelsUseCase(_engine()),
    )

    assert dto.recalibration_needed is True
    assert dto.performance_drift == pytest.approx(0.625)

    with pytest.raises(HTTPException) as exc_info:
        await forecasting_controller.calibrate_models(
            request_dto=request_dto,
            calibrate_models_use_case=cast(
                CalibrateModelsUseCase,
                _RaisingUseCase(ForecastPipelineError("Model calibration failed")),
            ),
        )
    assert exc_info.value.status_code == 500

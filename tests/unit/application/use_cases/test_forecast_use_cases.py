from __future__ import annotations

from datetime import datetime, timezone

import pytest

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
    to_forecast_request,
)
from src.application.use_cases.forecasting_engine import ForecastingEngine
from src.domain.entities.errors import ForecastValidationError
from src.domain.entities.forecast import AlgorithmName, BusinessRuleType
from src.domain.entities.prediction import RiskLevel
from src.domain.services.model_registry import ModelRegistry
from tests.conftest import NOW, FakeCacheRepository, forecast_payload


class _ExplodingEngine:
    def __init__(self, error: Exception) -> None:
        self.error = error

    async def generate_forecast(self, request):
        raise self.error

    async def assess_risks(self, request):
        raise self.error

    def calibrate_models(self, request):
        raise self.error


def _engine() -> ForecastingEngine:
    return ForecastingEngine(
        ModelRegistry(),
        FakeCacheRepository(),
        text_generation_enabled=False,
        clock=lambda: NOW,
    )


def _calibration_dto(**overrides) -> CalibrationRequestDTO:
    payload = {
        "organization_id": "org-7",
        "data": [
            {"timestamp": NOW, "actual_value": 100, "predicted_value": 110},
            {"timestamp": NOW, "actual_value": 200, "predicted_value": 190},
        ],
    }
    payload.update(overrides)
    return CalibrationRequestDTO.model_validate(payload)


def test_to_forecast_request_maps_nested_fields() -> None:
    dto = ForecastRequestDTO.model_validate(
        forecast_payload(
            id=None,
            model_configuration={
                "algorithms": [{"name": "ARIMA", "parameters": {"p": 1}}],
                "business_rules": [{"type": "MIN_VALUE", "condition": 90000}],
            },
            contextual_data={"market": {"threats": ["Price war"]}},
            preferences={"scenario_probabilities": {"base": 0.5}},
        )
    )

    request = to_forecast_request(dto)

    assert request.id
    assert request.historical_data[0].timestamp == datetime(
        2023, 1, 1, tzinfo=timezone.utc
    )
    assert request.model_configuration.algorithms[0].name is AlgorithmName.ARIMA
    assert request.model_configuration.algorithms[0].parameters == {"p": 1}
    rule = request.model_configuration.business_rules[0]
    assert rule.type is BusinessRuleType.MIN_VALUE
    assert rule.condition == "90000"
    assert request.market_threats == ["Price war"]
    assert request.preferences.scenario_probabilities == {"base": 0.5}


@pytest.mark.asyncio
async def test_generate_forecast_use_case_returns_dto() -> None:
    use_case = GenerateForecastUseCase(forecasting_engine=_engine())

    dto = await use_case.execute(ForecastRequestDTO.model_validate(forecast_payload()))

    assert dto.request_id == "req-1"
    assert dto.cached is False
    assert len(dto.predictions) == 6
    assert dto.confidence == pytest.approx(dto.confidence_metrics.overall_confidence)


@pytest.mark.asyncio
async def test_generate_forecast_use_case_maps_validation_errors() -> None:
    use_case = GenerateForecastUseCase(forecasting_engine=_engine())

    with pytest.raises(ForecastRequestError) as exc_info:
        await use_case.execute(
            ForecastRequestDTO.model_validate(forecast_payload([1.0, 2.0]))
        )

    assert "At least 3 historical data points" in exc_info.value.message
    assert exc_info.value.details["errors"]


@pytest.mark.asyncio
async def test_generate_forecast_use_case_wraps_unexpected_errors() -> None:
    use_case = GenerateForecastUseCase(
        forecasting_engine=_ExplodingEngine(RuntimeError("boom"))
    )

    with pytest.raises(ForecastPipelineError) as exc_info:
        await use_case.execute(ForecastRequestDTO.model_validate(forecast_payload()))

    assert exc_info.value.message == "Forecast generation failed: boom"
    assert exc_info.value.details == {"request_id": "req-1"}


@pytest.mark.asyncio
async def test_assess_forecast_risk_use_case() -> None:
    use_case = AssessForecastRiskUseCase(forecasting_engine=_engine())

    dto = await use_case.execute(ForecastRequestDTO.model_validate(forecast_payload()))

    assert dto.overall_risk is RiskLevel.LOW
    assert len(dto.early_warning_indicators) == 2


@pytest.mark.asyncio
async def test_assess_forecast_risk_use_case_maps_errors() -> None:
    invalid = AssessForecastRiskUseCase(
        forecasting_engine=_ExplodingEngine(ForecastValidationError(["bad"]))
    )
    broken = AssessForecastRiskUseCase(
        forecasting_engine=_ExplodingEngine(ValueError("nope"))
    )
    dto = ForecastRequestDTO.model_validate(forecast_payload())

    with pytest.raises(ForecastRequestError):
        await invalid.execute(dto)
    with pytest.raises(ForecastPipelineError):
        await broken.execute(dto)


@pytest.mark.asyncio
async def test_get_forecasting_capabilities_use_case() -> None:
    dto = await GetForecastingCapabilitiesUseCase(forecasting_engine=_engine()).execute()

    assert len(dto.algorithms) == 5
    assert dto.max_horizon["MONTH"] == 36


@pytest.mark.asyncio
async def test_calibrate_models_use_case() -> None:
    use_case = CalibrateModelsUseCase(forecasting_engine=_engine())

    dto = await use_case.execute(_calibration_dto(model_type="ARIMA"))

    assert dto.recalibration_needed is True
    assert dto.observed_accuracy.mape == pytest.approx(0.075)
    assert dto.model_type == "ARIMA"
    assert list(dto.model_drift) == ["revenue_arima"]


@pytest.mark.asyncio
async def test_calibrate_models_use_case_rejects_zero_actuals() -> None:
    use_case = CalibrateModelsUseCase(forecasting_engine=_engine())
    dto = _calibration_dto(
        data=[
            {"timestamp": NOW, "actual_value": 0, "predicted_value": 1},
            {"timestamp": NOW, "actual_value": 0, "predicted_value": 2},
        ]
    )

    with pytest.raises(ForecastRequestError) as exc_info:
        await use_case.execute(dto)

    assert "must not all be zero" in exc_info.value.message

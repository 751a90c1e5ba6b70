"""
Forecasting Router - Presentation Layer

This module defines the FastAPI router for forecast endpoints.
"""

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, status

from src.application.dtos.forecast_dto import (
    CalibrationRequestDTO,
    ForecastingCapabilitiesDTO,
    ForecastRequestDTO,
    ForecastResultDTO,
    ModelCalibrationDTO,
    RiskAssessmentDTO,
)
from src.application.use_cases.forecast_use_cases import (
    AssessForecastRiskUseCase,
    CalibrateModelsUseCase,
    ForecastPipelineError,
    ForecastRequestError,
    GenerateForecastUseCase,
    GetForecastingCapabilitiesUseCase,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/forecasts", tags=["Forecasts"])


@router.post("", response_model=ForecastResultDTO)
@inject
async def generate_forecast(
    request_dto: ForecastRequestDTO,
    generate_forecast_use_case: GenerateForecastUseCase = Depends(
        Provide["generate_forecast_use_case"]
    ),
) -> ForecastResultDTO:
    """
    Generate a forecast from a historical series.

    Identical requests within the cache TTL return the stored result with
    ``cached`` set to true.
    """
    try:
        return await generate_forecast_use_case.execute(request_dto)
    except ForecastRequestError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ForecastPipelineError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message
        )
    except Exception as e:  # pragma: no cover
        logger.error("Failed to generate forecast", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )


@router.get("/capabilities", response_model=ForecastingCapabilitiesDTO)
@inject
async def get_forecasting_capabilities(
    get_capabilities_use_case: GetForecastingCapabilitiesUseCase = Depends(
        Provide["get_forecasting_capabilities_use_case"]
    ),
) -> ForecastingCapabilitiesDTO:
    """Return supported metrics, algorithms, horizons and frequencies."""
    try:
        return await get_capabilities_use_case.execute()
    except Exception as e:  # pragma: no cover
        logger.error("Failed to list forecasting capabilities", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )


@router.post("/risk-assessment", response_model=RiskAssessmentDTO)
@inject
async def assess_forecast_risk(
    request_dto: ForecastRequestDTO,
    assess_risk_use_case: AssessForecastRiskUseCase = Depends(
        Provide["assess_forecast_risk_use_case"]
    ),
) -> RiskAssessmentDTO:
    try:
        return await assess_risk_use_case.execute(request_dto)
    except ForecastRequestError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ForecastPipelineError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message
        )


@router.post("/calibration", response_model=ModelCalibrationDTO)
@inject
async def calibrate_models(
    request_dto: CalibrationRequestDTO,
    calibrate_models_use_case: CalibrateModelsUseCase = Depends(
        Provide["calibrate_models_use_case"]
    ),
) -> ModelCalibrationDTO:
    """
    Compare actual values against earlier forecasts and report model drift.
    """
    try:
        return await calibrate_models_use_case.execute(request_dto)
    except ForecastRequestError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ForecastPipelineError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message
        )

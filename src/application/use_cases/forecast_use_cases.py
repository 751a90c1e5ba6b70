"""
Forecast Use Cases - Application Layer

This module defines use cases for forecast generation, risk assessment,
capability discovery and model calibration. They translate DTOs into domain
requests, delegate to the forecasting engine and map engine failures into
application errors.
"""

from typing import Dict, Optional
from uuid import uuid4

import structlog

from src.domain.entities.errors import ForecastValidationError
from src.domain.entities.forecast import (
    BusinessRule,
    CalibrationPoint,
    CalibrationRequest,
    ContextualData,
    DataPoint,
    DataPointMetadata,
    ForecastAlgorithm,
    ForecastHorizon,
    ForecastPreferences,
    ForecastRequest,
    MarketConditions,
    ModelConfiguration,
)

from ..dtos.forecast_dto import (
    CalibrationRequestDTO,
    ContextualDataDTO,
    DataPointDTO,
    ForecastingCapabilitiesDTO,
    ForecastRequestDTO,
    ForecastResultDTO,
    ModelCalibrationDTO,
    RiskAssessmentDTO,
)
from .forecasting_engine import ForecastingEngine

logger = structlog.get_logger(__name__)


class ForecastingError(Exception):
    """Base exception for forecast use cases."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ForecastRequestError(ForecastingError):
    """Raised when a forecast or calibration request is invalid."""


class ForecastPipelineError(ForecastingError):
    """Raised when the forecasting pipeline fails unexpectedly."""


def _to_data_point(dto: DataPointDTO) -> DataPoint:
    return DataPoint(
        timestamp=dto.timestamp,
        value=dto.value,
        metadata=DataPointMetadata(
            source=dto.metadata.source,
            confidence=dto.metadata.confidence,
            adjustments=list(dto.metadata.adjustments),
            external_events=list(dto.metadata.external_events),
        ),
    )


def _to_contextual_data(
    dto: Optional[ContextualDataDTO],
) -> Optional[ContextualData]:
    if dto is None:
        return None

    market = None
    if dto.market is not None:
        market = MarketConditions(
            threats=list(dto.market.threats),
            opportunities=list(dto.market.opportunities),
            competitive_position=dto.market.competitive_position,
            market_growth=dto.market.market_growth,
        )
    return ContextualData(
        economic=dict(dto.economic), market=market, business=dict(dto.business)
    )


def to_forecast_request(dto: ForecastRequestDTO) -> ForecastRequest:
    """Convert a request DTO into the immutable domain request."""
    configuration = dto.model_configuration
    return ForecastRequest(
        id=dto.id or str(uuid4()),
        owner_id=dto.owner_id,
        organization_id=dto.organization_id,
        target_metric=dto.target_metric,
        historical_data=[_to_data_point(point) for point in dto.historical_data],
        forecast_horizon=ForecastHorizon(
            periods=dto.forecast_horizon.periods, unit=dto.forecast_horizon.unit
        ),
        forecast_type=dto.forecast_type,
        model_configuration=ModelConfiguration(
            algorithms=[
                ForecastAlgorithm(
                    name=algorithm.name,
                    weight=algorithm.weight,
                    parameters=dict(algorithm.parameters),
                    enabled=algorithm.enabled,
                )
                for algorithm in configuration.algorithms
            ],
            confidence_level=configuration.confidence_level,
            seasonality_mode=configuration.seasonality_mode,
            business_rules=[
                BusinessRule(
                    type=rule.type,
                    condition=rule.condition,
                    name=rule.name,
                    priority=rule.priority,
                    enabled=rule.enabled,
                )
                for rule in configuration.business_rules
            ],
        ),
        contextual_data=_to_contextual_data(dto.contextual_data),
        preferences=ForecastPreferences(
            include_scenario_analysis=dto.preferences.include_scenario_analysis,
            include_predictive_insights=dto.preferences.include_predictive_insights,
            include_recommendations=dto.preferences.include_recommendations,
            scenario_probabilities=(
                dict(dto.preferences.scenario_probabilities)
                if dto.preferences.scenario_probabilities is not None
                else None
            ),
        ),
    )


def to_calibration_request(dto: CalibrationRequestDTO) -> CalibrationRequest:
    return CalibrationRequest(
        organization_id=dto.organization_id,
        data=[
            CalibrationPoint(
                timestamp=point.timestamp,
                actual_value=point.actual_value,
                predicted_value=point.predicted_value,
            )
            for point in dto.data
        ],
        model_type=dto.model_type,
    )


class GenerateForecastUseCase:
    """Use case for generating a full forecast."""

    def __init__(self, forecasting_engine: ForecastingEngine):
        self.forecasting_engine = forecasting_engine

    async def execute(self, request_dto: ForecastRequestDTO) -> ForecastResultDTO:
        """
        Generate a forecast for the given historical series.

        Args:
            request_dto: Forecast request payload

        Returns:
            Forecast result DTO

        Raises:
            ForecastRequestError: If the request is invalid
            ForecastPipelineError: If forecasting fails unexpectedly
        """
        request = to_forecast_request(request_dto)
        try:
            result = await self.forecasting_engine.generate_forecast(request)
        except ForecastValidationError as e:
            raise ForecastRequestError(e.message, details=e.details) from e
        except Exception as e:
            logger.error(
                "forecast.failed",
                request_id=request.id,
                error=str(e),
                exc_info=e,
            )
            raise ForecastPipelineError(
                f"Forecast generation failed: {str(e)}",
                details={"request_id": request.id},
            ) from e

        return ForecastResultDTO.from_domain(result)


class AssessForecastRiskUseCase:
    """Use case for assessing forecast risk without generating predictions."""

    def __init__(self, forecasting_engine: ForecastingEngine):
        self.forecasting_engine = forecasting_engine

    async def execute(self, request_dto: ForecastRequestDTO) -> RiskAssessmentDTO:
        request = to_forecast_request(request_dto)
        try:
            assessment = await self.forecasting_engine.assess_risks(request)
        except ForecastValidationError as e:
            raise ForecastRequestError(e.message, details=e.details) from e
        except Exception as e:
            logger.error("forecast.risk_failed", request_id=request.id, error=str(e))
            raise ForecastPipelineError(
                f"Risk assessment failed: {str(e)}",
                details={"request_id": request.id},
            ) from e

        return RiskAssessmentDTO.from_domain(assessment)


class GetForecastingCapabilitiesUseCase:
    """Use case for describing supported metrics, algorithms and horizons."""

    def __init__(self, forecasting_engine: ForecastingEngine):
        self.forecasting_engine = forecasting_engine

    async def execute(self) -> ForecastingCapabilitiesDTO:
        capabilities = self.forecasting_engine.get_forecasting_capabilities()
        return ForecastingCapabilitiesDTO.model_validate(capabilities)


class CalibrateModelsUseCase:
    """Use case for detecting model drift from actual versus predicted values."""

    def __init__(self, forecasting_engine: ForecastingEngine):
        self.forecasting_engine = forecasting_engine

    async def execute(self, request_dto: CalibrationRequestDTO) -> ModelCalibrationDTO:
        request = to_calibration_request(request_dto)
        try:
            calibration = self.forecasting_engine.calibrate_models(request)
        except ForecastValidationError as e:
            raise ForecastRequestError(e.message, details=e.details) from e
        except Exception as e:
            logger.error(
                "calibration.failed",
                organization_id=request.organization_id,
                error=str(e),
            )
            raise ForecastPipelineError(
                f"Model calibration failed: {str(e)}",
                details={"organization_id": request.organization_id},
            ) from e

        return ModelCalibrationDTO.model_validate(calibration)

"""
DTOs Package - Application Layer

This package contains Data Transfer Objects (DTOs) used for data exchange
between the application layer and the presentation layer.
"""

from .forecast_dto import (
    CalibrationPointDTO,
    CalibrationRequestDTO,
    DataPointDTO,
    ForecastHorizonDTO,
    ForecastingCapabilitiesDTO,
    ForecastRequestDTO,
    ForecastResultDTO,
    ModelCalibrationDTO,
    RiskAssessmentDTO,
)
from .health_dto import ApplicationInfoDTO, DependencyStatusDTO, SystemHealthDTO

__all__ = [
    "CalibrationPointDTO",
    "CalibrationRequestDTO",
    "DataPointDTO",
    "ForecastHorizonDTO",
    "ForecastRequestDTO",
    "ForecastResultDTO",
    "ForecastingCapabilitiesDTO",
    "ModelCalibrationDTO",
    "RiskAssessmentDTO",
    "SystemHealthDTO",
    "DependencyStatusDTO",
    "ApplicationInfoDTO",
]

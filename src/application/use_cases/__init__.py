"""
Use Cases Package - Application Layer

This package contains the use cases that orchestrate forecasting and
system introspection on top of the domain services.
"""

from .forecast_use_cases import (
    AssessForecastRiskUseCase,
    CalibrateModelsUseCase,
    ForecastingError,
    ForecastPipelineError,
    ForecastRequestError,
    GenerateForecastUseCase,
    GetForecastingCapabilitiesUseCase,
)
from .forecasting_engine import ForecastingCapabilities, ForecastingEngine
from .health_use_cases import GetApplicationInfoUseCase, GetHealthStatusUseCase

__all__ = [
    "AssessForecastRiskUseCase",
    "CalibrateModelsUseCase",
    "ForecastingCapabilities",
    "ForecastingEngine",
    "ForecastingError",
    "ForecastPipelineError",
    "ForecastRequestError",
    "GenerateForecastUseCase",
    "GetForecastingCapabilitiesUseCase",
    "GetApplicationInfoUseCase",
    "GetHealthStatusUseCase",
]

"""
Dependency container injection module - Main Layer

This module implements the dependency injection container that wires the
forecasting engine, its collaborators and the use cases exposed over HTTP.
"""

from contextlib import asynccontextmanager

from dependency_injector import containers, providers

from src.application.models import SystemInfo
from src.application.use_cases.forecast_use_cases import (
    AssessForecastRiskUseCase,
    CalibrateModelsUseCase,
    GenerateForecastUseCase,
    GetForecastingCapabilitiesUseCase,
)
from src.application.use_cases.forecasting_engine import ForecastingEngine
from src.application.use_cases.health_use_cases import (
    GetApplicationInfoUseCase,
    GetHealthStatusUseCase,
)
from src.domain.services.model_registry import ModelRegistry
from src.infrastructure.gateways.text_generation_gateway import (
    TextGenerationGateway,
)
from src.infrastructure.repositories.forecast_cache_repository import (
    InMemoryForecastCacheRepository,
)
from src.infrastructure.services.health_check_service import HealthCheckService
from src.shared import get_logger

from .config import AppSettings

logger = get_logger(__name__)


class AppContainer(containers.DeclarativeContainer):
    """Composition Root using dependency-injector."""

    wiring_config = containers.WiringConfiguration(
        packages=["..presentation", "..application"]
    )

    # Settings
    config = providers.Configuration()

    # Domain
    model_registry = providers.Singleton(ModelRegistry)

    # Infrastructure
    forecast_cache_repository = providers.Singleton(
        InMemoryForecastCacheRepository,
        ttl_seconds=config.forecast.cache_ttl_seconds,
        max_entries=config.forecast.cache_max_entries,
    )

    text_generation_gateway = providers.Singleton(
        TextGenerationGateway,
        base_url=config.text_generation.base_url,
        api_key=config.text_generation.api_key,
        model=config.text_generation.model,
        timeout=config.text_generation.timeout,
    )

    health_check_service = providers.Singleton(
        HealthCheckService,
        cache_repository=forecast_cache_repository,
        text_generation_url=config.text_generation.base_url,
        text_generation_enabled=config.text_generation.enabled,
    )

    # Application
    forecasting_engine = providers.Singleton(
        ForecastingEngine,
        model_registry=model_registry,
        cache_repository=forecast_cache_repository,
        text_generation_gateway=text_generation_gateway,
        text_generation_enabled=config.text_generation.enabled,
        text_generation_timeout=config.text_generation.timeout,
        text_generation_retries=config.text_generation.max_retries,
    )

    generate_forecast_use_case = providers.Factory(
        GenerateForecastUseCase,
        forecasting_engine=forecasting_engine,
    )

    assess_forecast_risk_use_case = providers.Factory(
        AssessForecastRiskUseCase,
        forecasting_engine=forecasting_engine,
    )

    get_forecasting_capabilities_use_case = providers.Factory(
        GetForecastingCapabilitiesUseCase,
        forecasting_engine=forecasting_engine,
    )

    calibrate_models_use_case = providers.Factory(
        CalibrateModelsUseCase,
        forecasting_engine=forecasting_engine,
    )

    system_info = providers.Singleton(
        SystemInfo,
        title=config.app.title,
        description=config.app.description,
        version=config.app.version,
        environment=providers.Callable(
            lambda env: env.value if hasattr(env, "value") else str(env),
            config.environment,
        ),
        git_commit=config.app.git_commit,
        build_time=config.app.build_time,
        cache_ttl_seconds=config.forecast.cache_ttl_seconds,
        cache_max_entries=config.forecast.cache_max_entries,
        text_generation_enabled=config.text_generation.enabled,
        text_generation_url=config.text_generation.base_url,
        text_generation_model=config.text_generation.model,
    )

    get_health_status_use_case = providers.Factory(
        GetHealthStatusUseCase,
        health_check_service=health_check_service,
    )

    get_application_info_use_case = providers.Factory(
        GetApplicationInfoUseCase,
        health_check_service=health_check_service,
        system_info=system_info,
    )


# -------------------------
# Global Container Instance
# -------------------------
_app_container: AppContainer | None = None


def init_container(settings: AppSettings) -> AppContainer:
    """Initialize global container with application settings."""

    global _app_container

    container = AppContainer()
    container.config.from_pydantic(settings)
    _app_container = container
    return container


def get_container() -> AppContainer:
    """Get the initialized global container."""

    if _app_container is None:
        raise RuntimeError("Container has not been initialized yet")

    return _app_container


@asynccontextmanager
async def app_lifespan():
    """
    Lifecycle of container-managed resources for the FastAPI lifespan.

    The forecast cache lives in process memory and is cleared on shutdown.
    """
    container = get_container()
    cache_repository = container.forecast_cache_repository()
    model_registry = container.model_registry()

    try:
        logger.info(
            "container.resources.initialized",
            active_models=len(model_registry.active()),
        )
        yield container
    finally:
        await cache_repository.clear()
        logger.info("container.resources.shutdown")

"""
System Router - Presentation Layer

Health and info endpoints for the forecasting service. Health reports the
forecast cache and the text-generation collaborator; info adds the cache and
narrative-insight settings.
"""

from typing import List, Optional

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from src.application.dtos.health_dto import (
    ApplicationInfoDTO,
    DependencyStatusDTO,
    SystemHealthDTO,
)
from src.application.use_cases.health_use_cases import (
    GetApplicationInfoUseCase,
    GetHealthStatusUseCase,
)
from src.domain.entities.health import ServiceStatus

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["System"])

CACHE_DEPENDENCY = "forecast_cache"


def _cache_entries(dependencies: List[DependencyStatusDTO]) -> Optional[int]:
    for dependency in dependencies:
        if dependency.name == CACHE_DEPENDENCY:
            return dependency.details.get("entries")
    return None


@router.get(
    "/health",
    response_model=SystemHealthDTO,
    responses={503: {"description": "A dependency required for forecasting is down"}},
)
@inject
async def health(
    response: Response,
    get_health_status_use_case: GetHealthStatusUseCase = Depends(
        Provide["get_health_status_use_case"]
    ),
) -> SystemHealthDTO:
    """
    Report the forecast cache and text-generation status.

    Answers 503 when any dependency is down. A degraded dependency keeps 200.
    """
    try:
        health_status = await get_health_status_use_case.execute()
    except Exception as exc:  # pragma: no cover
        logger.error("system.health.failed", error=str(exc), exc_info=exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Unable to evaluate forecasting service health",
        ) from exc

    if health_status.status is ServiceStatus.DOWN:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "system.health.down",
            dependencies=[
                dep.name
                for dep in health_status.dependencies
                if dep.status is ServiceStatus.DOWN
            ],
        )
    else:
        logger.debug(
            "system.health.checked",
            status=health_status.status.value,
            cached_forecasts=_cache_entries(health_status.dependencies),
        )
    return health_status


@router.get("/info", response_model=ApplicationInfoDTO)
@inject
async def info(
    request: Request,
    get_application_info_use_case: GetApplicationInfoUseCase = Depends(
        Provide["get_application_info_use_case"]
    ),
) -> ApplicationInfoDTO:
    """Service metadata with cache and text-generation settings."""
    started_at = getattr(request.app.state, "started_at", None)
    try:
        info_response = await get_application_info_use_case.execute(started_at)
    except Exception as exc:  # pragma: no cover
        logger.error("system.info.failed", error=str(exc), exc_info=exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to retrieve forecasting service info",
        ) from exc

    logger.debug(
        "system.info.retrieved",
        version=info_response.version,
        text_generation_enabled=info_response.extras.get("text_generation", {}).get(
            "enabled"
        ),
    )
    return info_response

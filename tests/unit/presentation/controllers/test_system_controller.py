from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi import Request, Response

from src.application.models import SystemInfo
from src.application.use_cases.health_use_cases import (
    GetApplicationInfoUseCase,
    GetHealthStatusUseCase,
)
from src.domain.entities.health import DependencyStatus, ServiceStatus, SystemHealth
from src.presentation.controllers.system_controller import health, info


class _HealthService:
    def __init__(self, status: ServiceStatus):
        self._health = SystemHealth(
            status=status,
            dependencies=[DependencyStatus(name="forecast_cache", status=status)],
        )

    async def evaluate(self) -> SystemHealth:
        return self._health


@pytest.mark.asyncio
async def test_health_endpoint_returns_status():
    response = Response()

    dto = await health(
        response=response,
        get_health_status_use_case=GetHealthStatusUseCase(
            _HealthService(ServiceStatus.UP)
        ),
    )

    assert dto.status is ServiceStatus.UP
    assert dto.dependencies[0].name == "forecast_cache"
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_health_endpoint_answers_503_when_a_dependency_is_down():
    response = Response()

    dto = await health(
        response=response,
        get_health_status_use_case=GetHealthStatusUseCase(
            _HealthService(ServiceStatus.DOWN)
        ),
    )

    assert dto.status is ServiceStatus.DOWN
    assert response.status_code == 503


@pytest.mark.asyncio
async def test_degraded_health_keeps_default_status_code():
    response = Response()

    await health(
        response=response,
        get_health_status_use_case=GetHealthStatusUseCase(
            _HealthService(ServiceStatus.DEGRADED)
        ),
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_info_endpoint_returns_application_info():
    health_service = _HealthService(ServiceStatus.UP)
    system_info = SystemInfo(
        title="Forecasting Engine",
        description="desc",
        version="1.0",
        environment="dev",
        git_commit="abc",
        build_time="now",
        cache_ttl_seconds=60,
        cache_max_entries=8,
        text_generation_enabled=False,
        text_generation_url="http://textgen",
        text_generation_model="default",
    )
    info_use_case = GetApplicationInfoUseCase(health_service, system_info)

    scope = {
        "type": "http",
        "method": "GET",
        "path": "/info",
        "headers": [],
        "query_string": b"",
        "server": ("test", 80),
        "app": SimpleNamespace(
            state=SimpleNamespace(started_at=datetime.now(timezone.utc))
        ),
    }
    request = Request(scope)

    dto = await info(request=request, get_application_info_use_case=info_use_case)
    assert dto.name == "Forecasting Engine"
    assert dto.status is ServiceStatus.UP

"""Infrastructure implementation for system health checks."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from time import perf_counter
from typing import Iterable, List
from urllib.parse import urljoin

import httpx

from src.domain.entities.health import DependencyStatus, ServiceStatus, SystemHealth
from src.domain.ports.health_check import IHealthCheckService
from src.infrastructure.repositories.forecast_cache_repository import (
    InMemoryForecastCacheRepository,
)


class HealthCheckService(IHealthCheckService):
    """Collect health information for the engine's collaborators."""

    def __init__(
        self,
        cache_repository: InMemoryForecastCacheRepository,
        text_generation_url: str,
        *,
        text_generation_enabled: bool = True,
        http_timeout: float = 5.0,
    ) -> None:
        self._cache_repository = cache_repository
        self._text_generation_url = text_generation_url
        self._text_generation_enabled = text_generation_enabled
        self._http_timeout = http_timeout

    async def evaluate(self) -> SystemHealth:
        """Run checks concurrently and aggregate system health."""

        checks = {
            "forecast_cache": asyncio.create_task(self._check_cache()),
            "text_generation": asyncio.create_task(self._check_text_generation()),
        }

        dependency_statuses: List[DependencyStatus] = []

        for name, task in checks.items():
            try:
                dependency_statuses.append(await task)
            except Exception as exc:  # pragma: no cover
                dependency_statuses.append(
                    DependencyStatus(
                        name=name,
                        status=ServiceStatus.DOWN,
                        message=str(exc),
                    )
                )

        return SystemHealth.aggregate(dependency_statuses)

    async def _check_cache(self) -> DependencyStatus:
        start = perf_counter()
        entries = await self._cache_repository.count()
        return DependencyStatus(
            name="forecast_cache",
            status=ServiceStatus.UP,
            message="In-memory forecast cache available",
            latency_ms=(perf_counter() - start) * 1000,
            details={
                "entries": entries,
                "max_entries": self._cache_repository.max_entries,
                "ttl_seconds": self._cache_repository.ttl_seconds,
            },
        )

    async def _check_text_generation(self) -> DependencyStatus:
        if not self._text_generation_enabled:
            return DependencyStatus(
                name="text_generation",
                status=ServiceStatus.UP,
                message="Text generation disabled; narrative insights are skipped.",
                details={"enabled": False},
            )
        return await self._check_http_service(
            name="text_generation",
            base_url=self._text_generation_url,
            paths=("/health", "/v1/models", "/"),
        )

    async def _check_http_service(
        self,
        *,
        name: str,
        base_url: str,
        paths: Iterable[str],
    ) -> DependencyStatus:
        if not base_url:
            return DependencyStatus(
                name=name,
                status=ServiceStatus.UNKNOWN,
                message="Service URL not configured.",
            )

        attempts_log: List[dict] = []
        last_result: DependencyStatus | None = None

        for path in paths:
            result = await self._hit_http_endpoint(
                name=name, base_url=base_url, path=path
            )
            attempts_log.append(
                {
                    "path": path,
                    "status": result.status.value,
                    "message": result.message,
                    "checked_at": datetime.now(timezone.utc).isoformat(),
                }
            )

            if result.status != ServiceStatus.DOWN:
                result.details.setdefault("attempts", attempts_log)
                return result

            last_result = result

        if last_result is None:
            return DependencyStatus(
                name=name,
                status=ServiceStatus.UNKNOWN,
                message="Unable to evaluate service health",
            )

        last_result.details.setdefault("attempts", attempts_log)
        return last_result

    async def _hit_http_endpoint(
        self,
        *,
        name: str,
        base_url: str,
        path: str,
    ) -> DependencyStatus:
        url = self._normalize_url(base_url, path)
        start = perf_counter()

        try:
            async with httpx.AsyncClient(timeout=self._http_timeout) as client:
                response = await client.get(url)

            latency_ms = (perf_counter() - start) * 1000
            status_code = response.status_code

            if status_code >= 500:
                status = ServiceStatus.DOWN
            elif status_code >= 400:
                status = ServiceStatus.DEGRADED
            else:
                status = ServiceStatus.UP

            return DependencyStatus(
                name=name,
                status=status,
                message=f"HTTP {status_code}",
                latency_ms=latency_ms,
                details={"url": url, "status_code": status_code},
            )

        except httpx.RequestError as exc:
            latency_ms = (perf_counter() - start) * 1000
            return DependencyStatus(
                name=name,
                status=ServiceStatus.DOWN,
                message=f"HTTP request failed: {exc}",
                latency_ms=latency_ms,
                details={"url": url},
            )

    def _normalize_url(self, base_url: str, path: str) -> str:
        if not path:
            return base_url
        base = base_url if base_url.endswith("/") else f"{base_url}/"
        relative = path.lstrip("/")
        return urljoin(base, relative)

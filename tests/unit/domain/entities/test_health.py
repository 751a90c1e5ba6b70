from __future__ import annotations

from datetime import timezone

from src.domain.entities.health import DependencyStatus, ServiceStatus, SystemHealth


def test_dependency_status_defaults() -> None:
    status = DependencyStatus(name="forecast_cache", status=ServiceStatus.UP)
    assert status.checked_at.tzinfo == timezone.utc
    assert status.details == {}


def test_system_health_container() -> None:
    dependency = DependencyStatus(name="text_generation", status=ServiceStatus.DOWN)
    health = SystemHealth(status=ServiceStatus.DEGRADED, dependencies=[dependency])
    assert health.dependencies[0] is dependency
    assert health.status is ServiceStatus.DEGRADED


def test_aggregate_prefers_worst_status() -> None:
    up = DependencyStatus(name="forecast_cache", status=ServiceStatus.UP)
    degraded = DependencyStatus(name="text_generation", status=ServiceStatus.DEGRADED)
    down = DependencyStatus(name="text_generation", status=ServiceStatus.DOWN)

    assert SystemHealth.aggregate([up]).status is ServiceStatus.UP
    assert SystemHealth.aggregate([up, degraded]).status is ServiceStatus.DEGRADED
    assert SystemHealth.aggregate([degraded, down]).status is ServiceStatus.DOWN
    assert SystemHealth.aggregate([]).status is ServiceStatus.UP

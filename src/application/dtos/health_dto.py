"""DTOs for the /health and /info responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from src.domain.entities.health import (
    ApplicationInfo,
    DependencyStatus,
    ServiceStatus,
    SystemHealth,
)

_CACHE_STATUS_EXAMPLE = {
    "name": "forecast_cache",
    "status": "up",
    "message": "Forecast cache reachable",
    "checked_at": "2024-09-09T12:00:00Z",
    "latency_ms": 0.4,
    "details": {"entries": 12},
}


class DependencyStatusDTO(BaseModel):
    """Serializable status of one collaborator."""

    name: str = Field(description="Dependency identifier")
    status: ServiceStatus = Field(description="Status reported by the probe")
    message: Optional[str] = Field(default=None, description="Status note")
    checked_at: datetime = Field(description="Timestamp of the probe")
    latency_ms: Optional[float] = Field(
        default=None, description="Probe latency in milliseconds"
    )
    details: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, status: DependencyStatus) -> "DependencyStatusDTO":
        return cls(
            name=status.name,
            status=status.status,
            message=status.message,
            checked_at=status.checked_at,
            latency_ms=status.latency_ms,
            details=status.details,
        )

    model_config = {"json_schema_extra": {"example": _CACHE_STATUS_EXAMPLE}}


class SystemHealthDTO(BaseModel):
    status: ServiceStatus = Field(description="Worst status across dependencies")
    dependencies: List[DependencyStatusDTO] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, health: SystemHealth) -> "SystemHealthDTO":
        return cls(
            status=health.status,
            dependencies=[
                DependencyStatusDTO.from_domain(dep) for dep in health.dependencies
            ],
        )

    model_config = {
        "json_schema_extra": {
            "example": {"status": "up", "dependencies": [_CACHE_STATUS_EXAMPLE]}
        }
    }


class ApplicationInfoDTO(BaseModel):
    """DTO representing metadata returned by /info."""

    name: str
    description: str
    version: str
    environment: str
    git_commit: str
    build_time: str
    started_at: datetime
    uptime_seconds: float = Field(description="Seconds since startup")
    status: ServiceStatus
    dependencies: List[DependencyStatusDTO] = Field(default_factory=list)
    extras: Dict[str, Any] = Field(
        default_factory=dict, description="Forecasting and collaborator settings"
    )

    @classmethod
    def from_domain(cls, info: ApplicationInfo) -> "ApplicationInfoDTO":
        return cls(
            name=info.name,
            description=info.description,
            version=info.version,
            environment=info.environment,
            git_commit=info.git_commit,
            build_time=info.build_time,
            started_at=info.started_at,
            uptime_seconds=info.uptime_seconds,
            status=info.status,
            dependencies=[
                DependencyStatusDTO.from_domain(dep) for dep in info.dependencies
            ],
            extras=info.extras,
        )

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Forecasting Engine",
                "description": "Business time-series forecasting service",
                "version": "1.0.0",
                "environment": "development",
                "git_commit": "abcdef1",
                "build_time": "2024-09-09T11:30:00Z",
                "started_at": "2024-09-09T12:00:00Z",
                "uptime_seconds": 3600.5,
                "status": "up",
                "dependencies": [_CACHE_STATUS_EXAMPLE],
                "extras": {
                    "forecast": {"cache_ttl_seconds": 86400, "cache_max_entries": 256},
                    "text_generation": {
                        "enabled": True,
                        "base_url": "http://localhost:8080",
                        "model": "default",
                    },
                },
            }
        }
    }

"""Domain service abstraction for health checks."""

from __future__ import annotations

from typing import Protocol

from src.domain.entities.health import SystemHealth


class IHealthCheckService(Protocol):
    """Interface for retrieving the health of the engine's collaborators."""

    async def evaluate(self) -> SystemHealth:
        """Probe the text-generation service and the result cache."""
        ...

"""
Forecast Cache Repository Interface

This module defines the interface for storing forecast results keyed by
request fingerprint. Implementations decide how long entries stay valid.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities.result import ForecastResult


class IForecastCacheRepository(ABC):
    """Interface for forecast result cache implementations."""

    @abstractmethod
    async def get(self, fingerprint: str) -> Optional[ForecastResult]:
        """
        Find a still-valid result by fingerprint.

        Args:
            fingerprint: Deterministic hash of the request-defining fields

        Returns:
            The cached result if present and not expired, None otherwise
        """
        pass

    @abstractmethod
    async def save(self, fingerprint: str, result: ForecastResult) -> None:
        """
        Store a result under its fingerprint, replacing any previous entry.

        Args:
            fingerprint: Deterministic hash of the request-defining fields
            result: The full result envelope
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Drop every cached entry."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Return the number of valid entries."""
        pass

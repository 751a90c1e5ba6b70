"""
Repositories Package - Infrastructure Layer

This package contains concrete implementations of the repository
interfaces defined in the domain layer. These implementations
handle the details of caching forecast results.
"""

from .forecast_cache_repository import InMemoryForecastCacheRepository

__all__ = ["InMemoryForecastCacheRepository"]

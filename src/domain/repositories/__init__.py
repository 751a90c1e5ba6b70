"""
Repositories Package

This package contains interfaces defining repository contracts
for data access operations. Specific implementations are provided
by the infrastructure layer.
"""

from .forecast_cache_repository import IForecastCacheRepository

__all__ = ["IForecastCacheRepository"]

"""
Domain Layer Package

This package contains the forecasting engine's business rules. It defines
entities, gateway and repository contracts, ports and services without
dependencies on web frameworks or infrastructure concerns.
"""

# Re-export submodules
from src.domain import entities, gateways, ports, repositories, services

__all__ = ["entities", "gateways", "ports", "repositories", "services"]

"""
Infrastructure Layer Package

This package contains implementations of interfaces defined in the
domain layer: the in-memory forecast cache, the text-generation HTTP
client and the health checks of those collaborators.
"""

from src.infrastructure import gateways, repositories, services

__all__ = ["gateways", "repositories", "services"]

"""
Controllers Package - Presentation Layer

This package contains FastAPI controllers (routers) that map HTTP requests
onto application use cases and application errors onto status codes.
"""

from .forecasting_controller import router as forecasting_router
from .system_controller import router as system_router

__all__ = ["forecasting_router", "system_router"]

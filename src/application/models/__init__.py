"""Lightweight settings structures consumed by the application layer."""

from .system_info import SystemInfo

__all__ = ["SystemInfo"]

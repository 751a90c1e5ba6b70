"""Settings snapshot consumed by the application layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SystemInfo:
    """Configuration values reported by the /info endpoint."""

    title: str
    description: str
    version: str
    environment: str
    git_commit: str
    build_time: str
    cache_ttl_seconds: int
    cache_max_entries: int
    text_generation_enabled: bool
    text_generation_url: str
    text_generation_model: str

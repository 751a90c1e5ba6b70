from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import cast

import pytest

from src.domain.entities.result import ForecastResult
from src.infrastructure.repositories.forecast_cache_repository import (
    InMemoryForecastCacheRepository,
)


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _result(name: str) -> ForecastResult:
    return cast(ForecastResult, SimpleNamespace(forecast_id=name))


@pytest.mark.asyncio
async def test_save_and_get() -> None:
    cache = InMemoryForecastCacheRepository()

    await cache.save("fp-1", _result("a"))

    assert (await cache.get("fp-1")).forecast_id == "a"
    assert await cache.get("missing") is None
    assert await cache.count() == 1


@pytest.mark.asyncio
async def test_entries_expire_after_ttl() -> None:
    clock = _Clock()
    cache = InMemoryForecastCacheRepository(ttl_seconds=60, clock=clock)
    await cache.save("fp-1", _result("a"))
    await cache.save("fp-2", _result("b"))

    clock.now = 59.9
    assert await cache.get("fp-1") is not None

    clock.now = 60.0
    assert await cache.get("fp-1") is None
    assert await cache.count() == 0


@pytest.mark.asyncio
async def test_oldest_entry_is_evicted_at_capacity() -> None:
    cache = InMemoryForecastCacheRepository(max_entries=2)

    await cache.save("fp-1", _result("a"))
    await cache.save("fp-2", _result("b"))
    await cache.save("fp-1", _result("c"))
    await cache.save("fp-3", _result("d"))

    assert await cache.get("fp-2") is None
    assert (await cache.get("fp-1")).forecast_id == "c"
    assert await cache.count() == 2


@pytest.mark.asyncio
async def test_clear_removes_everything() -> None:
    cache = InMemoryForecastCacheRepository()
    await cache.save("fp-1", _result("a"))

    await cache.clear()

    assert await cache.count() == 0


@pytest.mark.asyncio
async def test_concurrent_saves_respect_capacity() -> None:
    cache = InMemoryForecastCacheRepository(max_entries=3)

    await asyncio.gather(
        *(cache.save(f"fp-{idx}", _result(str(idx))) for idx in range(10))
    )

    assert await cache.count() == 3
    results = await asyncio.gather(*(cache.get(f"fp-{idx}") for idx in range(10)))
    assert [r.forecast_id for r in results if r is not None] == ["7", "8", "9"]

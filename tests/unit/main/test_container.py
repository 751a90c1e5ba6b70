from __future__ import annotations

import pytest
from dependency_injector import providers

from src.application.use_cases.forecast_use_cases import GenerateForecastUseCase
from src.main.config import AppSettings
from src.main.container import app_lifespan, get_container, init_container
from tests.conftest import FakeCacheRepository, make_request


def test_init_and_get_container(monkeypatch) -> None:
    monkeypatch.setenv("FORECAST_CACHE_TTL_SECONDS", "120")
    monkeypatch.setenv("TEXTGEN_MAX_RETRIES", "3")

    container = init_container(AppSettings())

    assert get_container() is container
    assert container.forecast_cache_repository().ttl_seconds == 120.0
    assert container.forecasting_engine().text_generation_retries == 3
    assert container.forecasting_engine() is container.forecasting_engine()
    assert isinstance(container.generate_forecast_use_case(), GenerateForecastUseCase)
    assert container.system_info().environment == "development"


@pytest.mark.asyncio
async def test_app_lifespan_clears_cache(monkeypatch) -> None:
    monkeypatch.setenv("TEXTGEN_ENABLED", "false")
    container = init_container(AppSettings())
    fake_cache = FakeCacheRepository()
    container.forecast_cache_repository.override(providers.Object(fake_cache))

    async with app_lifespan():
        await container.forecasting_engine().generate_forecast(make_request())
        assert await fake_cache.count() == 1

    assert await fake_cache.count() == 0
    container.forecast_cache_repository.reset_override()


def test_get_container_without_init_raises(monkeypatch) -> None:
    monkeypatch.setattr("src.main.container._app_container", None)
    with pytest.raises(RuntimeError):
        get_container()

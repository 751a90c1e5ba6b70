from __future__ import annotations

from src.main.config import AppSettings, get_settings
from src.shared.consts import EnumEnvironment, EnumLogLevel


def test_get_settings_loads_defaults(monkeypatch) -> None:
    for name in ("ENVIRONMENT", "APP_TITLE", "FORECAST_CACHE_TTL_SECONDS", "TEXTGEN_ENABLED"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.environment == EnumEnvironment.DEVELOPMENT
    assert settings.app.title == "Forecasting Engine"
    assert settings.app.port == 8000
    assert settings.forecast.cache_ttl_seconds == 86400
    assert settings.forecast.cache_max_entries == 256
    assert settings.text_generation.enabled is True
    assert settings.text_generation.max_retries == 1


def test_settings_respect_environment_variables(monkeypatch) -> None:
    monkeypatch.setenv("APP_TITLE", "Testing")
    monkeypatch.setenv("GIT_COMMIT", "deadbeef")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("FORECAST_CACHE_MAX_ENTRIES", "10")
    monkeypatch.setenv("TEXTGEN_BASE_URL", "http://textgen:9000")
    monkeypatch.setenv("TEXTGEN_TIMEOUT", "2.5")
    monkeypatch.setenv("ENVIRONMENT", "production")

    settings = AppSettings()

    assert settings.app.title == "Testing"
    assert settings.app.git_commit == "deadbeef"
    assert settings.logging.level is EnumLogLevel.DEBUG
    assert settings.forecast.cache_max_entries == 10
    assert settings.text_generation.base_url == "http://textgen:9000"
    assert settings.text_generation.timeout == 2.5
    assert settings.environment.renders_json is True

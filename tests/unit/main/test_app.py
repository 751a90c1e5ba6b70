from __future__ import annotations

import pytest

from src.main import app as module_app
from src.main.app import create_app
from src.main.container import get_container


@pytest.mark.asyncio
async def test_create_app_initializes_lifespan(monkeypatch) -> None:
    monkeypatch.setenv("APP_TITLE", "Forecasting Test")
    monkeypatch.setenv("TEXTGEN_ENABLED", "false")

    app = create_app()
    assert app.title == "Forecasting Test"
    assert {route.path for route in app.routes} >= {
        "/health",
        "/info",
        "/forecasts",
        "/forecasts/capabilities",
        "/forecasts/risk-assessment",
        "/forecasts/calibration",
    }

    async with app.router.lifespan_context(app):
        assert app.state.started_at is not None
        assert app.state.container is get_container()

    # Ensure module-level app is instantiated
    assert isinstance(module_app.app, type(app))

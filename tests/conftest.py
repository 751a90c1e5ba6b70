from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest

from src.domain.entities.errors import TextGenerationError
from src.domain.entities.forecast import (
    DataPoint,
    ForecastHorizon,
    ForecastRequest,
    TimeUnit,
)
from src.domain.entities.result import ForecastResult
from src.domain.gateways.text_generation_gateway import (
    ITextGenerationGateway,
    TextGenerationResult,
)
from src.domain.repositories.forecast_cache_repository import IForecastCacheRepository

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

NOW = datetime(2023, 12, 15, tzinfo=timezone.utc)

LINEAR_MONTHLY = [
    100000.0,
    105000.0,
    110000.0,
    115000.0,
    120000.0,
    125000.0,
    130000.0,
    135000.0,
    140000.0,
    145000.0,
    150000.0,
    155000.0,
]


def month_start(index: int, year: int = 2023) -> datetime:
    """First day of the ``index``-th month counted from January of ``year``."""
    return datetime(year + index // 12, index % 12 + 1, 1, tzinfo=timezone.utc)


def monthly_points(values: Sequence[float], year: int = 2023) -> List[DataPoint]:
    return [
        DataPoint(timestamp=month_start(idx, year), value=value)
        for idx, value in enumerate(values)
    ]


def daily_points(values: Sequence[float], start: datetime) -> List[DataPoint]:
    return [
        DataPoint(timestamp=start + timedelta(days=idx), value=value)
        for idx, value in enumerate(values)
    ]


def make_request(
    values: Optional[Sequence[float]] = None,
    *,
    periods: int = 6,
    unit: TimeUnit = TimeUnit.MONTH,
    points: Optional[List[DataPoint]] = None,
    **overrides: Any,
) -> ForecastRequest:
    if points is None:
        points = monthly_points(LINEAR_MONTHLY if values is None else values)
    fields: Dict[str, Any] = {
        "id": "req-1",
        "owner_id": "user-42",
        "organization_id": "org-7",
        "target_metric": "revenue",
        "historical_data": points,
        "forecast_horizon": ForecastHorizon(periods=periods, unit=unit),
    }
    fields.update(overrides)
    return ForecastRequest(**fields)


def forecast_payload(
    values: Optional[Sequence[float]] = None, **overrides: Any
) -> Dict[str, Any]:
    """JSON body accepted by the forecast endpoints."""
    series = LINEAR_MONTHLY if values is None else values
    payload: Dict[str, Any] = {
        "id": "req-1",
        "owner_id": "user-42",
        "organization_id": "org-7",
        "target_metric": "revenue",
        "historical_data": [
            {"timestamp": month_start(idx).isoformat(), "value": value}
            for idx, value in enumerate(series)
        ],
        "forecast_horizon": {"periods": 6, "unit": "MONTH"},
    }
    payload.update(overrides)
    return payload


@dataclass
class FakeCacheRepository(IForecastCacheRepository):
    entries: Dict[str, ForecastResult] = field(default_factory=dict)
    saves: int = 0

    async def get(self, fingerprint: str) -> Optional[ForecastResult]:
        return self.entries.get(fingerprint)

    async def save(self, fingerprint: str, result: ForecastResult) -> None:
        self.saves += 1
        self.entries[fingerprint] = result

    async def clear(self) -> None:
        self.entries.clear()

    async def count(self) -> int:
        return len(self.entries)


class StubTextGateway(ITextGenerationGateway):
    """Returns queued results; exceptions in the queue are raised."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> TextGenerationResult:
        self.prompts.append(prompt)
        response = self.responses.pop(0) if self.responses else ""
        if isinstance(response, Exception):
            raise response
        if isinstance(response, TextGenerationResult):
            return response
        return TextGenerationResult(text=response)


class FailingTextGateway(ITextGenerationGateway):
    def __init__(self) -> None:
        self.calls = 0

    async def generate(self, prompt: str) -> TextGenerationResult:
        self.calls += 1
        raise TextGenerationError("service unavailable")


@pytest.fixture()
def fixed_now() -> datetime:
    return NOW


@pytest.fixture()
def fake_cache() -> FakeCacheRepository:
    return FakeCacheRepository()


@pytest.fixture()
def linear_request() -> ForecastRequest:
    return make_request()

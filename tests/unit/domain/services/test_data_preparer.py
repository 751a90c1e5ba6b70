from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.domain.entities.errors import ForecastValidationError
from src.domain.entities.forecast import DataPoint, DataSource, TimeUnit
from src.domain.services.data_preparer import DataPreparer
from tests.conftest import LINEAR_MONTHLY, NOW, month_start, monthly_points


def _preparer(now: datetime = NOW) -> DataPreparer:
    return DataPreparer(clock=lambda: now)


def test_prepare_sorts_points_and_scores_clean_series() -> None:
    points = monthly_points(LINEAR_MONTHLY)
    shuffled = points[6:] + points[:6]

    prepared = _preparer().prepare(shuffled, TimeUnit.MONTH)

    assert prepared.timestamps == [point.timestamp for point in points]
    assert prepared.values == LINEAR_MONTHLY
    assert prepared.quality_score == pytest.approx(1.0)
    assert prepared.outliers_removed == 0
    assert prepared.gaps_filled == 0
    assert prepared.stale is False
    assert prepared.issues == []


def test_prepare_removes_extreme_outliers() -> None:
    points = monthly_points([10, 11, 12, 10, 11, 1000])

    prepared = _preparer(datetime(2023, 5, 20, tzinfo=timezone.utc)).prepare(points)

    assert 1000 not in prepared.values
    assert prepared.raw_count == 6
    assert prepared.outliers_removed == 1
    assert prepared.quality_score == pytest.approx(1 - 0.2 / 6)
    assert "1 outlier(s) removed from the series." in prepared.issues


def test_prepare_fills_one_midpoint_per_gap() -> None:
    points = [
        DataPoint(timestamp=month_start(idx), value=value)
        for idx, value in ((0, 10), (1, 20), (2, 30), (5, 60), (6, 70))
    ]

    prepared = _preparer(datetime(2023, 7, 5, tzinfo=timezone.utc)).prepare(points)

    assert prepared.gaps_filled == 1
    assert len(prepared.points) == 6
    filled = prepared.points[3]
    assert filled.value == pytest.approx(45)
    assert filled.metadata.source is DataSource.INTERPOLATED
    assert filled.metadata.confidence == pytest.approx(0.7)
    assert month_start(2) < filled.timestamp < month_start(5)
    assert prepared.quality_score == pytest.approx(1 - 0.25 * 0.3)


def test_prepare_flags_stale_series() -> None:
    points = monthly_points(LINEAR_MONTHLY)

    prepared = _preparer(datetime(2024, 3, 1, tzinfo=timezone.utc)).prepare(points)

    assert prepared.stale is True
    assert prepared.quality_score == pytest.approx(0.9)
    assert any("30 days" in issue for issue in prepared.issues)


def test_staleness_uses_most_recent_point_even_when_it_is_an_outlier() -> None:
    points = monthly_points([10, 11, 12, 10, 11, 1000])

    prepared = _preparer(datetime(2023, 6, 20, tzinfo=timezone.utc)).prepare(points)

    assert prepared.outliers_removed == 1
    assert prepared.timestamps[-1] == month_start(4)
    assert prepared.stale is False


def test_prepare_treats_naive_timestamps_as_utc() -> None:
    points = [
        DataPoint(timestamp=datetime(2023, 12, idx + 1), value=float(idx))
        for idx in range(3)
    ]

    prepared = _preparer().prepare(points, TimeUnit.DAY)

    assert all(ts.tzinfo == timezone.utc for ts in prepared.timestamps)


def test_prepare_requires_three_points() -> None:
    with pytest.raises(ForecastValidationError) as exc_info:
        _preparer().prepare(monthly_points([1, 2]))

    assert "historical data points are required" in exc_info.value.message


def test_quality_score_has_a_floor() -> None:
    score = DataPreparer._score(
        raw_count=3, outliers_removed=3, gaps=10, intervals=1, stale=True
    )
    assert score == pytest.approx(0.3)

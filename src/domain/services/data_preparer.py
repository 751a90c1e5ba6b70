"""
Domain Service - Data Preparer

Cleans and quality-scores a raw historical series before pattern analysis:
  - Sorts observations by timestamp
  - Drops extreme outliers outside the Tukey fence
  - Fills temporal gaps with one interpolated midpoint per gap
  - Scores the series quality in [0.3, 1.0]
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence

import pandas as pd
import structlog

from src.domain.entities.errors import ForecastValidationError
from src.domain.entities.forecast import (
    DataPoint,
    DataPointMetadata,
    DataSource,
    TimeUnit,
)

logger = structlog.get_logger(__name__)

MIN_POINTS = 3
INTERPOLATED_CONFIDENCE = 0.7
GAP_TOLERANCE = 1.5
STALE_AFTER = timedelta(days=30)
QUALITY_FLOOR = 0.3


@dataclass(slots=True, frozen=True)
class PreparedSeries:
    """Cleaned series plus the bookkeeping used for quality scoring."""

    points: List[DataPoint]
    quality_score: float
    raw_count: int
    outliers_removed: int
    gaps_filled: int
    stale: bool
    issues: List[str] = field(default_factory=list)

    @property
    def values(self) -> List[float]:
        return [point.value for point in self.points]

    @property
    def timestamps(self) -> List[datetime]:
        return [point.timestamp for point in self.points]


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class DataPreparer:
    """Turns a raw series into a cleaned one with a quality score."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def prepare(
        self,
        raw_series: Sequence[DataPoint],
        unit: TimeUnit = TimeUnit.MONTH,
    ) -> PreparedSeries:
        """
        Clean and score a raw series.

        Args:
            raw_series: Observations in any order
            unit: Expected cadence of the series

        Returns:
            PreparedSeries with the filled series and its quality score

        Raises:
            ForecastValidationError: When fewer than 3 points survive filtering
        """
        if len(raw_series) < MIN_POINTS:
            raise ForecastValidationError(
                [
                    f"At least {MIN_POINTS} historical data points are required, "
                    f"got {len(raw_series)}."
                ]
            )

        ordered = sorted(
            (replace(p, timestamp=as_utc(p.timestamp)) for p in raw_series),
            key=lambda point: point.timestamp,
        )
        kept = self._filter_outliers(ordered)
        outliers_removed = len(ordered) - len(kept)

        if len(kept) < MIN_POINTS:
            raise ForecastValidationError(
                [
                    f"At least {MIN_POINTS} historical data points are required "
                    f"after outlier filtering, got {len(kept)}."
                ]
            )

        filled, gaps_filled = self._fill_gaps(kept, unit)

        stale = as_utc(self._clock()) - ordered[-1].timestamp > STALE_AFTER
        quality = self._score(
            raw_count=len(ordered),
            outliers_removed=outliers_removed,
            gaps=gaps_filled,
            intervals=len(kept) - 1,
            stale=stale,
        )

        issues: List[str] = []
        if outliers_removed:
            issues.append(f"{outliers_removed} outlier(s) removed from the series.")
        if gaps_filled:
            issues.append(f"{gaps_filled} temporal gap(s) filled by interpolation.")
        if stale:
            issues.append("Most recent data point is more than 30 days old.")

        logger.debug(
            "data_preparer.prepared",
            raw_points=len(ordered),
            outliers_removed=outliers_removed,
            gaps_filled=gaps_filled,
            quality_score=quality,
        )

        return PreparedSeries(
            points=filled,
            quality_score=quality,
            raw_count=len(ordered),
            outliers_removed=outliers_removed,
            gaps_filled=gaps_filled,
            stale=stale,
            issues=issues,
        )

    def _filter_outliers(self, points: List[DataPoint]) -> List[DataPoint]:
        values = pd.Series([point.value for point in points], dtype="float64")
        q1 = float(values.quantile(0.25, interpolation="linear"))
        q3 = float(values.quantile(0.75, interpolation="linear"))
        iqr = q3 - q1
        lower = q1 - 1.5 * iqr
        upper = q3 + 1.5 * iqr
        return [point for point in points if lower <= point.value <= upper]

    def _fill_gaps(
        self, points: List[DataPoint], unit: TimeUnit
    ) -> tuple[List[DataPoint], int]:
        threshold = timedelta(days=unit.cadence_days * GAP_TOLERANCE)
        filled: List[DataPoint] = [points[0]]
        gaps = 0

        for previous, current in zip(points, points[1:]):
            start = previous.timestamp
            end = current.timestamp
            if end - start > threshold:
                filled.append(
                    DataPoint(
                        timestamp=start + (end - start) / 2,
                        value=(previous.value + current.value) / 2,
                        metadata=DataPointMetadata(
                            source=DataSource.INTERPOLATED,
                            confidence=INTERPOLATED_CONFIDENCE,
                            adjustments=["gap_fill"],
                        ),
                    )
                )
                gaps += 1
            filled.append(current)

        return filled, gaps

    @staticmethod
    def _score(
        *,
        raw_count: int,
        outliers_removed: int,
        gaps: int,
        intervals: int,
        stale: bool,
    ) -> float:
        score = 1.0
        score -= (outliers_removed / raw_count) * 0.2
        if intervals > 0:
            score -= (gaps / intervals) * 0.3
        if stale:
            score -= 0.1
        return max(QUALITY_FLOOR, min(1.0, score))

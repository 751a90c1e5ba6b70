"""Domain service detecting trend, seasonality, volatility and cycles."""

from __future__ import annotations

import math
from datetime import datetime
from typing import List, Sequence

import numpy as np

from src.domain.entities.forecast import DataPoint, TimeUnit
from src.domain.entities.patterns import (
    CyclicalAnalysis,
    HistoricalPatterns,
    SeasonalityAnalysis,
    TrendAnalysis,
    TrendDirection,
    VolatilityAnalysis,
    VolatilityLevel,
)

TREND_THRESHOLD = 0.1
CHANGE_POINT_THRESHOLD = 0.2
SEASONALITY_MIN_POINTS = 12
SEASONALITY_THRESHOLD = 0.1
CYCLICAL_MIN_POINTS = 20
CYCLICAL_THRESHOLD = 0.3


def ols_slope(values: Sequence[float]) -> float:
    """Least-squares slope of ``values`` against their index."""
    n = len(values)
    if n < 2:
        return 0.0
    x = np.arange(n, dtype=float)
    y = np.asarray(values, dtype=float)
    denominator = n * float(np.dot(x, x)) - float(x.sum()) ** 2
    if denominator == 0:
        return 0.0
    return (n * float(np.dot(x, y)) - float(x.sum()) * float(y.sum())) / denominator


def _classify(slope: float) -> TrendDirection:
    if slope > TREND_THRESHOLD:
        return TrendDirection.INCREASING
    if slope < -TREND_THRESHOLD:
        return TrendDirection.DECREASING
    return TrendDirection.STABLE


def detect_trend(values: Sequence[float], timestamps: Sequence[datetime]) -> TrendAnalysis:
    n = len(values)
    if n < 3:
        return TrendAnalysis()

    slope = ols_slope(values)

    tail = list(values[int(n * 0.75) :])
    short_slope = (tail[-1] - tail[0]) / (len(tail) - 1) if len(tail) > 1 else 0.0

    return TrendAnalysis(
        long_term=_classify(slope),
        short_term=_classify(short_slope),
        slope=slope,
        change_points=detect_change_points(values, timestamps),
    )


def detect_change_points(
    values: Sequence[float], timestamps: Sequence[datetime]
) -> List[datetime]:
    window = max(3, len(values) // 10)
    points: List[datetime] = []
    for index in range(window, len(values) - window + 1):
        left = float(np.mean(values[index - window : index]))
        right = float(np.mean(values[index : index + window]))
        if left == 0:
            continue
        if abs(right - left) / abs(left) > CHANGE_POINT_THRESHOLD:
            points.append(timestamps[index])
    return points


def detect_seasonality(points: Sequence[DataPoint], unit: TimeUnit) -> SeasonalityAnalysis:
    if len(points) < SEASONALITY_MIN_POINTS or unit != TimeUnit.MONTH:
        return SeasonalityAnalysis()

    values = np.asarray([point.value for point in points], dtype=float)
    overall_mean = float(values.mean())
    total_variance = float(values.var())
    if total_variance == 0:
        return SeasonalityAnalysis(period="YEARLY")

    buckets: dict[int, List[float]] = {}
    for point in points:
        buckets.setdefault(point.timestamp.month, []).append(point.value)
    bucket_means = np.asarray([np.mean(bucket) for bucket in buckets.values()])
    month_variance = float(np.mean((bucket_means - overall_mean) ** 2))

    ratio = month_variance / total_variance
    detected = ratio > SEASONALITY_THRESHOLD
    return SeasonalityAnalysis(
        detected=detected,
        strength=min(ratio, 1.0),
        period="YEARLY",
        peaks=["Q4"] if detected else [],
        troughs=["Q1", "Q2"] if detected else [],
    )


def measure_volatility(
    values: Sequence[float], timestamps: Sequence[datetime]
) -> VolatilityAnalysis:
    if len(values) < 2:
        return VolatilityAnalysis()

    array = np.asarray(values, dtype=float)
    mean = float(array.mean())
    sigma = float(array.std())

    if mean == 0:
        cv = math.inf if sigma > 0 else 0.0
    else:
        cv = sigma / abs(mean)

    if cv > 0.3:
        level = VolatilityLevel.HIGH
    elif cv > 0.1:
        level = VolatilityLevel.MEDIUM
    else:
        level = VolatilityLevel.LOW

    periods = [
        timestamp
        for value, timestamp in zip(values, timestamps)
        if abs(value - mean) > 2 * sigma
    ]
    return VolatilityAnalysis(level=level, coefficient_of_variation=cv, periods=periods)


def detect_cycles(values: Sequence[float]) -> CyclicalAnalysis:
    n = len(values)
    if n < CYCLICAL_MIN_POINTS:
        return CyclicalAnalysis()

    array = np.asarray(values, dtype=float)
    centered = array - array.mean()
    variance = float(np.mean(centered**2))
    if variance == 0:
        return CyclicalAnalysis()

    best_period = 0
    best_correlation = 0.0
    period = 4
    while period < n / 4:
        correlation = float(np.mean(centered[:-period] * centered[period:])) / variance
        if abs(correlation) > abs(best_correlation):
            best_correlation = correlation
            best_period = period
        period += 1

    detected = abs(best_correlation) > CYCLICAL_THRESHOLD
    return CyclicalAnalysis(
        detected=detected,
        period=best_period if detected else 0,
        amplitude=abs(best_correlation) if detected else 0.0,
    )


class PatternAnalyzer:
    """Runs the four independent analyses over a prepared series."""

    def analyze(
        self, points: Sequence[DataPoint], unit: TimeUnit = TimeUnit.MONTH
    ) -> HistoricalPatterns:
        values = [point.value for point in points]
        timestamps = [point.timestamp for point in points]
        return HistoricalPatterns(
            trend=detect_trend(values, timestamps),
            seasonality=detect_seasonality(points, unit),
            volatility=measure_volatility(values, timestamps),
            cyclical=detect_cycles(values),
        )

"""
Simplified per-algorithm predictors.

Each predictor is a pure function of the prepared series and the 1-based
step ahead of the last observation. Values are clamped at zero.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Sequence

import numpy as np

from src.domain.entities.forecast import AlgorithmName
from src.domain.entities.prediction import AlgorithmOutput

Predictor = Callable[
    [Sequence[float], int, datetime, Mapping[str, Any]], AlgorithmOutput
]


def _fit_line(values: Sequence[float]) -> tuple[float, float, float]:
    n = len(values)
    x = np.arange(n, dtype=float)
    y = np.asarray(values, dtype=float)
    sum_x = float(x.sum())
    sum_y = float(y.sum())
    denominator = n * float(np.dot(x, x)) - sum_x**2
    slope = (n * float(np.dot(x, y)) - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n

    fitted = intercept + slope * x
    ss_res = float(np.sum((y - fitted) ** 2))
    ss_tot = float(np.sum((y - y.mean()) ** 2))
    r_squared = 1 - ss_res / ss_tot if ss_tot > 0 else 0.0
    return slope, intercept, r_squared


def predict_linear_regression(
    values: Sequence[float],
    step: int,
    target: datetime,
    parameters: Mapping[str, Any],
) -> AlgorithmOutput:
    if len(values) < 2:
        return AlgorithmOutput(value=values[0] if values else 0.0, confidence=0.5)

    slope, intercept, r_squared = _fit_line(values)
    value = intercept + slope * (len(values) - 1 + step)
    return AlgorithmOutput(value=max(0.0, value), confidence=max(0.3, r_squared))


def predict_arima(
    values: Sequence[float],
    step: int,
    target: datetime,
    parameters: Mapping[str, Any],
) -> AlgorithmOutput:
    p = max(1, int(parameters.get("p", 1)))
    d = max(0, int(parameters.get("d", 1)))

    # levels[k] holds the series differenced k times.
    levels: List[List[float]] = [list(values)]
    for _ in range(d):
        previous = levels[-1]
        levels.append([b - a for a, b in zip(previous, previous[1:])])

    if not levels[-1]:
        last = values[-1] if values else 0.0
        return AlgorithmOutput(value=max(0.0, last), confidence=0.5)

    for _ in range(step):
        recent = levels[-1][-p:]
        next_diff = (
            sum(v * (0.5 + 0.3 * idx / p) for idx, v in enumerate(recent)) / p
        )
        levels[-1].append(next_diff)
        for k in range(d - 1, -1, -1):
            levels[k].append(levels[k][-1] + levels[k + 1][-1])

    return AlgorithmOutput(value=max(0.0, levels[0][-1]), confidence=0.75)


def predict_exponential_smoothing(
    values: Sequence[float],
    step: int,
    target: datetime,
    parameters: Mapping[str, Any],
) -> AlgorithmOutput:
    if not values:
        return AlgorithmOutput(value=0.0, confidence=0.5)

    alpha = float(parameters.get("alpha", 0.3))
    smoothed = values[0]
    for value in values[1:]:
        smoothed = alpha * value + (1 - alpha) * smoothed
    return AlgorithmOutput(value=max(0.0, smoothed), confidence=0.7)


def predict_prophet_like(
    values: Sequence[float],
    step: int,
    target: datetime,
    parameters: Mapping[str, Any],
) -> AlgorithmOutput:
    trend = predict_linear_regression(values, step, target, {})
    multiplier = 1 + 0.1 * math.sin(2 * math.pi * (target.month - 1) / 12)
    return AlgorithmOutput(value=max(0.0, trend.value * multiplier), confidence=0.8)


def predict_ensemble(
    values: Sequence[float],
    step: int,
    target: datetime,
    parameters: Mapping[str, Any],
) -> AlgorithmOutput:
    outputs = [
        predict_linear_regression(values, step, target, {}),
        predict_arima(values, step, target, {"p": 1, "d": 1}),
        predict_exponential_smoothing(values, step, target, {"alpha": 0.3}),
        predict_prophet_like(values, step, target, {}),
    ]
    value = sum(output.value for output in outputs) / len(outputs)
    confidence = sum(output.confidence for output in outputs) / len(outputs)
    return AlgorithmOutput(value=max(0.0, value), confidence=min(0.9, confidence + 0.1))


PREDICTORS: Dict[AlgorithmName, Predictor] = {
    AlgorithmName.LINEAR_REGRESSION: predict_linear_regression,
    AlgorithmName.ARIMA: predict_arima,
    AlgorithmName.EXPONENTIAL_SMOOTHING: predict_exponential_smoothing,
    AlgorithmName.PROPHET_LIKE: predict_prophet_like,
    AlgorithmName.ENSEMBLE: predict_ensemble,
}


def predict_one(
    algorithm: AlgorithmName,
    values: Sequence[float],
    step: int,
    target: datetime,
    parameters: Mapping[str, Any],
) -> AlgorithmOutput:
    """Dispatch to the predictor registered for ``algorithm``."""
    return PREDICTORS[algorithm](values, step, target, parameters)

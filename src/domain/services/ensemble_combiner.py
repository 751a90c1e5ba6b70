"""
Domain Service - Ensemble Combiner

Merges per-model outputs into one prediction per period, enforces business
rules and decays confidence along the horizon.
"""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Sequence, Tuple

from src.domain.entities.forecast import BusinessRule, BusinessRuleType
from src.domain.entities.model import ForecastModel
from src.domain.entities.patterns import HistoricalPatterns, VolatilityLevel
from src.domain.entities.prediction import (
    AlgorithmOutput,
    ConfidenceInterval,
    ForecastPrediction,
)

Z_95 = 1.96
BASE_CONFIDENCE = 0.95
MAX_RELIABILITY = 0.95
HORIZON_FLOOR = 0.3
HORIZON_DECAY = 0.05

VOLATILITY_FACTORS: Dict[VolatilityLevel, float] = {
    VolatilityLevel.HIGH: 0.8,
    VolatilityLevel.MEDIUM: 0.9,
    VolatilityLevel.LOW: 1.0,
}


def parse_seasonal_factors(condition: str) -> Dict[int, float]:
    """Parse ``"Q1:0.85,Q4:1.15"`` into ``{1: 0.85, 4: 1.15}``.

    Raises:
        ValueError: If the condition is malformed
    """
    factors: Dict[int, float] = {}
    for chunk in condition.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        quarter, _, factor = chunk.partition(":")
        quarter = quarter.strip().upper()
        if quarter not in ("Q1", "Q2", "Q3", "Q4") or not factor:
            raise ValueError(f"Invalid seasonal adjustment entry '{chunk}'")
        value = float(factor)
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"Invalid seasonal adjustment factor '{factor}'")
        factors[int(quarter[1])] = value
    if not factors:
        raise ValueError("Seasonal adjustment condition is empty")
    return factors


def combine(
    period: datetime,
    outputs: Sequence[AlgorithmOutput],
    models: Sequence[ForecastModel],
) -> ForecastPrediction:
    """Accuracy-weighted combination of the outputs produced for one period."""
    if not outputs:
        return ForecastPrediction(
            period=period,
            predicted_value=0.0,
            confidence_interval=ConfidenceInterval(0.0, 0.0, 0.5),
            reliability=0.5,
        )

    bases = [model.weight_basis for model in models]
    total = sum(bases)
    if total > 0:
        weights = [basis / total for basis in bases]
    else:
        weights = [1.0 / len(outputs)] * len(outputs)

    value = sum(w * o.value for w, o in zip(weights, outputs))
    confidence = sum(w * o.confidence for w, o in zip(weights, outputs))
    std_error = math.sqrt(sum((o.value - value) ** 2 for o in outputs) / len(outputs))

    value = max(0.0, value)
    return ForecastPrediction(
        period=period,
        predicted_value=value,
        confidence_interval=ConfidenceInterval(
            lower=max(0.0, value - Z_95 * std_error),
            upper=value + Z_95 * std_error,
            confidence=BASE_CONFIDENCE,
        ),
        reliability=min(MAX_RELIABILITY, confidence),
    )


def _apply_rule(
    rule: BusinessRule, value: float, previous: float, period: datetime
) -> Tuple[float, float]:
    """Return the adjusted value and the multiplier applied to the interval."""
    if rule.type == BusinessRuleType.MIN_VALUE:
        return max(value, float(rule.condition)), 1.0
    if rule.type == BusinessRuleType.MAX_VALUE:
        return min(value, float(rule.condition)), 1.0
    if rule.type == BusinessRuleType.GROWTH_LIMIT:
        # No relative change is defined from a zero base.
        if previous == 0:
            return value, 1.0
        limit = abs(float(rule.condition)) * abs(previous)
        return min(max(value, previous - limit), previous + limit), 1.0
    if rule.type == BusinessRuleType.SEASONAL_ADJUSTMENT:
        quarter = (period.month - 1) // 3 + 1
        factor = parse_seasonal_factors(rule.condition).get(quarter, 1.0)
        return value * factor, factor
    return value, 1.0


def apply_rules(
    predictions: Sequence[ForecastPrediction],
    rules: Sequence[BusinessRule],
    last_observed: float,
) -> Tuple[List[ForecastPrediction], int]:
    """
    Apply enabled business rules to every period, in declared order.

    Growth limits are measured against the previous adjusted value, starting
    from the last observed value. A zero previous value leaves that period
    unconstrained.

    Returns:
        Tuple of (adjusted predictions, number of rules applied)
    """
    enabled = [rule for rule in rules if rule.enabled]
    if not enabled:
        return list(predictions), 0

    adjusted: List[ForecastPrediction] = []
    previous = last_observed
    for prediction in predictions:
        value = prediction.predicted_value
        lower = prediction.confidence_interval.lower
        upper = prediction.confidence_interval.upper
        for rule in enabled:
            value, scale = _apply_rule(rule, value, previous, prediction.period)
            lower *= scale
            upper *= scale

        adjusted.append(
            replace(
                prediction,
                predicted_value=value,
                confidence_interval=replace(
                    prediction.confidence_interval,
                    lower=max(0.0, min(lower, value)),
                    upper=max(upper, value),
                ),
            )
        )
        previous = value

    return adjusted, len(enabled)


def horizon_factor(index: int) -> float:
    return max(HORIZON_FLOOR, 1 - HORIZON_DECAY * index)


def decay_confidence(
    predictions: Sequence[ForecastPrediction], patterns: HistoricalPatterns
) -> List[ForecastPrediction]:
    """Scale confidence and reliability down with horizon index and volatility."""
    volatility = VOLATILITY_FACTORS[patterns.volatility.level]
    decayed: List[ForecastPrediction] = []
    for index, prediction in enumerate(predictions):
        factor = horizon_factor(index) * volatility
        decayed.append(
            replace(
                prediction,
                confidence_interval=replace(
                    prediction.confidence_interval,
                    confidence=prediction.confidence_interval.confidence * factor,
                ),
                reliability=prediction.reliability * factor,
            )
        )
    return decayed

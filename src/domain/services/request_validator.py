"""Domain service helpers for validating forecast and calibration requests."""

import math
from typing import Any, Dict, List, Optional

from src.domain.entities.errors import ForecastValidationError
from src.domain.entities.forecast import (
    BusinessRule,
    BusinessRuleType,
    CalibrationRequest,
    ForecastAlgorithm,
    ForecastRequest,
    TimeUnit,
)
from src.domain.services.ensemble_combiner import parse_seasonal_factors

MIN_HISTORICAL_POINTS = 3
MIN_CALIBRATION_POINTS = 2
SCENARIO_KEYS = ("base", "optimistic", "pessimistic")
MAX_ARIMA_ORDER = 12
MAX_ARIMA_DIFFERENCING = 2

MAX_HORIZON: Dict[TimeUnit, int] = {
    TimeUnit.DAY: 365,
    TimeUnit.WEEK: 104,
    TimeUnit.MONTH: 36,
    TimeUnit.QUARTER: 12,
    TimeUnit.YEAR: 5,
}

MIN_POINTS: Dict[TimeUnit, int] = {
    TimeUnit.DAY: 90,
    TimeUnit.WEEK: 26,
    TimeUnit.MONTH: 12,
    TimeUnit.QUARTER: 8,
    TimeUnit.YEAR: 3,
}


def _is_blank(value: str) -> bool:
    return not value or not value.strip()


def _integer_parameter(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _validate_parameters(algorithm: ForecastAlgorithm, errors: List[str]) -> None:
    prefix = f"Algorithm {algorithm.name.value} parameter"
    parameters = algorithm.parameters
    if "p" in parameters:
        p = _integer_parameter(parameters["p"])
        if p is None or not 1 <= p <= MAX_ARIMA_ORDER:
            errors.append(
                f"{prefix} 'p' must be an integer between 1 and {MAX_ARIMA_ORDER}."
            )
    if "d" in parameters:
        d = _integer_parameter(parameters["d"])
        if d is None or not 0 <= d <= MAX_ARIMA_DIFFERENCING:
            errors.append(
                f"{prefix} 'd' must be an integer between 0 and "
                f"{MAX_ARIMA_DIFFERENCING}."
            )
    if "alpha" in parameters:
        alpha = parameters["alpha"]
        if (
            isinstance(alpha, bool)
            or not isinstance(alpha, (int, float))
            or not math.isfinite(alpha)
            or not 0.0 < alpha <= 1.0
        ):
            errors.append(f"{prefix} 'alpha' must be a number in (0, 1].")


def _validate_rule(index: int, rule: BusinessRule, errors: List[str]) -> None:
    prefix = f"Business rule #{index} ({rule.type.value})"
    if rule.type == BusinessRuleType.SEASONAL_ADJUSTMENT:
        try:
            parse_seasonal_factors(rule.condition)
        except ValueError as exc:
            errors.append(f"{prefix} condition is invalid: {exc}.")
        return

    try:
        threshold = float(rule.condition)
    except (TypeError, ValueError):
        errors.append(f"{prefix} condition must be a number.")
        return
    if not math.isfinite(threshold) or threshold < 0:
        errors.append(f"{prefix} condition must be a non-negative number.")


def validate_forecast_request(request: ForecastRequest) -> None:
    """Validate a forecast request before any derived entity is produced.

    Raises:
        ForecastValidationError: If one or more validation rules fail.
    """

    errors: List[str] = []

    if _is_blank(request.target_metric):
        errors.append("Target metric is required.")
    if _is_blank(request.organization_id):
        errors.append("Organization ID is required.")
    if _is_blank(request.owner_id):
        errors.append("Owner ID is required.")

    points = len(request.historical_data)
    if points < MIN_HISTORICAL_POINTS:
        errors.append(
            f"At least {MIN_HISTORICAL_POINTS} historical data points are required, "
            f"got {points}."
        )
    for idx, point in enumerate(request.historical_data, start=1):
        if not math.isfinite(point.value):
            errors.append(f"Historical data point #{idx} has a non-finite value.")
        if not 0.0 <= point.metadata.confidence <= 1.0:
            errors.append(
                f"Historical data point #{idx} confidence must be between 0 and 1."
            )

    horizon = request.forecast_horizon
    if horizon.periods <= 0:
        errors.append("Forecast horizon must be positive.")
    elif horizon.periods > MAX_HORIZON[horizon.unit]:
        errors.append(
            f"Forecast horizon of {horizon.periods} {horizon.unit.value} periods "
            f"exceeds the maximum of {MAX_HORIZON[horizon.unit]}."
        )

    configuration = request.model_configuration
    if not 0.0 < configuration.confidence_level < 1.0:
        errors.append("Confidence level must be between 0 and 1 (exclusive).")
    for algorithm in configuration.algorithms:
        if algorithm.weight < 0:
            errors.append(f"Algorithm {algorithm.name.value} weight must be >= 0.")
        _validate_parameters(algorithm, errors)
    for idx, rule in enumerate(configuration.business_rules, start=1):
        _validate_rule(idx, rule, errors)

    probabilities = request.preferences.scenario_probabilities or {}
    for key, probability in probabilities.items():
        if key.lower() not in SCENARIO_KEYS:
            errors.append(
                f"Unknown scenario '{key}'; expected one of {', '.join(SCENARIO_KEYS)}."
            )
        elif not 0.0 <= probability <= 1.0:
            errors.append(f"Scenario '{key}' probability must be between 0 and 1.")

    if errors:
        raise ForecastValidationError(errors)


def validate_calibration_request(request: CalibrationRequest) -> None:
    """Validate actual-vs-predicted pairs used for drift detection.

    Raises:
        ForecastValidationError: If one or more validation rules fail.
    """

    errors: List[str] = []

    if _is_blank(request.organization_id):
        errors.append("Organization ID is required.")
    if len(request.data) < MIN_CALIBRATION_POINTS:
        errors.append(
            f"At least {MIN_CALIBRATION_POINTS} calibration data points are "
            f"required, got {len(request.data)}."
        )
    for idx, point in enumerate(request.data, start=1):
        for label, value in (
            ("actual value", point.actual_value),
            ("predicted value", point.predicted_value),
        ):
            if not math.isfinite(value) or value < 0:
                errors.append(
                    f"Calibration point #{idx} {label} must be a non-negative number."
                )
    if request.data and all(point.actual_value == 0 for point in request.data):
        errors.append("Calibration actual values must not all be zero.")

    if errors:
        raise ForecastValidationError(errors)

from __future__ import annotations

import math
from datetime import datetime, timezone

import pytest

from src.domain.entities.errors import ForecastValidationError
from src.domain.entities.forecast import (
    AlgorithmName,
    BusinessRule,
    BusinessRuleType,
    CalibrationPoint,
    CalibrationRequest,
    ForecastAlgorithm,
    ForecastPreferences,
    ModelConfiguration,
    TimeUnit,
)
from src.domain.services.request_validator import (
    validate_calibration_request,
    validate_forecast_request,
)
from tests.conftest import make_request

STAMP = datetime(2023, 1, 1, tzinfo=timezone.utc)


def _errors(request) -> list:
    with pytest.raises(ForecastValidationError) as exc_info:
        validate_forecast_request(request)
    return exc_info.value.errors


def test_valid_request_passes() -> None:
    validate_forecast_request(make_request())


def test_three_points_is_enough() -> None:
    validate_forecast_request(make_request([1.0, 2.0, 3.0]))


def test_collects_every_violation() -> None:
    request = make_request(
        [1.0, math.nan],
        target_metric=" ",
        organization_id="",
        periods=0,
    )

    errors = _errors(request)

    assert "Target metric is required." in errors
    assert "Organization ID is required." in errors
    assert "At least 3 historical data points are required, got 2." in errors
    assert "Historical data point #2 has a non-finite value." in errors
    assert "Forecast horizon must be positive." in errors


@pytest.mark.parametrize(
    ("unit", "periods"),
    [
        (TimeUnit.DAY, 366),
        (TimeUnit.WEEK, 105),
        (TimeUnit.MONTH, 37),
        (TimeUnit.QUARTER, 13),
        (TimeUnit.YEAR, 6),
    ],
)
def test_horizon_limit_per_unit(unit: TimeUnit, periods: int) -> None:
    errors = _errors(make_request(periods=periods, unit=unit))

    assert len(errors) == 1
    assert "exceeds the maximum" in errors[0]


@pytest.mark.parametrize(
    ("rule", "fragment"),
    [
        (BusinessRule(BusinessRuleType.MIN_VALUE, "abc"), "must be a number"),
        (BusinessRule(BusinessRuleType.MAX_VALUE, "-5"), "non-negative"),
        (BusinessRule(BusinessRuleType.GROWTH_LIMIT, "inf"), "non-negative"),
        (BusinessRule(BusinessRuleType.SEASONAL_ADJUSTMENT, "Q9:1"), "is invalid"),
    ],
)
def test_invalid_business_rules(rule: BusinessRule, fragment: str) -> None:
    request = make_request(
        model_configuration=ModelConfiguration(business_rules=[rule])
    )

    errors = _errors(request)

    assert errors[0].startswith(f"Business rule #1 ({rule.type.value})")
    assert fragment in errors[0]


@pytest.mark.parametrize(
    ("algorithm", "parameters", "fragment"),
    [
        (AlgorithmName.ARIMA, {"p": "two"}, "'p' must be an integer between 1 and 12"),
        (AlgorithmName.ARIMA, {"p": 500}, "'p' must be an integer between 1 and 12"),
        (AlgorithmName.ARIMA, {"p": True}, "'p' must be an integer"),
        (AlgorithmName.ARIMA, {"d": -1}, "'d' must be an integer between 0 and 2"),
        (AlgorithmName.ARIMA, {"d": 1.5}, "'d' must be an integer"),
        (
            AlgorithmName.EXPONENTIAL_SMOOTHING,
            {"alpha": 1.5},
            "'alpha' must be a number in (0, 1]",
        ),
        (
            AlgorithmName.EXPONENTIAL_SMOOTHING,
            {"alpha": 0},
            "'alpha' must be a number in (0, 1]",
        ),
        (
            AlgorithmName.EXPONENTIAL_SMOOTHING,
            {"alpha": "high"},
            "'alpha' must be a number in (0, 1]",
        ),
    ],
)
def test_invalid_algorithm_parameters(
    algorithm: AlgorithmName, parameters: dict, fragment: str
) -> None:
    request = make_request(
        model_configuration=ModelConfiguration(
            algorithms=[ForecastAlgorithm(algorithm, parameters=parameters)]
        )
    )

    errors = _errors(request)

    assert len(errors) == 1
    assert errors[0].startswith(f"Algorithm {algorithm.value} parameter")
    assert fragment in errors[0]


def test_valid_algorithm_parameters_pass() -> None:
    request = make_request(
        model_configuration=ModelConfiguration(
            algorithms=[
                ForecastAlgorithm(AlgorithmName.ARIMA, parameters={"p": 3, "d": 2.0}),
                ForecastAlgorithm(
                    AlgorithmName.EXPONENTIAL_SMOOTHING, parameters={"alpha": 1}
                ),
            ]
        )
    )

    validate_forecast_request(request)


def test_confidence_level_and_scenario_probabilities() -> None:
    request = make_request(
        model_configuration=ModelConfiguration(confidence_level=1.0),
        preferences=ForecastPreferences(
            scenario_probabilities={"worst": 0.1, "Base": 1.5}
        ),
    )

    errors = _errors(request)

    assert errors == [
        "Confidence level must be between 0 and 1 (exclusive).",
        "Unknown scenario 'worst'; expected one of base, optimistic, pessimistic.",
        "Scenario 'Base' probability must be between 0 and 1.",
    ]


def test_validation_error_message_names_each_violation() -> None:
    with pytest.raises(ForecastValidationError) as exc_info:
        validate_forecast_request(make_request([1.0], owner_id=""))

    assert "Owner ID is required." in exc_info.value.message
    assert "At least 3 historical data points" in exc_info.value.message
    assert exc_info.value.details["errors"] == exc_info.value.errors


def test_calibration_request_validation() -> None:
    valid = CalibrationRequest(
        organization_id="org-7",
        data=[
            CalibrationPoint(STAMP, 100.0, 110.0),
            CalibrationPoint(STAMP, 200.0, 190.0),
        ],
    )
    validate_calibration_request(valid)

    with pytest.raises(ForecastValidationError) as exc_info:
        validate_calibration_request(
            CalibrationRequest(
                organization_id="",
                data=[CalibrationPoint(STAMP, 0.0, -1.0)],
            )
        )

    assert exc_info.value.errors == [
        "Organization ID is required.",
        "At least 2 calibration data points are required, got 1.",
        "Calibration point #1 predicted value must be a non-negative number.",
        "Calibration actual values must not all be zero.",
    ]

"""Domain service deriving risk factors, sensitivities and early warnings."""

from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence

import numpy as np

from src.domain.entities.forecast import ForecastRequest
from src.domain.entities.patterns import HistoricalPatterns, VolatilityLevel
from src.domain.entities.prediction import ForecastPrediction, RiskLevel
from src.domain.entities.risk import (
    EarlyWarning,
    ImpactLevel,
    RiskAssessment,
    RiskFactor,
    RiskFactorType,
    SensitivityResult,
    WarningTrend,
)

QUALITY_RISK_THRESHOLD = 0.8
COMPLEXITY_THRESHOLD = 3


def prediction_risk_level(value: float, history: Sequence[float]) -> RiskLevel:
    """Classify a predicted value by its z-score against the history."""
    array = np.asarray(history, dtype=float)
    sigma = float(array.std()) if array.size else 0.0
    if sigma == 0:
        return RiskLevel.LOW

    z_score = abs(value - float(array.mean())) / sigma
    if z_score > 3:
        return RiskLevel.CRITICAL
    if z_score > 2:
        return RiskLevel.HIGH
    if z_score > 1:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def tag_risk_levels(
    predictions: Sequence[ForecastPrediction], history: Sequence[float]
) -> List[ForecastPrediction]:
    return [
        replace(p, risk_level=prediction_risk_level(p.predicted_value, history))
        for p in predictions
    ]


class RiskEngine:
    def assess(
        self,
        patterns: HistoricalPatterns,
        request: ForecastRequest,
        quality_score: float,
        best_mape: float,
    ) -> RiskAssessment:
        factors = self._risk_factors(patterns, request, quality_score)

        high_impact = sum(1 for factor in factors if factor.impact == ImpactLevel.HIGH)
        if high_impact >= 2:
            overall = RiskLevel.HIGH
        elif high_impact == 1:
            overall = RiskLevel.MEDIUM
        else:
            overall = RiskLevel.LOW

        risk_score = (
            sum(factor.probability for factor in factors) / len(factors)
            if factors
            else 0.0
        )

        return RiskAssessment(
            overall_risk=overall,
            risk_score=risk_score,
            risk_factors=factors,
            sensitivity_analysis=self._sensitivity(patterns),
            early_warning_indicators=self._early_warnings(quality_score, best_mape),
        )

    @staticmethod
    def _risk_factors(
        patterns: HistoricalPatterns,
        request: ForecastRequest,
        quality_score: float,
    ) -> List[RiskFactor]:
        factors: List[RiskFactor] = []

        if quality_score < QUALITY_RISK_THRESHOLD:
            factors.append(
                RiskFactor(
                    name="Data Quality Risk",
                    type=RiskFactorType.DATA,
                    probability=1 - quality_score,
                    impact=ImpactLevel.HIGH,
                    description="Historical data quality may affect forecast accuracy",
                    mitigation=[
                        "Improve data collection processes",
                        "Validate data sources",
                    ],
                    monitoring=["Data quality metrics", "Source verification"],
                )
            )

        if patterns.volatility.level == VolatilityLevel.HIGH:
            factors.append(
                RiskFactor(
                    name="High Volatility Risk",
                    type=RiskFactorType.MARKET,
                    probability=0.7,
                    impact=ImpactLevel.HIGH,
                    description="High historical volatility increases forecast uncertainty",
                    mitigation=["Scenario planning", "Regular forecast updates"],
                    monitoring=["Volatility metrics", "Deviation tracking"],
                )
            )

        if len(request.model_configuration.algorithms) > COMPLEXITY_THRESHOLD:
            factors.append(
                RiskFactor(
                    name="Model Complexity Risk",
                    type=RiskFactorType.MODEL,
                    probability=0.4,
                    impact=ImpactLevel.MEDIUM,
                    description="Complex models may overfit to historical data",
                    mitigation=[
                        "Cross-validation",
                        "Ensemble methods",
                        "Regular recalibration",
                    ],
                    monitoring=["Model performance metrics", "Prediction accuracy"],
                )
            )

        if request.market_threats:
            factors.append(
                RiskFactor(
                    name="External Market Risk",
                    type=RiskFactorType.EXTERNAL,
                    probability=0.5,
                    impact=ImpactLevel.HIGH,
                    description="External market factors may disrupt predictions",
                    mitigation=["Market monitoring", "Contingency planning"],
                    monitoring=["Market indicators", "Competitor analysis"],
                )
            )

        return factors

    @staticmethod
    def _sensitivity(patterns: HistoricalPatterns) -> List[SensitivityResult]:
        # Elasticities are fixed coefficients, not estimated from the series.
        return [
            SensitivityResult(
                variable="Historical Trend",
                impact_on_forecast=0.3,
                critical_thresholds=(-0.1, 0.1),
                elasticity=1.2,
                business_relevance="Core driver of forecast accuracy",
            ),
            SensitivityResult(
                variable="Seasonality Strength",
                impact_on_forecast=patterns.seasonality.strength,
                critical_thresholds=(0.1, 0.3),
                elasticity=0.8,
                business_relevance="Important for resource planning",
            ),
        ]

    @staticmethod
    def _early_warnings(quality_score: float, best_mape: float) -> List[EarlyWarning]:
        accuracy = 1 - best_mape
        degraded = quality_score < QUALITY_RISK_THRESHOLD
        return [
            EarlyWarning(
                indicator="Forecast Accuracy",
                current_value=accuracy,
                yellow_threshold=0.8,
                red_threshold=0.7,
                trend=WarningTrend.STABLE,
                action_required=accuracy < 0.8,
                recommended_response=["Monitor closely", "Update if accuracy drops"],
            ),
            EarlyWarning(
                indicator="Data Quality Score",
                current_value=quality_score,
                yellow_threshold=0.8,
                red_threshold=0.6,
                trend=WarningTrend.DETERIORATING if degraded else WarningTrend.STABLE,
                action_required=degraded,
                recommended_response=(
                    ["Improve data collection", "Validate sources"]
                    if degraded
                    else ["Maintain current processes"]
                ),
            ),
        ]

"""
Domain Service - Insight Builder

Rule-based narrative layer over a forecast: insights, recommendations,
confidence metrics and the executive summary.
"""

from __future__ import annotations

from typing import List, Optional, Sequence
from uuid import uuid4

from src.domain.entities.forecast import ForecastRequest
from src.domain.entities.patterns import (
    HistoricalPatterns,
    TrendDirection,
    VolatilityLevel,
)
from src.domain.entities.prediction import ForecastPrediction
from src.domain.entities.result import (
    ConfidenceMetrics,
    ExecutiveSummary,
    ForecastInsight,
    ForecastRecommendation,
    InsightType,
    RecommendationType,
    Significance,
    TemporalConfidence,
)

MAX_INSIGHTS = 5
MAX_RECOMMENDATIONS = 5
NARRATIVE_MIN_LENGTH = 50
NARRATIVE_MAX_LENGTH = 200
GROWTH_THRESHOLD = 0.1
QUALITY_THRESHOLD = 0.8


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


def build_insight_prompt(
    request: ForecastRequest,
    predictions: Sequence[ForecastPrediction],
    patterns: HistoricalPatterns,
) -> str:
    average = (
        sum(p.predicted_value for p in predictions) / len(predictions)
        if predictions
        else 0.0
    )
    return "\n".join(
        [
            "Analyze this forecast and provide business insights.",
            f"Target Metric: {request.target_metric}",
            f"Forecast Type: {request.forecast_type.value}",
            f"Average Prediction: {average:.2f}",
            f"Trend: {patterns.trend.long_term.value}",
            f"Seasonality: {'Yes' if patterns.seasonality.detected else 'No'}",
            f"Volatility: {patterns.volatility.level.value}",
            "Provide 1-2 key insights covering strategic implications, "
            "operational considerations, risk factors and opportunities.",
        ]
    )


def build_insights(
    patterns: HistoricalPatterns, request: ForecastRequest
) -> List[ForecastInsight]:
    insights: List[ForecastInsight] = []
    metric = request.target_metric

    trend = patterns.trend.long_term
    if trend != TrendDirection.STABLE:
        increasing = trend == TrendDirection.INCREASING
        direction = trend.value.lower()
        insights.append(
            ForecastInsight(
                id=_new_id("trend_insight"),
                type=InsightType.TREND,
                title=f"{direction.capitalize()} trend detected",
                description=(
                    f"The forecast shows a {direction} trend in {metric} "
                    "over the forecast period"
                ),
                significance=Significance.HIGH if increasing else Significance.MEDIUM,
                confidence=0.8,
                suggested_actions=(
                    ["Plan for capacity expansion", "Prepare resource allocation"]
                    if increasing
                    else [
                        "Investigate decline factors",
                        "Develop improvement strategies",
                    ]
                ),
                urgency=Significance.MEDIUM if increasing else Significance.HIGH,
                timeline="1-3 months",
            )
        )

    seasonality = patterns.seasonality
    if seasonality.detected:
        insights.append(
            ForecastInsight(
                id=_new_id("seasonality_insight"),
                type=InsightType.SEASONALITY,
                title="Seasonal patterns identified",
                description=(
                    f"Strong {seasonality.period.lower()} seasonality detected with "
                    f"{seasonality.strength * 100:.1f}% strength"
                ),
                significance=(
                    Significance.HIGH if seasonality.strength > 0.3 else Significance.MEDIUM
                ),
                confidence=seasonality.strength,
                suggested_actions=[
                    "Plan seasonal resource allocation",
                    "Develop seasonal marketing strategies",
                    "Prepare for peak/trough periods",
                ],
                timeline="Ongoing seasonal planning",
            )
        )

    if patterns.volatility.level == VolatilityLevel.HIGH:
        insights.append(
            ForecastInsight(
                id=_new_id("volatility_insight"),
                type=InsightType.ANOMALY,
                title="High volatility detected",
                description=(
                    f"{metric} shows high volatility, increasing forecast uncertainty"
                ),
                significance=Significance.HIGH,
                confidence=0.75,
                suggested_actions=[
                    "Investigate volatility causes",
                    "Implement risk management strategies",
                    "Consider scenario planning",
                ],
                urgency=Significance.HIGH,
                timeline="Immediate attention required",
            )
        )

    return insights[:MAX_INSIGHTS]


def narrative_insight(text: str, confidence: float) -> Optional[ForecastInsight]:
    """Wrap generated text as an insight, ignoring short or empty responses."""
    text = (text or "").strip()
    if len(text) <= NARRATIVE_MIN_LENGTH:
        return None
    if len(text) > NARRATIVE_MAX_LENGTH:
        text = text[:NARRATIVE_MAX_LENGTH] + "..."
    return ForecastInsight(
        id=_new_id("narrative_insight"),
        type=InsightType.EXTERNAL_IMPACT,
        title="Generated Strategic Insight",
        description=text,
        significance=Significance.MEDIUM,
        confidence=max(0.0, min(1.0, confidence)),
        suggested_actions=["Review strategic plan", "Assess operational readiness"],
        timeline="Next planning cycle",
    )


def build_recommendations(
    predictions: Sequence[ForecastPrediction],
    insights: Sequence[ForecastInsight],
    quality_score: float,
) -> List[ForecastRecommendation]:
    recommendations: List[ForecastRecommendation] = []

    first = predictions[0].predicted_value if predictions else 0.0
    last = predictions[-1].predicted_value if predictions else 0.0
    change = (last - first) / first if first else 0.0

    if change > GROWTH_THRESHOLD:
        recommendations.append(
            ForecastRecommendation(
                id=_new_id("growth_strategy"),
                type=RecommendationType.STRATEGIC,
                title="Prepare for Growth",
                description=(
                    "Forecast indicates significant growth - prepare for increased demand"
                ),
                priority=Significance.HIGH,
                rationale=f"Forecast shows {change * 100:.1f}% growth over the period",
                timeline="3-6 months",
                milestones=[
                    "Capacity assessment complete",
                    "Hiring plan finalized",
                    "Resource allocation approved",
                ],
                kpis=["Team utilization", "Client satisfaction", "Revenue per employee"],
            )
        )
    elif change < -GROWTH_THRESHOLD:
        recommendations.append(
            ForecastRecommendation(
                id=_new_id("efficiency_focus"),
                type=RecommendationType.OPERATIONAL,
                title="Focus on Efficiency",
                description=(
                    "Forecast indicates decline - focus on operational efficiency"
                ),
                priority=Significance.HIGH,
                rationale=(
                    f"Forecast shows {abs(change) * 100:.1f}% decline over the period"
                ),
                timeline="1-3 months",
                milestones=[
                    "Process analysis complete",
                    "Efficiency improvements identified",
                    "Implementation plan approved",
                ],
                kpis=["Cost per delivery", "Process efficiency", "Profit margin"],
            )
        )

    recommendations.append(
        ForecastRecommendation(
            id=_new_id("monitoring_system"),
            type=RecommendationType.MONITORING,
            title="Implement Forecast Monitoring",
            description=(
                "Set up systematic monitoring to track forecast accuracy and triggers"
            ),
            priority=Significance.MEDIUM,
            rationale="Regular monitoring enables early detection of forecast deviations",
            timeline="1-2 months",
            milestones=[
                "Monitoring framework designed",
                "Dashboard implemented",
                "Alert system activated",
            ],
            kpis=["Forecast accuracy", "Response time to deviations"],
        )
    )

    if quality_score < QUALITY_THRESHOLD:
        recommendations.append(
            ForecastRecommendation(
                id=_new_id("data_quality"),
                type=RecommendationType.DATA_QUALITY,
                title="Improve Historical Data Quality",
                description="Review data collection for gaps, outliers and stale records",
                priority=Significance.MEDIUM,
                rationale=f"Data quality score is {quality_score:.2f}",
                timeline="1-2 months",
                milestones=["Data audit complete", "Collection gaps closed"],
                kpis=["Data quality score", "Missing periods"],
            )
        )

    high = [
        insight
        for insight in insights
        if insight.significance in (Significance.HIGH, Significance.CRITICAL)
        and insight.is_actionable
    ]
    for insight in high[:2]:
        recommendations.append(
            ForecastRecommendation(
                id=f"risk_mitigation_{insight.id}",
                type=RecommendationType.RISK_MITIGATION,
                title=f"Address {insight.title}",
                description=(
                    f"Mitigate risks identified in forecast analysis: {insight.title}"
                ),
                priority=(
                    Significance.CRITICAL
                    if insight.urgency == Significance.CRITICAL
                    else Significance.HIGH
                ),
                rationale=insight.description,
                timeline=insight.timeline,
                milestones=list(insight.suggested_actions[:3]),
                kpis=["Risk indicator metrics", "Mitigation effectiveness"],
            )
        )

    return recommendations[:MAX_RECOMMENDATIONS]


def build_confidence_metrics(
    *,
    best_mape: float,
    quality_score: float,
    patterns: HistoricalPatterns,
    request: ForecastRequest,
    penalty: float = 0.0,
    cap: Optional[float] = None,
) -> ConfidenceMetrics:
    pattern_confidence = 0.9 if patterns.seasonality.detected else 0.7
    overall = min(0.95, ((1 - best_mape) + quality_score + pattern_confidence) / 3)
    overall -= penalty
    if cap is not None:
        overall = min(overall, cap)
    overall = max(0.0, min(1.0, overall))

    volatility = {
        VolatilityLevel.HIGH: 0.4,
        VolatilityLevel.MEDIUM: 0.2,
        VolatilityLevel.LOW: 0.1,
    }[patterns.volatility.level]

    return ConfidenceMetrics(
        overall_confidence=overall,
        temporal=TemporalConfidence(
            near_term=min(0.95, overall + 0.1),
            medium_term=overall,
            long_term=max(0.3, overall - 0.2),
        ),
        factor_contribution={
            "historical_data": quality_score,
            "trend_analysis": (
                0.8 if patterns.trend.long_term != TrendDirection.STABLE else 0.6
            ),
            "seasonal_patterns": patterns.seasonality.strength,
            "external_factors": 0.7 if request.contextual_data else 0.4,
            "business_intelligence": 0.6,
        },
        uncertainty_factors={
            "data_quality": 1 - quality_score,
            "model_complexity": min(
                0.3, len(request.model_configuration.algorithms) * 0.05
            ),
            "external_volatility": volatility,
            "business_changes": 0.2,
        },
    )


def _confidence_level(overall: float) -> str:
    if overall > 0.8:
        return "HIGH"
    if overall > 0.6:
        return "MEDIUM"
    return "LOW"


def build_executive_summary(
    request: ForecastRequest,
    predictions: Sequence[ForecastPrediction],
    insights: Sequence[ForecastInsight],
    recommendations: Sequence[ForecastRecommendation],
    confidence: ConfidenceMetrics,
) -> ExecutiveSummary:
    first = predictions[0].predicted_value if predictions else 0.0
    last = predictions[-1].predicted_value if predictions else 0.0
    if last > first:
        primary_trend = "increasing"
    elif last < first:
        primary_trend = "decreasing"
    else:
        primary_trend = "stable"

    average = (
        sum(p.predicted_value for p in predictions) / len(predictions)
        if predictions
        else 0.0
    )
    uncertainty = confidence.uncertainty_factors
    risk_factors = [
        label
        for label, flagged in (
            ("Data quality concerns", uncertainty.get("data_quality", 0) > 0.3),
            ("High market volatility", uncertainty.get("external_volatility", 0) > 0.3),
            ("Model complexity risks", uncertainty.get("model_complexity", 0) > 0.2),
        )
        if flagged
    ]

    return ExecutiveSummary(
        key_predictions=[
            f"{request.target_metric} forecast shows {primary_trend} trend",
            f"Average predicted value: {average:.2f}",
            f"Forecast confidence: {confidence.overall_confidence * 100:.1f}%",
        ],
        confidence_level=_confidence_level(confidence.overall_confidence),
        primary_trend=primary_trend,
        critical_insights=[insight.title for insight in insights[:3]],
        action_priorities=[rec.title for rec in recommendations[:3]],
        risk_factors=risk_factors,
    )

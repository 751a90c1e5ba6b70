"""Domain service producing base, optimistic and pessimistic scenarios."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence

from src.domain.entities.prediction import ForecastPrediction
from src.domain.entities.risk import ScenarioAnalysis, ScenarioImpact


@dataclass(slots=True, frozen=True)
class ScenarioPolicy:
    key: str
    name: str
    description: str
    probability: float
    value_multiplier: float
    lower_multiplier: float
    upper_multiplier: float
    assumptions: tuple
    impact: ScenarioImpact


SCENARIO_POLICIES: tuple = (
    ScenarioPolicy(
        key="base",
        name="Base Case",
        description="Most likely scenario based on current trends and patterns",
        probability=0.6,
        value_multiplier=1.0,
        lower_multiplier=1.0,
        upper_multiplier=1.0,
        assumptions=(
            "Current trends continue",
            "No major market disruptions",
            "Existing business model unchanged",
        ),
        impact=ScenarioImpact(
            revenue_impact=0.0,
            operational_impact="Normal operations expected",
            strategic_implication="Continue current strategy",
        ),
    ),
    ScenarioPolicy(
        key="optimistic",
        name="Optimistic Case",
        description="Favorable conditions lead to better than expected performance",
        probability=0.2,
        value_multiplier=1.2,
        lower_multiplier=1.1,
        upper_multiplier=1.3,
        assumptions=(
            "Market expansion opportunities",
            "Successful strategic initiatives",
            "Improved operational efficiency",
        ),
        impact=ScenarioImpact(
            revenue_impact=0.2,
            operational_impact="Capacity constraints possible",
            strategic_implication="Accelerate growth investments",
        ),
    ),
    ScenarioPolicy(
        key="pessimistic",
        name="Pessimistic Case",
        description="Challenging conditions lead to underperformance",
        probability=0.2,
        value_multiplier=0.8,
        lower_multiplier=0.7,
        upper_multiplier=0.9,
        assumptions=(
            "Economic downturn",
            "Increased competition",
            "Operational challenges",
        ),
        impact=ScenarioImpact(
            revenue_impact=-0.2,
            operational_impact="Cost reduction measures needed",
            strategic_implication="Focus on efficiency and retention",
        ),
    ),
)


def _scale(prediction: ForecastPrediction, policy: ScenarioPolicy) -> ForecastPrediction:
    if policy.value_multiplier == 1.0:
        return prediction
    interval = prediction.confidence_interval
    return replace(
        prediction,
        predicted_value=prediction.predicted_value * policy.value_multiplier,
        confidence_interval=replace(
            interval,
            lower=interval.lower * policy.lower_multiplier,
            upper=interval.upper * policy.upper_multiplier,
        ),
    )


class ScenarioBuilder:
    """Fixed multiplicative scenario policy over the combined predictions."""

    def build(
        self,
        predictions: Sequence[ForecastPrediction],
        probabilities: Optional[Dict[str, float]] = None,
    ) -> List[ScenarioAnalysis]:
        overrides = {key.lower(): value for key, value in (probabilities or {}).items()}
        return [
            ScenarioAnalysis(
                name=policy.name,
                description=policy.description,
                probability=overrides.get(policy.key, policy.probability),
                assumptions=list(policy.assumptions),
                predictions=[_scale(p, policy) for p in predictions],
                impact=policy.impact,
            )
            for policy in SCENARIO_POLICIES
        ]

"""
Combined-Scenario Calculator.

Joint impact of a risk subset over the schedulable activities affected by
EVERY risk in the subset (intersection, not union).

    combinedTimeImpactPercent = min(200, Σ timeImpactPercent)
    combinedCostImpactPercent = min(200, Σ costImpactPercent)
    averageProbability        = mean probability of the subset
    combinedAddedDays         = Σ duration(common) × combinedTimePercent / 100
    combinedExpectedTime      = combinedAddedDays × averageProbability / 100
    (cost likewise)

An empty intersection yields a zeroed scenario.
"""

from itertools import combinations
from typing import Optional, Sequence

import structlog

from riskbehavior.config import settings
from riskbehavior.engine.impact import activity_cost, activity_duration
from riskbehavior.schemas.inputs import Activity, ActivityLevel, Risk
from riskbehavior.schemas.outputs import CombinedScenario

logger = structlog.get_logger(__name__)


class ScenarioCalculator:
    """Compute combined scenarios for risk subsets."""

    def __init__(self, impact_cap: Optional[float] = None):
        self.impact_cap = settings.combined_impact_cap if impact_cap is None else impact_cap

    def combine(
        self,
        risk_ids: Sequence[str],
        risks: Sequence[Risk],
        activities: Sequence[Activity],
    ) -> CombinedScenario:
        wanted = set(risk_ids)
        selected = [r for r in risks if r.id in wanted]
        risk_ids = list(risk_ids)

        if not selected:
            return CombinedScenario(risk_ids=risk_ids)

        affected_sets = [set(r.affected_activities) for r in selected]
        common = [
            a for a in activities
            if a.level == ActivityLevel.ACTIVITY and all(a.id in s for s in affected_sets)
        ]
        if not common:
            logger.debug("combined_scenario_no_common_activities", risk_ids=risk_ids)
            return CombinedScenario(risk_ids=risk_ids)

        time_percent = min(self.impact_cap, sum(r.time_impact_percent for r in selected))
        cost_percent = min(self.impact_cap, sum(r.cost_impact_percent for r in selected))

        duration_sum = float(sum(activity_duration(a) for a in common))
        cost_sum = float(sum(activity_cost(a) for a in common))
        avg_probability = sum(r.probability for r in selected) / len(selected)

        added_days = duration_sum * time_percent / 100
        added_cost = cost_sum * cost_percent / 100

        return CombinedScenario(
            risk_ids=risk_ids,
            combined_time_impact_percent=time_percent,
            combined_cost_impact_percent=cost_percent,
            combined_expected_time_impact=added_days * avg_probability / 100,
            combined_expected_cost_impact=added_cost * avg_probability / 100,
            common_activities=[a.id for a in common],
            affected_duration_sum=duration_sum,
            affected_cost_sum=cost_sum,
            average_probability=avg_probability,
            combined_added_days=added_days,
            combined_added_cost=added_cost,
        )

    def build_scenarios(
        self,
        top_risk_ids: Sequence[str],
        risks: Sequence[Risk],
        activities: Sequence[Activity],
    ) -> list[CombinedScenario]:
        """
        Every pair of the selected risks, then all of them together when
        three or more were selected.
        """
        ids = list(top_risk_ids)
        if len(ids) < 2:
            return []

        scenarios = [self.combine(list(pair), risks, activities) for pair in combinations(ids, 2)]
        if len(ids) >= 3:
            scenarios.append(self.combine(ids, risks, activities))

        logger.debug("combined_scenarios_built", n_scenarios=len(scenarios), risk_ids=ids)
        return scenarios


def calculate_combined_impact(
    risk_ids: Sequence[str],
    risks: Sequence[Risk],
    activities: Sequence[Activity],
) -> CombinedScenario:
    """Combined scenario with default settings."""
    return ScenarioCalculator().combine(risk_ids, risks, activities)

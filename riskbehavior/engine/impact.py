"""
Single-Risk Impact Calculator.

Two explicit stages so that every risk is scored on the same scale:

1. compute_metrics(risk, ...) → RiskMetrics
   Raw impacts, sensitivity inputs and network/structure factors.
2. score(metrics, maxima) → behavior score
   Normalises expected impacts against roster-wide maxima.

Formulas:
    addedDays          = affectedDurationSum × timeImpactPercent / 100
    expectedTimeImpact = addedDays × probability / 100
    addedCost          = affectedCostSum × costImpactPercent / 100
    expectedCostImpact = addedCost × probability / 100

    behaviorScore = clamp[0,100](
          0.35 × norm(expectedTimeImpact)
        + 0.25 × norm(expectedCostImpact)
        + 0.20 × dependencyCentrality
        + 0.15 × timeSensitivityFlag × 100
        − 0.05 × detectabilityScore × 100 )

    norm(x) = 100 × x / max(1, max over roster of x)
"""

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence

import structlog

from riskbehavior.config import settings
from riskbehavior.engine.enrichment import calculate_duration_days
from riskbehavior.engine.network import RiskNetwork
from riskbehavior.schemas.inputs import Activity, ActivityLevel, Risk
from riskbehavior.schemas.outputs import Recommendation, RiskAnalysis, Sensitivity

logger = structlog.get_logger(__name__)

DETECTABLE: float = 1.0
UNDETECTABLE: float = 0.5


@dataclass(frozen=True)
class RiskMetrics:
    """Raw, un-normalised metrics for one risk."""
    risk_id: str
    title: str
    probability: float
    time_impact_percent: float
    cost_impact_percent: float
    scope_impact_percent: float
    affected_duration_sum: float
    affected_cost_sum: float
    added_days: float
    expected_time_impact: float
    added_cost: float
    expected_cost_impact: float
    dependency_centrality: float     # 0-100
    time_sensitivity_flag: int       # 0 | 1
    detectability_score: float       # 0.5 | 1

    @property
    def scope_change_ratio(self) -> float:
        return self.scope_impact_percent / 100

    def with_probability(self, probability: float) -> "RiskMetrics":
        """Same risk with impacts recomputed at another probability."""
        return replace(
            self,
            probability=probability,
            expected_time_impact=self.added_days * probability / 100,
            expected_cost_impact=self.added_cost * probability / 100,
        )


@dataclass(frozen=True)
class NormalizationMaxima:
    """Roster-wide denominators for norm()."""
    max_expected_time_impact: float
    max_expected_cost_impact: float

    @classmethod
    def from_results(cls, results: Iterable) -> "NormalizationMaxima":
        """Maxima over RiskMetrics or RiskAnalysis records, floored at 1."""
        results = list(results)
        return cls(
            max_expected_time_impact=max([1.0] + [r.expected_time_impact for r in results]),
            max_expected_cost_impact=max([1.0] + [r.expected_cost_impact for r in results]),
        )

    @classmethod
    def placeholder(cls) -> "NormalizationMaxima":
        return cls(
            max_expected_time_impact=settings.placeholder_max_time_impact,
            max_expected_cost_impact=settings.placeholder_max_cost_impact,
        )


def normalize(value: float, max_value: float) -> float:
    return 100 * value / max(1.0, max_value)


def affected_level2(risk: Risk, activities: Iterable[Activity]) -> list[Activity]:
    """Schedulable activities the risk touches, in activity order."""
    affected = set(risk.affected_activities)
    return [
        a for a in activities
        if a.id in affected and a.level == ActivityLevel.ACTIVITY
    ]


def activity_duration(activity: Activity) -> float:
    if activity.duration_days is not None:
        return activity.duration_days
    return calculate_duration_days(activity.start, activity.end)


def activity_cost(activity: Activity) -> float:
    return activity.baseline_cost if activity.baseline_cost is not None else activity.cost


def detectability_score(risk: Risk) -> float:
    """1 when a trigger is defined, else 0.5."""
    return DETECTABLE if risk.trigger.strip() else UNDETECTABLE


def time_sensitivity_flag(risk: Risk, activities: Iterable[Activity]) -> int:
    """1 if the risk touches any artifact (milestone/final deliverable)."""
    affected = set(risk.affected_activities)
    return int(any(
        a.id in affected and a.level == ActivityLevel.ARTIFACT for a in activities
    ))


def build_recommendations(risk: Risk, expected_cost_impact: float) -> list[Recommendation]:
    """
    Turn the response plan into a recommendation.

    ROI = (expectedCostImpact − mitigationCost) / mitigationCost, only when a
    positive mitigation cost is known.
    """
    plan = risk.response_plan.strip()
    if not plan:
        return []
    roi = None
    if risk.mitigation_cost is not None and risk.mitigation_cost > 0:
        roi = (expected_cost_impact - risk.mitigation_cost) / risk.mitigation_cost
    return [Recommendation(action=plan, roi=roi)]


class ImpactCalculator:
    """
    Compute per-risk impact, sensitivity and behavior score.

    Weights default to settings; pass them explicitly to experiment.
    """

    def __init__(
        self,
        weight_time: Optional[float] = None,
        weight_cost: Optional[float] = None,
        weight_centrality: Optional[float] = None,
        weight_time_sensitivity: Optional[float] = None,
        weight_detectability: Optional[float] = None,
    ):
        self.weight_time = settings.score_weight_time if weight_time is None else weight_time
        self.weight_cost = settings.score_weight_cost if weight_cost is None else weight_cost
        self.weight_centrality = (
            settings.score_weight_centrality if weight_centrality is None else weight_centrality
        )
        self.weight_time_sensitivity = (
            settings.score_weight_time_sensitivity
            if weight_time_sensitivity is None else weight_time_sensitivity
        )
        self.weight_detectability = (
            settings.score_weight_detectability
            if weight_detectability is None else weight_detectability
        )

    # ── Stage 1: raw metrics ───────────────────────────────────────────

    def compute_metrics(
        self,
        risk: Risk,
        activities: Sequence[Activity],
        network: RiskNetwork,
    ) -> RiskMetrics:
        affected = affected_level2(risk, activities)
        duration_sum = float(sum(activity_duration(a) for a in affected))
        cost_sum = float(sum(activity_cost(a) for a in affected))

        added_days = duration_sum * risk.time_impact_percent / 100
        added_cost = cost_sum * risk.cost_impact_percent / 100

        return RiskMetrics(
            risk_id=risk.id,
            title=risk.title,
            probability=risk.probability,
            time_impact_percent=risk.time_impact_percent,
            cost_impact_percent=risk.cost_impact_percent,
            scope_impact_percent=risk.scope_impact_percent,
            affected_duration_sum=duration_sum,
            affected_cost_sum=cost_sum,
            added_days=added_days,
            expected_time_impact=added_days * risk.probability / 100,
            added_cost=added_cost,
            expected_cost_impact=added_cost * risk.probability / 100,
            dependency_centrality=network.centrality(risk.id),
            time_sensitivity_flag=time_sensitivity_flag(risk, activities),
            detectability_score=detectability_score(risk),
        )

    # ── Stage 2: normalised score ──────────────────────────────────────

    def score(self, metrics: RiskMetrics, maxima: NormalizationMaxima) -> float:
        raw = (
            self.weight_time * normalize(metrics.expected_time_impact, maxima.max_expected_time_impact)
            + self.weight_cost * normalize(metrics.expected_cost_impact, maxima.max_expected_cost_impact)
            + self.weight_centrality * metrics.dependency_centrality
            + self.weight_time_sensitivity * metrics.time_sensitivity_flag * 100
            - self.weight_detectability * metrics.detectability_score * 100
        )
        return max(0.0, min(100.0, raw))

    def sensitivity(self, metrics: RiskMetrics) -> Sensitivity:
        # No sensitivity data at zero probability
        if metrics.probability > 0:
            probability_sensitivity = metrics.expected_cost_impact / metrics.probability
        else:
            probability_sensitivity = 0.0
        return Sensitivity(
            probability_sensitivity=probability_sensitivity,
            time_impact_sensitivity=metrics.affected_duration_sum / 100,
            cost_impact_sensitivity=metrics.affected_cost_sum / 100,
            scope_impact_sensitivity=metrics.scope_impact_percent / 100,
        )

    def build_analysis(
        self,
        risk: Risk,
        metrics: RiskMetrics,
        maxima: NormalizationMaxima,
    ) -> RiskAnalysis:
        return RiskAnalysis(
            risk_id=metrics.risk_id,
            title=metrics.title,
            affected_duration_sum=metrics.affected_duration_sum,
            affected_cost_sum=metrics.affected_cost_sum,
            added_days=metrics.added_days,
            expected_time_impact=metrics.expected_time_impact,
            added_cost=metrics.added_cost,
            expected_cost_impact=metrics.expected_cost_impact,
            scope_change_ratio=metrics.scope_change_ratio,
            propagated_probability=metrics.probability,
            behavior_score=self.score(metrics, maxima),
            sensitivity=self.sensitivity(metrics),
            recommendations=build_recommendations(risk, metrics.expected_cost_impact),
            dependency_centrality=metrics.dependency_centrality,
            time_sensitivity_flag=metrics.time_sensitivity_flag,
            detectability_score=metrics.detectability_score,
        )

    def analyze_risk(
        self,
        risk: Risk,
        activities: Sequence[Activity],
        network: RiskNetwork,
        maxima: NormalizationMaxima,
    ) -> RiskAnalysis:
        return self.build_analysis(risk, self.compute_metrics(risk, activities, network), maxima)

    def recompute_impacts(
        self,
        analysis: RiskAnalysis,
        risk: Risk,
        metrics: RiskMetrics,
        probability: float,
    ) -> RiskAnalysis:
        """
        Refresh expected impacts at the propagated probability.

        The behavior score and sensitivity stay as scored before propagation.
        """
        updated = metrics.with_probability(probability)
        return analysis.model_copy(update={
            "added_days": updated.added_days,
            "expected_time_impact": updated.expected_time_impact,
            "added_cost": updated.added_cost,
            "expected_cost_impact": updated.expected_cost_impact,
            "propagated_probability": probability,
            "recommendations": build_recommendations(risk, updated.expected_cost_impact),
        })


def calculate_single_risk(
    risk: Risk,
    activities: Sequence[Activity],
    all_risks: Sequence[Risk],
    max_expected_time_impact: float,
    max_expected_cost_impact: float,
    network: Optional[RiskNetwork] = None,
) -> RiskAnalysis:
    """Score one risk against explicit normalisation maxima."""
    calculator = ImpactCalculator()
    maxima = NormalizationMaxima(
        max_expected_time_impact=max_expected_time_impact,
        max_expected_cost_impact=max_expected_cost_impact,
    )
    return calculator.analyze_risk(risk, activities, network or RiskNetwork(all_risks), maxima)


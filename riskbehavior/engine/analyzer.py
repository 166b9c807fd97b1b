"""
Risk Behavior Analyzer: orchestrates all engine components.

This is the single entry point for an analysis run. Strictly sequential:

1. Enrich activities (durationDays, baselineCost)
2. Score pass 1 against placeholder maxima (raw expected impacts)
3. Compute roster-wide maxima
4. Score pass 2 against the true maxima
5. Propagate probabilities (roster relaxation)
6. Recompute expected impacts at the propagated probabilities
7. Select the top risks by expected impact and build combined scenarios
8. Rank by behavior score and by expected impact
9. Optional Monte Carlo simulation

The analyzer does not validate. Unresolvable activity or risk references
are simply excluded from sums, so unvalidated input degrades instead of
raising.
"""

import random
import time
from typing import Any, Mapping, Optional, Union

import structlog

from riskbehavior.config import settings
from riskbehavior.engine.enrichment import enrich_activities
from riskbehavior.engine.impact import ImpactCalculator, NormalizationMaxima
from riskbehavior.engine.monte_carlo import MonteCarloSimulator
from riskbehavior.engine.network import RiskNetwork
from riskbehavior.engine.propagation import PropagationEngine
from riskbehavior.engine.scenarios import ScenarioCalculator
from riskbehavior.schemas.inputs import AnalysisInput
from riskbehavior.schemas.outputs import AnalysisOutput, RiskAnalysis

logger = structlog.get_logger(__name__)


def _expected_impact(analysis: RiskAnalysis) -> float:
    return analysis.expected_impact_sum


class RiskBehaviorAnalyzer:
    """
    Production analysis pipeline.

    Orchestrates: Enrich → Score ×2 → Propagate → Recompute → Scenarios → Rank → Monte Carlo
    """

    def __init__(
        self,
        impact: Optional[ImpactCalculator] = None,
        propagation: Optional[PropagationEngine] = None,
        scenarios: Optional[ScenarioCalculator] = None,
        top_scenario_risks: Optional[int] = None,
    ):
        self.impact = impact or ImpactCalculator()
        self.propagation = propagation or PropagationEngine()
        self.scenarios = scenarios or ScenarioCalculator()
        self.top_scenario_risks = (
            settings.top_scenario_risks if top_scenario_risks is None else top_scenario_risks
        )

    def analyze(
        self,
        data: Union[AnalysisInput, Mapping[str, Any]],
        enable_monte_carlo: bool = False,
        monte_carlo_iterations: Optional[int] = None,
        deadline: Optional[float] = None,
        budget: Optional[float] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> AnalysisOutput:
        started = time.perf_counter()
        bundle = data if isinstance(data, AnalysisInput) else AnalysisInput.model_validate(data)
        risks = list(bundle.risks)

        logger.info(
            "analysis_started",
            n_activities=len(bundle.activities),
            n_risks=len(risks),
            monte_carlo=enable_monte_carlo,
        )

        # ── 1. Enrich ────────────────────────────────────────────────
        activities = enrich_activities(bundle.activities)
        network = RiskNetwork(risks, default_strength=self.propagation.default_strength)

        # ── 2-4. Two-pass scoring ────────────────────────────────────
        metrics = [self.impact.compute_metrics(r, activities, network) for r in risks]
        placeholder = NormalizationMaxima.placeholder()
        first_pass = [self.impact.build_analysis(r, m, placeholder) for r, m in zip(risks, metrics)]

        maxima = NormalizationMaxima.from_results(first_pass)
        logger.debug(
            "normalization_maxima",
            max_time=maxima.max_expected_time_impact,
            max_cost=maxima.max_expected_cost_impact,
        )
        scored = [self.impact.build_analysis(r, m, maxima) for r, m in zip(risks, metrics)]

        # ── 5. Propagate ─────────────────────────────────────────────
        propagation_results, propagated_risks = self.propagation.propagate_roster(risks, network)

        # ── 6. Recompute impacts at propagated probability ───────────
        per_risk = [
            self.impact.recompute_impacts(analysis, risk, m, result.final_probability)
            for analysis, risk, m, result in zip(scored, risks, metrics, propagation_results)
        ]

        # ── 7. Combined scenarios over the top risks ─────────────────
        by_impact = sorted(per_risk, key=_expected_impact, reverse=True)
        top_ids = [a.risk_id for a in by_impact[: self.top_scenario_risks]]
        combined = self.scenarios.build_scenarios(top_ids, propagated_risks, activities)

        # ── 8. Rankings ──────────────────────────────────────────────
        by_behavior = sorted(per_risk, key=lambda a: a.behavior_score, reverse=True)

        # ── 9. Monte Carlo ───────────────────────────────────────────
        monte_carlo = None
        if enable_monte_carlo:
            iterations = self._clamp_iterations(monte_carlo_iterations)
            simulator = MonteCarloSimulator(rng=rng, seed=seed)
            monte_carlo = simulator.run(
                propagated_risks, activities, iterations, deadline=deadline, budget=budget,
            )

        output = AnalysisOutput(
            per_risk_analysis=per_risk,
            combined_scenarios=combined,
            propagation_results=propagation_results,
            top_risks_by_behavior_score=by_behavior,
            top_risks_by_expected_impact=by_impact,
            monte_carlo=monte_carlo,
        )

        logger.info(
            "analysis_complete",
            n_risks=len(per_risk),
            n_scenarios=len(combined),
            top_risk=by_behavior[0].risk_id if by_behavior else None,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return output

    def _clamp_iterations(self, iterations: Optional[int]) -> int:
        if iterations is None:
            return settings.monte_carlo_default_iterations
        clamped = max(
            settings.monte_carlo_min_iterations,
            min(settings.monte_carlo_max_iterations, iterations),
        )
        if clamped != iterations:
            logger.warning(
                "monte_carlo_iterations_clamped",
                requested=iterations,
                used=clamped,
            )
        return clamped


def analyze(
    data: Union[AnalysisInput, Mapping[str, Any]],
    enable_monte_carlo: bool = False,
    monte_carlo_iterations: Optional[int] = None,
    deadline: Optional[float] = None,
    budget: Optional[float] = None,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> AnalysisOutput:
    """Run a full analysis with default settings."""
    return RiskBehaviorAnalyzer().analyze(
        data,
        enable_monte_carlo=enable_monte_carlo,
        monte_carlo_iterations=monte_carlo_iterations,
        deadline=deadline,
        budget=budget,
        seed=seed,
        rng=rng,
    )

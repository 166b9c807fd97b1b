"""
Monte Carlo Schedule/Cost Simulator.

Each trial:
1. Start from the baseline totals (Σ cost and Σ durationDays of level-2 activities)
2. For each risk, draw occurrence ~ Bernoulli(probability / 100)
3. If it occurs, add affected duration × T/100 and affected cost × C/100,
   with T and C drawn from Triangular(0.8 × mode, mode, 1.2 × mode)
   where mode is the stated impact percent

After all trials the cost and duration series are sorted and summarised:
mean, population standard deviation, nearest-rank p10/p50/p90, and the
fraction of trials strictly over a deadline/budget when one is given.

Trials are independent, so batches can be simulated separately and their
series concatenated before summarise(). Pass a seeded random.Random for
reproducible runs.
"""

import math
import random
import statistics
from dataclasses import dataclass
from typing import Optional, Sequence

import structlog

from riskbehavior.config import settings
from riskbehavior.engine.impact import activity_cost, activity_duration, affected_level2
from riskbehavior.exceptions import SimulationConfigError
from riskbehavior.schemas.inputs import Activity, ActivityLevel, Risk
from riskbehavior.schemas.outputs import DistributionSummary, MonteCarloSummary, Percentiles

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RiskExposure:
    """What one risk can do to the totals when it fires."""
    risk_id: str
    probability: float
    time_impact_percent: float
    cost_impact_percent: float
    affected_duration: float
    affected_cost: float


@dataclass(frozen=True)
class TrialOutcome:
    total_cost: float
    total_duration: float


def _require_trials(values: Sequence[float]) -> None:
    if not values:
        raise SimulationConfigError("Monte Carlo summary needs at least one trial", iterations=0)


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Nearest-rank percentile: index ceil(p/100 × n) − 1, clamped."""
    _require_trials(sorted_values)
    index = math.ceil(p / 100 * len(sorted_values)) - 1
    index = max(0, min(index, len(sorted_values) - 1))
    return sorted_values[index]


def summarize_series(values: Sequence[float]) -> DistributionSummary:
    _require_trials(values)
    ordered = sorted(values)
    return DistributionSummary(
        mean=statistics.fmean(ordered),
        std_dev=statistics.pstdev(ordered),
        percentiles=Percentiles(
            p10=percentile(ordered, 10),
            p50=percentile(ordered, 50),
            p90=percentile(ordered, 90),
        ),
    )


def exceedance(values: Sequence[float], threshold: float) -> float:
    """Fraction of values strictly above threshold."""
    _require_trials(values)
    return sum(1 for v in values if v > threshold) / len(values)


class MonteCarloSimulator:
    """
    Stochastic cost/duration simulator.

    The random source is explicit: pass rng, or a seed to build one.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        low_factor: Optional[float] = None,
        high_factor: Optional[float] = None,
    ):
        self.rng = rng if rng is not None else random.Random(seed)
        self.low_factor = settings.triangular_low_factor if low_factor is None else low_factor
        self.high_factor = settings.triangular_high_factor if high_factor is None else high_factor

    def triangular(self, mode: float) -> float:
        """
        Inverse-CDF draw from Triangular(low × mode, mode, high × mode).

        A zero-width distribution (mode 0) returns the mode.
        """
        low = mode * self.low_factor
        high = mode * self.high_factor
        span = high - low
        if span == 0:
            return mode
        u = self.rng.random()
        fc = (mode - low) / span
        if u < fc:
            return low + math.sqrt(u * span * (mode - low))
        return high - math.sqrt((1 - u) * span * (high - mode))

    def exposures(self, risks: Sequence[Risk], activities: Sequence[Activity]) -> list[RiskExposure]:
        result = []
        for risk in risks:
            affected = affected_level2(risk, activities)
            result.append(RiskExposure(
                risk_id=risk.id,
                probability=risk.probability,
                time_impact_percent=risk.time_impact_percent,
                cost_impact_percent=risk.cost_impact_percent,
                affected_duration=float(sum(activity_duration(a) for a in affected)),
                affected_cost=float(sum(activity_cost(a) for a in affected)),
            ))
        return result

    def run_trial(
        self,
        exposures: Sequence[RiskExposure],
        baseline_cost: float,
        baseline_duration: float,
    ) -> TrialOutcome:
        added_cost = 0.0
        added_duration = 0.0
        for exposure in exposures:
            if not self.rng.random() * 100 < exposure.probability:
                continue
            if exposure.affected_duration == 0 and exposure.affected_cost == 0:
                continue
            time_fraction = self.triangular(exposure.time_impact_percent) / 100
            cost_fraction = self.triangular(exposure.cost_impact_percent) / 100
            added_duration += exposure.affected_duration * time_fraction
            added_cost += exposure.affected_cost * cost_fraction
        return TrialOutcome(
            total_cost=baseline_cost + added_cost,
            total_duration=baseline_duration + added_duration,
        )

    def simulate(
        self,
        risks: Sequence[Risk],
        activities: Sequence[Activity],
        iterations: int,
    ) -> tuple[list[float], list[float]]:
        """Run the trials and return the raw (cost, duration) series."""
        if iterations < 1:
            raise SimulationConfigError(
                f"Monte Carlo needs at least one iteration, got {iterations}",
                iterations=iterations,
            )

        scheduled = [a for a in activities if a.level == ActivityLevel.ACTIVITY]
        baseline_cost = float(sum(activity_cost(a) for a in scheduled))
        baseline_duration = float(sum(activity_duration(a) for a in scheduled))
        exposures = self.exposures(risks, activities)

        costs: list[float] = []
        durations: list[float] = []
        for _ in range(iterations):
            outcome = self.run_trial(exposures, baseline_cost, baseline_duration)
            costs.append(outcome.total_cost)
            durations.append(outcome.total_duration)
        return costs, durations

    def run(
        self,
        risks: Sequence[Risk],
        activities: Sequence[Activity],
        iterations: Optional[int] = None,
        deadline: Optional[float] = None,
        budget: Optional[float] = None,
    ) -> MonteCarloSummary:
        iterations = settings.monte_carlo_default_iterations if iterations is None else iterations
        costs, durations = self.simulate(risks, activities, iterations)
        summary = summarize(costs, durations, deadline=deadline, budget=budget)

        logger.info(
            "monte_carlo_complete",
            iterations=iterations,
            cost_p50=round(summary.total_cost_distribution.percentiles.p50, 2),
            duration_p50=round(summary.total_duration_distribution.percentiles.p50, 2),
        )
        return summary


def summarize(
    costs: Sequence[float],
    durations: Sequence[float],
    deadline: Optional[float] = None,
    budget: Optional[float] = None,
) -> MonteCarloSummary:
    """
    Summarise trial series, possibly merged from several batches.

    Raises SimulationConfigError when either series is empty.
    """
    _require_trials(costs)
    _require_trials(durations)
    return MonteCarloSummary(
        enabled=True,
        iterations=len(costs),
        total_cost_distribution=summarize_series(costs),
        total_duration_distribution=summarize_series(durations),
        probability_over_deadline=exceedance(durations, deadline) if deadline is not None else None,
        probability_over_budget=exceedance(costs, budget) if budget is not None else None,
    )


def run_monte_carlo_simulation(
    risks: Sequence[Risk],
    activities: Sequence[Activity],
    iterations: Optional[int] = None,
    deadline: Optional[float] = None,
    budget: Optional[float] = None,
    seed: Optional[int] = None,
) -> MonteCarloSummary:
    """Monte Carlo run with default settings."""
    return MonteCarloSimulator(seed=seed).run(risks, activities, iterations, deadline, budget)

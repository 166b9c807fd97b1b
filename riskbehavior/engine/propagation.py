"""
Risk Probability Propagation Engine.

If risk O lists risk R as related with strength s, R's probability rises by
s × P(O). Two variants:

1. relax(roster): roster-wide relaxation used by the orchestrator.
   A fixed number of passes (default 3). In each pass, every risk R is
   recomputed from its ORIGINAL probability:

       P(R) = min(100, P0(R) + Σ s(O→R) × P(O))     over sources O ≠ R

   where P(O) is O's current working value (updated in roster order within
   the pass) and contributions of 0.1 or less are ignored as noise. The
   loop count, not convergence, stops the relaxation, so cycles always
   terminate; recomputing from P0 keeps repeated passes from re-adding the
   same contribution, while chains A→B→C still ripple one hop per pass.

2. propagate_from(risk, roster): recursive single-source traversal with a
   visited set, explicit depth bound (default 3) and an explicit path.

The two variants can disagree on the same graph; the relaxation is the
authoritative one for analysis output.
"""

from typing import Iterable, Optional, Sequence

import structlog

from riskbehavior.config import settings
from riskbehavior.engine.network import RiskNetwork
from riskbehavior.schemas.inputs import Risk
from riskbehavior.schemas.outputs import PropagationResult

logger = structlog.get_logger(__name__)

MAX_PROBABILITY: float = 100.0


class PropagationEngine:
    """
    Diffuse probability increases across the risk relation graph.

    Never mutates caller records: working probabilities live in a private
    dict and updated risks are returned as copies.
    """

    def __init__(
        self,
        passes: Optional[int] = None,
        threshold: Optional[float] = None,
        max_depth: Optional[int] = None,
        default_strength: Optional[float] = None,
    ):
        self.passes = settings.propagation_passes if passes is None else passes
        self.threshold = settings.propagation_threshold if threshold is None else threshold
        self.max_depth = settings.propagation_max_depth if max_depth is None else max_depth
        self.default_strength = (
            settings.default_relation_strength if default_strength is None else default_strength
        )

    def _network(self, risks: Iterable[Risk], network: Optional[RiskNetwork]) -> RiskNetwork:
        if network is not None:
            return network
        return RiskNetwork(risks, default_strength=self.default_strength)

    # ── Roster-wide relaxation ─────────────────────────────────────────

    def relax(
        self,
        risks: Sequence[Risk],
        network: Optional[RiskNetwork] = None,
    ) -> dict[str, float]:
        """Return final working probabilities keyed by risk id."""
        network = self._network(risks, network)
        original = {r.id: r.probability for r in risks}
        working = dict(original)

        for n_pass in range(self.passes):
            changed = 0
            for risk in risks:
                base = original[risk.id]
                total_increase = 0.0
                for edge in network.incoming(risk.id):
                    if edge.source_id == risk.id or edge.source_id not in working:
                        continue
                    increase = edge.strength * working[edge.source_id]
                    if increase > self.threshold:
                        total_increase += increase
                updated = min(MAX_PROBABILITY, base + total_increase)
                # Never below the original, even for out-of-range inputs
                updated = max(updated, base)
                if updated != working[risk.id]:
                    changed += 1
                working[risk.id] = updated
            logger.debug("propagation_pass", n_pass=n_pass + 1, changed=changed)

        return working

    def propagate_roster(
        self,
        risks: Sequence[Risk],
        network: Optional[RiskNetwork] = None,
    ) -> tuple[list[PropagationResult], list[Risk]]:
        """
        Relax the whole roster.

        Returns one PropagationResult per risk (empty path) and copies of the
        risks carrying their propagated probability.
        """
        final = self.relax(risks, network)
        results = []
        propagated = []
        for risk in risks:
            results.append(PropagationResult(
                risk_id=risk.id,
                original_probability=risk.probability,
                final_probability=final[risk.id],
                propagation_path=[],
            ))
            propagated.append(risk.model_copy(update={"probability": final[risk.id]}))

        n_raised = sum(1 for r in results if r.final_probability > r.original_probability)
        logger.info("propagation_complete", n_risks=len(results), n_raised=n_raised)
        return results, propagated

    # ── Recursive single-source traversal ──────────────────────────────

    def propagate_from(
        self,
        risk: Risk,
        all_risks: Sequence[Risk],
        visited: Optional[set[str]] = None,
        depth: int = 0,
        path: Optional[list[str]] = None,
        network: Optional[RiskNetwork] = None,
    ) -> PropagationResult:
        """
        Follow relations outward from one risk, depth-first.

        finalProbability is the highest probability reached anywhere along
        the explored paths; propagationPath lists the ids from the root to
        this risk.
        """
        network = self._network(all_risks, network)
        visited = set() if visited is None else visited
        path = [] if path is None else path

        if depth > self.max_depth or risk.id in visited:
            return PropagationResult(
                risk_id=risk.id,
                original_probability=risk.probability,
                final_probability=risk.probability,
                propagation_path=list(path),
            )

        visited.add(risk.id)
        new_path = path + [risk.id]
        final_probability = risk.probability

        for edge in network.outgoing(risk.id):
            related = network.get(edge.target_id)
            if related is None:
                continue

            increase = edge.strength * risk.probability
            if increase <= self.threshold:
                continue

            new_probability = min(MAX_PROBABILITY, related.probability + increase)
            if depth < self.max_depth and abs(new_probability - related.probability) > self.threshold:
                downstream = self.propagate_from(
                    related.model_copy(update={"probability": new_probability}),
                    all_risks,
                    visited=set(visited),
                    depth=depth + 1,
                    path=new_path,
                    network=network,
                )
                final_probability = max(final_probability, downstream.final_probability)

        return PropagationResult(
            risk_id=risk.id,
            original_probability=risk.probability,
            final_probability=final_probability,
            propagation_path=new_path,
        )


def propagate_risk(risk: Risk, all_risks: Sequence[Risk]) -> PropagationResult:
    """Single-source propagation with default settings."""
    return PropagationEngine().propagate_from(risk, all_risks)

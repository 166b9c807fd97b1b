"""
Risk Relation Network.

Adjacency lists keyed by risk id over the directed, possibly cyclic graph
formed by each risk's relatedRisks. Relations are resolved by id lookup, never
by object references, so cycles are harmless.

Provides:
- outgoing / incoming edges per risk
- degree centrality normalised to [0, 100]
"""

from dataclasses import dataclass
from typing import Iterable, Optional

import structlog

from riskbehavior.config import settings
from riskbehavior.schemas.inputs import Risk

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RiskEdge:
    """A resolved relation O → R."""
    source_id: str
    target_id: str
    relation_type: str
    strength: float


class RiskNetwork:
    """
    Directed risk graph built once per run from the roster.

    Degree of R = |outgoing relations of R| + |risks with a relation to R|.
    Edges whose target is not in the roster count towards the source's
    outgoing degree but are never followed.
    """

    def __init__(
        self,
        risks: Iterable[Risk],
        default_strength: Optional[float] = None,
    ):
        self.default_strength = (
            settings.default_relation_strength if default_strength is None else default_strength
        )
        self._risks: dict[str, Risk] = {}
        self._outgoing: dict[str, list[RiskEdge]] = {}
        self._incoming: dict[str, list[RiskEdge]] = {}

        for risk in risks:
            self._risks.setdefault(risk.id, risk)
            edges = [
                RiskEdge(
                    source_id=risk.id,
                    target_id=rel.risk_id,
                    relation_type=rel.relation_type,
                    strength=self.default_strength if rel.strength is None else rel.strength,
                )
                for rel in risk.related_risks
            ]
            self._outgoing.setdefault(risk.id, []).extend(edges)

        for source_id, edges in self._outgoing.items():
            seen: set[str] = set()
            for edge in edges:
                # One incoming entry per source, first relation wins
                if edge.target_id in seen:
                    continue
                seen.add(edge.target_id)
                self._incoming.setdefault(edge.target_id, []).append(edge)

        self._max_degree = max(
            [1] + [self.degree(risk_id) for risk_id in self._risks]
        )

    def __contains__(self, risk_id: str) -> bool:
        return risk_id in self._risks

    def get(self, risk_id: str) -> Optional[Risk]:
        return self._risks.get(risk_id)

    @property
    def risk_ids(self) -> list[str]:
        return list(self._risks)

    def outgoing(self, risk_id: str) -> list[RiskEdge]:
        return list(self._outgoing.get(risk_id, []))

    def incoming(self, risk_id: str) -> list[RiskEdge]:
        """Edges into risk_id, at most one per source risk."""
        return list(self._incoming.get(risk_id, []))

    def degree(self, risk_id: str) -> int:
        return len(self._outgoing.get(risk_id, [])) + len(self._incoming.get(risk_id, []))

    @property
    def max_degree(self) -> int:
        return self._max_degree

    def centrality(self, risk_id: str) -> float:
        """Degree normalised by the roster's maximum degree, scaled to 0-100."""
        return self.degree(risk_id) / self._max_degree * 100

"""
Analysis output schemas.

Serialised with to_dict() (camelCase, None fields omitted), which is the
shape consumed by the JSON export.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OutputModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Sensitivity(OutputModel):
    """Local partial-derivative approximations for one risk."""

    probability_sensitivity: float = 0.0
    time_impact_sensitivity: float = 0.0
    cost_impact_sensitivity: float = 0.0
    scope_impact_sensitivity: float = 0.0


class Recommendation(OutputModel):
    action: str
    roi: Optional[float] = Field(default=None, alias="ROI")


class RiskAnalysis(OutputModel):
    """Per-risk result."""

    risk_id: str
    title: str
    affected_duration_sum: float = 0.0
    affected_cost_sum: float = 0.0
    added_days: float = 0.0
    expected_time_impact: float = 0.0
    added_cost: float = 0.0
    expected_cost_impact: float = 0.0
    scope_change_ratio: float = 0.0
    propagated_probability: float = 0.0
    behavior_score: float = 0.0
    sensitivity: Sensitivity = Field(default_factory=Sensitivity)
    recommendations: list[Recommendation] = Field(default_factory=list)
    dependency_centrality: float = 0.0
    time_sensitivity_flag: int = 0
    detectability_score: float = 0.0

    @property
    def expected_impact_sum(self) -> float:
        return self.expected_time_impact + self.expected_cost_impact


class CombinedScenario(OutputModel):
    """Joint impact of a risk subset over the activities they all affect."""

    risk_ids: list[str]
    combined_time_impact_percent: float = 0.0
    combined_cost_impact_percent: float = 0.0
    combined_expected_time_impact: float = 0.0
    combined_expected_cost_impact: float = 0.0
    common_activities: list[str] = Field(default_factory=list)
    affected_duration_sum: float = 0.0
    affected_cost_sum: float = 0.0
    average_probability: float = 0.0
    combined_added_days: float = 0.0
    combined_added_cost: float = 0.0


class PropagationResult(OutputModel):
    risk_id: str
    original_probability: float
    final_probability: float
    propagation_path: list[str] = Field(default_factory=list)


class Percentiles(OutputModel):
    p10: float
    p50: float
    p90: float


class DistributionSummary(OutputModel):
    mean: float
    std_dev: float
    percentiles: Percentiles


class MonteCarloSummary(OutputModel):
    enabled: bool = True
    iterations: Optional[int] = None
    total_cost_distribution: Optional[DistributionSummary] = None
    total_duration_distribution: Optional[DistributionSummary] = None
    probability_over_deadline: Optional[float] = None
    probability_over_budget: Optional[float] = None


class AnalysisOutput(OutputModel):
    per_risk_analysis: list[RiskAnalysis] = Field(default_factory=list)
    combined_scenarios: list[CombinedScenario] = Field(default_factory=list)
    propagation_results: list[PropagationResult] = Field(default_factory=list)
    top_risks_by_behavior_score: list[RiskAnalysis] = Field(default_factory=list)
    top_risks_by_expected_impact: list[RiskAnalysis] = Field(default_factory=list)
    monte_carlo: Optional[MonteCarloSummary] = None

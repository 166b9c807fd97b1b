"""
Analysis input schemas.

Field names on the wire are camelCase (timeImpactPercent, affectedActivities);
Python attributes are snake_case. Values are not range-checked here: an
out-of-range probability or a negative cost is a validation issue reported by
riskbehavior.pipeline.validator, not a construction failure.
"""

from datetime import date
from enum import IntEnum, StrEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ActivityLevel(IntEnum):
    """Activity levels. Level 1 groups, level 2 schedules."""
    ARTIFACT = 1
    ACTIVITY = 2


VALID_LEVELS: frozenset[int] = frozenset({ActivityLevel.ARTIFACT, ActivityLevel.ACTIVITY})


class RelationType(StrEnum):
    DEPENDENCY = "dependency"
    CONCURRENT = "concurrent"


RISK_CATEGORIES: tuple[str, ...] = (
    "Technical",
    "Schedule",
    "Cost",
    "Resources",
    "External",
    "Operational",
    "Quality",
    "Stakeholder",
)


class InputModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Activity(InputModel):
    """
    A schedule entry.

    Level 1 (artifact) is a grouping node with no dates or cost.
    Level 2 is a schedulable unit. duration_days and baseline_cost are
    filled in by the enricher and are None on raw input. A missing level is
    0, which the validator rejects and the engine never schedules.
    """

    id: str = ""
    title: str = ""
    level: int = 0
    start: str = ""
    end: str = ""
    cost: float = 0.0
    duration_days: Optional[int] = None
    baseline_cost: Optional[float] = None

    @field_validator("id", "title", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("level", mode="before")
    @classmethod
    def _coerce_level(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("start", "end", mode="before")
    @classmethod
    def _coerce_date(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, date):
            return v.isoformat()
        return v

    @field_validator("cost", mode="before")
    @classmethod
    def _coerce_cost(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    @property
    def is_schedulable(self) -> bool:
        return self.level == ActivityLevel.ACTIVITY


class RiskRelation(InputModel):
    """Outgoing edge in the risk network. strength=None means the default (0.3)."""

    risk_id: str
    relation_type: str = RelationType.DEPENDENCY.value
    strength: Optional[float] = None

    @field_validator("risk_id", mode="before")
    @classmethod
    def _coerce_risk_id(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("relation_type", mode="before")
    @classmethod
    def _coerce_relation_type(cls, v: Any) -> Any:
        return RelationType.DEPENDENCY.value if v is None else v


class Risk(InputModel):
    """A project risk and the activities it touches."""

    id: str = ""
    title: str = ""
    probability: float = 0.0          # 0-100
    time_impact_percent: float = 0.0
    cost_impact_percent: float = 0.0
    scope_impact_percent: float = 0.0  # signed
    category: str = ""
    trigger: str = ""
    response_plan: str = ""
    related_risks: list[RiskRelation] = Field(default_factory=list)
    affected_activities: list[str] = Field(default_factory=list)
    mitigation_cost: Optional[float] = None

    @field_validator("id", "title", "category", "trigger", "response_plan", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator(
        "probability", "time_impact_percent", "cost_impact_percent", "scope_impact_percent",
        mode="before",
    )
    @classmethod
    def _coerce_number(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    @field_validator("related_risks", "affected_activities", mode="before")
    @classmethod
    def _coerce_list(cls, v: Any) -> Any:
        return [] if v is None else v


class AnalysisInput(InputModel):
    """The bundle handed to validate() and analyze()."""

    activities: list[Activity] = Field(default_factory=list)
    risks: list[Risk] = Field(default_factory=list)

    @field_validator("activities", "risks", mode="before")
    @classmethod
    def _coerce_list(cls, v: Any) -> Any:
        return [] if v is None else v

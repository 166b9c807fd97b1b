"""
Pytest Configuration and Fixtures.

Provides the small reference project used across the engine tests:
- A1: level 2, 10-day span, cost 1000
- A2: level 2, 5-day span, cost 500
- M1: level 1 artifact (no dates, no cost)
- R1: probability 50, time 20%, cost 10%, affecting A1 and A2
"""

import pytest

from riskbehavior.schemas.inputs import Activity, AnalysisInput, Risk


@pytest.fixture
def activities() -> list[Activity]:
    return [
        Activity(id="A1", title="Foundations", level=2, start="2024-01-01", end="2024-01-11", cost=1000),
        Activity(id="A2", title="Framing", level=2, start="2024-01-11", end="2024-01-16", cost=500),
        Activity(id="M1", title="Handover", level=1),
    ]


@pytest.fixture
def base_risk() -> Risk:
    return Risk(
        id="R1",
        title="Supplier delay",
        probability=50,
        time_impact_percent=20,
        cost_impact_percent=10,
        scope_impact_percent=0,
        category="Schedule",
        affected_activities=["A1", "A2"],
    )


@pytest.fixture
def analysis_input(activities, base_risk) -> AnalysisInput:
    return AnalysisInput(activities=activities, risks=[base_risk])

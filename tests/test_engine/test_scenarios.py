"""
Combined-Scenario Calculator Tests.
"""

import pytest

from riskbehavior.engine.enrichment import enrich_activities
from riskbehavior.engine.scenarios import ScenarioCalculator, calculate_combined_impact
from riskbehavior.schemas.inputs import Risk


def _risk(risk_id: str, probability: float, time: float, cost: float, affected: list) -> Risk:
    return Risk(
        id=risk_id,
        title=f"Risk {risk_id}",
        probability=probability,
        time_impact_percent=time,
        cost_impact_percent=cost,
        affected_activities=affected,
    )


class TestCombine:
    """Intersection semantics."""

    def setup_method(self):
        self.calculator = ScenarioCalculator()
        self.risks = [
            _risk("R1", 50, 20, 10, ["A1", "A2"]),
            _risk("R2", 30, 30, 20, ["A2"]),
            _risk("R3", 70, 10, 10, ["A1"]),
        ]

    def test_pair_over_common_activity(self, activities):
        scenario = self.calculator.combine(["R1", "R2"], self.risks, enrich_activities(activities))

        assert scenario.risk_ids == ["R1", "R2"]
        assert scenario.common_activities == ["A2"]
        assert scenario.combined_time_impact_percent == pytest.approx(50)
        assert scenario.combined_cost_impact_percent == pytest.approx(30)
        assert scenario.average_probability == pytest.approx(40)
        assert scenario.combined_added_days == pytest.approx(2.5)
        assert scenario.combined_expected_time_impact == pytest.approx(1.0)
        assert scenario.combined_added_cost == pytest.approx(150)
        assert scenario.combined_expected_cost_impact == pytest.approx(60)

    def test_percentages_capped(self, activities):
        risks = [_risk("R1", 50, 150, 120, ["A1"]), _risk("R2", 50, 100, 90, ["A1"])]
        scenario = self.calculator.combine(["R1", "R2"], risks, activities)
        assert scenario.combined_time_impact_percent == 200
        assert scenario.combined_cost_impact_percent == 200
        assert scenario.combined_added_days == pytest.approx(20)

    def test_disjoint_sets_give_zero(self, activities):
        scenario = self.calculator.combine(["R2", "R3"], self.risks, activities)
        assert scenario.risk_ids == ["R2", "R3"]
        assert scenario.common_activities == []
        assert scenario.combined_time_impact_percent == 0
        assert scenario.combined_expected_time_impact == 0
        assert scenario.combined_expected_cost_impact == 0

    def test_artifacts_never_common(self, activities):
        risks = [_risk("R1", 50, 20, 10, ["M1"]), _risk("R2", 50, 20, 10, ["M1"])]
        scenario = self.calculator.combine(["R1", "R2"], risks, activities)
        assert scenario.common_activities == []
        assert scenario.combined_expected_time_impact == 0

    def test_unknown_ids(self, activities):
        scenario = self.calculator.combine(["X", "Y"], self.risks, activities)
        assert scenario.risk_ids == ["X", "Y"]
        assert scenario.combined_expected_cost_impact == 0

    def test_custom_cap(self, activities):
        calculator = ScenarioCalculator(impact_cap=40)
        scenario = calculator.combine(["R1", "R2"], self.risks, activities)
        assert scenario.combined_time_impact_percent == 40
        assert scenario.combined_cost_impact_percent == 30

    def test_module_function(self, activities):
        scenario = calculate_combined_impact(["R1", "R2"], self.risks, activities)
        assert scenario.combined_expected_time_impact == pytest.approx(1.0)


class TestBuildScenarios:
    def setup_method(self):
        self.calculator = ScenarioCalculator()
        self.risks = [
            _risk("R1", 50, 20, 10, ["A1", "A2"]),
            _risk("R2", 30, 30, 20, ["A2"]),
            _risk("R3", 70, 10, 10, ["A1", "A2"]),
        ]

    def test_three_risks_give_pairs_and_triple(self, activities):
        scenarios = self.calculator.build_scenarios(["R1", "R2", "R3"], self.risks, activities)
        assert [s.risk_ids for s in scenarios] == [
            ["R1", "R2"], ["R1", "R3"], ["R2", "R3"], ["R1", "R2", "R3"],
        ]
        triple = scenarios[-1]
        assert triple.common_activities == ["A2"]
        assert triple.average_probability == pytest.approx(50)

    def test_two_risks_give_one_pair(self, activities):
        scenarios = self.calculator.build_scenarios(["R1", "R2"], self.risks, activities)
        assert len(scenarios) == 1

    def test_single_risk_gives_none(self, activities):
        assert self.calculator.build_scenarios(["R1"], self.risks, activities) == []

    def test_camel_case_output(self, activities):
        [scenario] = self.calculator.build_scenarios(["R1", "R2"], self.risks, activities)
        data = scenario.to_dict()
        assert set(data) >= {
            "riskIds",
            "combinedTimeImpactPercent",
            "combinedCostImpactPercent",
            "combinedExpectedTimeImpact",
            "combinedExpectedCostImpact",
        }

"""
Risk Behavior Analyzer Tests.

Verifies the full pipeline: enrichment, two-pass scoring, propagation,
scenario selection, rankings and the optional Monte Carlo block.
"""

import pytest

from riskbehavior.config import settings
from riskbehavior.engine.analyzer import RiskBehaviorAnalyzer, analyze
from riskbehavior.schemas.inputs import Activity, AnalysisInput, Risk, RiskRelation


def _risk(risk_id, probability, time=20, cost=10, affected=("A1", "A2"), relations=()) -> Risk:
    return Risk(
        id=risk_id,
        title=f"Risk {risk_id}",
        probability=probability,
        time_impact_percent=time,
        cost_impact_percent=cost,
        affected_activities=list(affected),
        related_risks=[RiskRelation(risk_id=t, strength=s) for t, s in relations],
    )


class TestSingleRisk:
    """Reference project with one risk."""

    def test_reference_values(self, analysis_input):
        output = analyze(analysis_input)
        [result] = output.per_risk_analysis

        assert result.risk_id == "R1"
        assert result.affected_duration_sum == pytest.approx(15)
        assert result.affected_cost_sum == pytest.approx(1500)
        assert result.added_days == pytest.approx(3)
        assert result.expected_time_impact == pytest.approx(1.5)
        assert result.added_cost == pytest.approx(150)
        assert result.expected_cost_impact == pytest.approx(75)
        assert result.propagated_probability == 50
        assert result.behavior_score == pytest.approx(57.5)
        assert result.sensitivity.probability_sensitivity == pytest.approx(1.5)

    def test_no_scenarios_for_one_risk(self, analysis_input):
        output = analyze(analysis_input)
        assert output.combined_scenarios == []
        assert [p.final_probability for p in output.propagation_results] == [50]

    def test_monte_carlo_absent_when_disabled(self, analysis_input):
        data = analyze(analysis_input).to_dict()
        assert "monteCarlo" not in data
        assert set(data) == {
            "perRiskAnalysis",
            "combinedScenarios",
            "propagationResults",
            "topRisksByBehaviorScore",
            "topRisksByExpectedImpact",
        }

    def test_mapping_input(self):
        data = {
            "activities": [
                {"id": "A1", "title": "Work", "level": 2,
                 "start": "2024-01-01", "end": "2024-01-11", "cost": 1000},
            ],
            "risks": [
                {"id": "R1", "title": "Risk", "probability": 50, "timeImpactPercent": 20,
                 "costImpactPercent": 10, "scopeImpactPercent": 5,
                 "affectedActivities": ["A1"], "relatedRisks": []},
            ],
        }
        [result] = analyze(data).per_risk_analysis
        assert result.expected_time_impact == pytest.approx(1.0)
        assert result.scope_change_ratio == pytest.approx(0.05)

    def test_input_not_mutated(self, analysis_input):
        analyze(analysis_input)
        assert analysis_input.activities[0].duration_days is None
        assert analysis_input.risks[0].probability == 50

    def test_null_fields_absorbed(self):
        data = {
            "activities": [
                {"id": "A1", "title": None, "level": 2,
                 "start": "2024-01-01", "end": "2024-01-11", "cost": None},
                {"id": "A2", "title": "Loose", "level": None, "start": None, "end": None},
            ],
            "risks": [
                {"id": "R1", "title": None, "probability": None, "timeImpactPercent": 20,
                 "costImpactPercent": None, "scopeImpactPercent": None, "category": None,
                 "trigger": None, "responsePlan": None, "affectedActivities": ["A1", "A2"],
                 "relatedRisks": None},
                {"id": "R2", "title": "Other", "probability": 50, "timeImpactPercent": 10,
                 "affectedActivities": ["A1"],
                 "relatedRisks": [{"riskId": "R1", "relationType": None, "strength": None}]},
            ],
        }
        output = analyze(data)
        r1 = next(a for a in output.per_risk_analysis if a.risk_id == "R1")

        assert r1.title == ""
        # A2 has no level, so only A1 is scheduled
        assert r1.affected_duration_sum == pytest.approx(10)
        assert r1.propagated_probability == pytest.approx(15)
        assert r1.expected_time_impact == pytest.approx(0.3)
        assert r1.expected_cost_impact == 0
        assert r1.scope_change_ratio == 0

    def test_unresolved_references_degrade(self, activities):
        risk = _risk("R1", 50, affected=("GHOST",), relations=[("NOPE", 0.5)])
        [result] = analyze(AnalysisInput(activities=activities, risks=[risk])).per_risk_analysis
        assert result.expected_time_impact == 0
        assert result.propagated_probability == 50


class TestRoster:
    """Several risks: propagation, rankings and scenarios."""

    def setup_method(self):
        self.analyzer = RiskBehaviorAnalyzer()

    def _input(self, activities, risks):
        return AnalysisInput(activities=activities, risks=risks)

    def test_propagation_raises_expected_impact(self, activities):
        risks = [_risk("R1", 80, relations=[("R2", 0.5)]), _risk("R2", 30)]
        output = self.analyzer.analyze(self._input(activities, risks))
        r2 = next(a for a in output.per_risk_analysis if a.risk_id == "R2")

        assert r2.propagated_probability == pytest.approx(70)
        assert r2.expected_time_impact == pytest.approx(3 * 0.7)
        assert r2.expected_cost_impact == pytest.approx(150 * 0.7)
        propagated = {p.risk_id: p for p in output.propagation_results}
        assert propagated["R2"].original_probability == 30
        assert propagated["R2"].final_probability == pytest.approx(70)

    def test_rankings(self, activities):
        risks = [
            _risk("LOW", 10),
            _risk("HIGH", 90),
            _risk("MID", 50, affected=("A1", "A2", "M1")),
        ]
        output = self.analyzer.analyze(self._input(activities, risks))

        by_impact = [a.risk_id for a in output.top_risks_by_expected_impact]
        assert by_impact == ["HIGH", "MID", "LOW"]
        scores = [a.behavior_score for a in output.top_risks_by_behavior_score]
        assert scores == sorted(scores, reverse=True)
        assert [a.risk_id for a in output.per_risk_analysis] == ["LOW", "HIGH", "MID"]

    def test_scenarios_over_top_three(self, activities):
        risks = [_risk("R1", 90), _risk("R2", 60), _risk("R3", 40), _risk("R4", 5)]
        output = self.analyzer.analyze(self._input(activities, risks))

        assert len(output.combined_scenarios) == 4
        assert output.combined_scenarios[-1].risk_ids == ["R1", "R2", "R3"]
        assert all("R4" not in s.risk_ids for s in output.combined_scenarios)

    def test_scenarios_use_propagated_probability(self, activities):
        risks = [_risk("R1", 80, relations=[("R2", 0.5)]), _risk("R2", 30)]
        output = self.analyzer.analyze(self._input(activities, risks))
        [scenario] = output.combined_scenarios
        assert scenario.average_probability == pytest.approx(75)

    def test_custom_top_count(self, activities):
        analyzer = RiskBehaviorAnalyzer(top_scenario_risks=2)
        risks = [_risk("R1", 90), _risk("R2", 60), _risk("R3", 40)]
        output = analyzer.analyze(self._input(activities, risks))
        assert [s.risk_ids for s in output.combined_scenarios] == [["R1", "R2"]]

    def test_cyclic_relations(self, activities):
        risks = [
            _risk("A", 60, relations=[("B", 1.0)]),
            _risk("B", 60, relations=[("A", 1.0)]),
        ]
        output = self.analyzer.analyze(self._input(activities, risks))
        assert all(p.final_probability == 100 for p in output.propagation_results)


class TestMonteCarlo:
    def setup_method(self):
        self.analyzer = RiskBehaviorAnalyzer()

    def test_iterations_clamped_to_minimum(self, analysis_input):
        output = self.analyzer.analyze(
            analysis_input, enable_monte_carlo=True, monte_carlo_iterations=100, seed=1,
        )
        assert output.monte_carlo is not None
        assert output.monte_carlo.iterations == settings.monte_carlo_min_iterations

    def test_iterations_clamped_to_maximum(self, analysis_input):
        output = self.analyzer.analyze(
            analysis_input, enable_monte_carlo=True, monte_carlo_iterations=50000, seed=1,
        )
        assert output.monte_carlo.iterations == settings.monte_carlo_max_iterations

    def test_default_iterations(self, analysis_input):
        output = self.analyzer.analyze(analysis_input, enable_monte_carlo=True, seed=1)
        assert output.monte_carlo.iterations == settings.monte_carlo_default_iterations

    def test_summary_in_output(self, analysis_input):
        output = self.analyzer.analyze(
            analysis_input, enable_monte_carlo=True, seed=3, deadline=15, budget=1500,
        )
        data = output.to_dict()["monteCarlo"]
        assert data["enabled"] is True
        assert data["totalCostDistribution"]["percentiles"]["p10"] >= 1500
        assert 0 <= data["probabilityOverDeadline"] <= 1
        assert 0 <= data["probabilityOverBudget"] <= 1

    def test_seeded_runs_match(self, analysis_input):
        first = self.analyzer.analyze(analysis_input, enable_monte_carlo=True, seed=9)
        second = self.analyzer.analyze(analysis_input, enable_monte_carlo=True, seed=9)
        assert first.monte_carlo == second.monte_carlo

    def test_artifact_only_project(self):
        data = AnalysisInput(
            activities=[Activity(id="M1", title="Milestone", level=1)],
            risks=[_risk("R1", 50, affected=("M1",))],
        )
        output = self.analyzer.analyze(data, enable_monte_carlo=True, seed=1)
        assert output.monte_carlo.total_cost_distribution.mean == 0
        assert output.per_risk_analysis[0].expected_time_impact == 0

"""
Pydantic schemas: the wire contract of the engine.

- inputs: Activity, Risk, RiskRelation, AnalysisInput
- outputs: RiskAnalysis, CombinedScenario, PropagationResult, MonteCarloSummary, AnalysisOutput
"""

"""
RiskBehavior: Risk Behavior Analysis Engine.

Quantifies how project risks affect schedule and cost, producing a ranked,
explainable behavior score per risk plus scenario and uncertainty outputs.

Architecture:
    riskbehavior/
    ├── schemas/         # Pydantic input/output models (wire contract)
    ├── pipeline/        # Input validation (field-scoped issues)
    ├── engine/          # Enrichment, impact, propagation, scenarios, Monte Carlo
    └── export/          # JSON / CSV export of analysis output

Data Flow:
    Validate → Enrich → Score (two pass) → Propagate → Recompute impacts
    → Combined scenarios → Rank → Monte Carlo (optional) → AnalysisOutput

Module Boundaries:
    - The engine is a pure function of its inputs plus a random source
    - The engine never re-validates; callers run the validator first
    - Nothing persists between runs
"""

__version__ = "1.0.0"

"""
RiskBehavior Algorithm Engine.

Components:
- enrichment: derived activity fields (durationDays, baselineCost)
- network: risk relation graph, degree centrality
- impact: per-risk impact, sensitivity, two-stage behavior score
- propagation: probability contagion (roster relaxation + single-source traversal)
- scenarios: combined impact of risk subsets over shared activities
- monte_carlo: Bernoulli/triangular cost and duration simulation
- analyzer: orchestrates the full run
"""

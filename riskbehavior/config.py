"""
RiskBehavior Configuration.

Pydantic Settings v2, loaded from .env and environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RISKBEHAVIOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────────────────
    app_name: str = "RiskBehavior"
    app_version: str = "1.0.0"

    # ── Risk network ──────────────────────────────────────────────────────
    default_relation_strength: float = Field(default=0.3, ge=0.0, le=1.0)
    propagation_passes: int = Field(default=3, ge=1)
    propagation_threshold: float = Field(
        default=0.1, ge=0.0,
        description="Probability increases at or below this are ignored as noise",
    )
    propagation_max_depth: int = Field(default=3, ge=0)

    # ── Behavior score weights ────────────────────────────────────────────
    score_weight_time: float = 0.35
    score_weight_cost: float = 0.25
    score_weight_centrality: float = 0.20
    score_weight_time_sensitivity: float = 0.15
    score_weight_detectability: float = 0.05

    # First scoring pass runs against these before the real maxima are known
    placeholder_max_time_impact: float = 1000.0
    placeholder_max_cost_impact: float = 100000.0

    # ── Combined scenarios ────────────────────────────────────────────────
    combined_impact_cap: float = Field(default=200.0, gt=0.0)
    top_scenario_risks: int = Field(default=3, ge=2)

    # ── Monte Carlo ───────────────────────────────────────────────────────
    monte_carlo_default_iterations: int = 7500
    monte_carlo_min_iterations: int = 5000
    monte_carlo_max_iterations: int = 10000
    triangular_low_factor: float = 0.8
    triangular_high_factor: float = 1.2

    # ── Operational ────────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = Field(default="console", description="console | json")


settings = Settings()

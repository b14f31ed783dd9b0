"""
Configuration management using pydantic-settings.
All settings loaded from environment variables (12-factor app).
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="info", description="Log level")
    log_format: str = Field(default="json", description="Log format (json|console)")
    dev_mode: bool = Field(default=True, description="Development mode")

    # Mitigation optimization
    feasibility_threshold: float = Field(
        default=0.70,
        ge=0.0,
        le=1.0,
        description="Minimum feasibility for a mitigation action to be eligible",
    )
    knapsack_max_capacity: int = Field(
        default=100_000,
        ge=1,
        description="Maximum knapsack table width; larger budgets are bucketed",
    )

    # Impact aggregation
    impact_decay_factor: float = Field(
        default=0.8,
        gt=0.0,
        le=1.0,
        description="Per-level financial decay applied to downstream constraints",
    )
    default_currency: str = Field(
        default="USD", description="Currency reported for empty aggregations"
    )

    # Scenario handling
    strict_id_resolution: bool = Field(
        default=False,
        description="Raise NotFound for unknown ids in scenario creation/comparison",
    )
    snapshot_confidence: float = Field(
        default=0.85,
        ge=0.0,
        le=1.0,
        description="Confidence stamped on operational snapshots",
    )

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Only json and console renderers are supported."""
        v = v.strip().lower()
        if v not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v

    @field_validator("default_currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Normalize to an upper-case ISO 4217 style code."""
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError("default_currency must be a 3-letter currency code")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure singleton behavior.
    """
    return Settings()

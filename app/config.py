"""
Application configuration using Pydantic Settings.
"""

import os
from functools import lru_cache
from typing import Dict
from pydantic_settings import BaseSettings

from app.calculations.models import AttributionModel
from app.calculations.scenarios import DEFAULT_EXTRA_PAYMENT_TIERS, DEFAULT_RISK_LEVEL_RATES


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "Personal Finance Calculator"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Calculation policy
    default_attribution_model: AttributionModel = AttributionModel.SEGREGATED
    extra_payment_in_interest_only: bool = False
    scenario_workers: int = 1

    # Comparison scenarios
    comparison_rate_delta: float = 0.5
    comparison_term_delta_years: int = 5
    comparison_min_rate: float = 0.1
    comparison_min_term_years: int = 15
    comparison_max_term_years: int = 40

    # Named tiers
    extra_payment_tiers: Dict[str, float] = dict(DEFAULT_EXTRA_PAYMENT_TIERS)
    risk_level_rates: Dict[str, float] = dict(DEFAULT_RISK_LEVEL_RATES)

    # Affordability (debt-to-income ratios)
    front_end_dti_ratio: float = 0.28
    back_end_dti_ratio: float = 0.36

    class Config:
        env_file = get_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

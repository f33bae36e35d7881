"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    environment: str = _ENVIRONMENT
    log_level: str = "INFO"
    timezone: str = "UTC"
    trend_weeks: int = 8
    compliance_days: int = 28
    comparison_days: int = 7
    streak_history_days: int = 30
    recommended_calorie_tolerance: float = 0.1
    min_weekly_measurements: int = 2
    top_goals: int = 3

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

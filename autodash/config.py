"""Application configuration settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    # OpenAI-compatible suggestion service
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: Optional[str] = None  # e.g. https://openrouter.ai/api/v1
    llm_temperature: float = 0.3
    llm_timeout_seconds: float = 30.0
    llm_max_retries: int = 2

    # Application Configuration
    app_name: str = "Autodash"
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    # Schema inference policy
    type_dominance_threshold: float = 0.8
    measure_min_unique_values: int = 5
    sample_value_count: int = 5

    # Filter policy
    filter_min_options: int = 2
    filter_max_options: int = 50

    # Suggestion policy
    pie_max_categories: int = 10
    max_suggested_kpis: int = 4
    max_suggested_charts: int = 4
    fingerprint_length: int = 20


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings

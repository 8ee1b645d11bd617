"""
Application configuration and settings.
Centralized configuration management using Pydantic Settings.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tutor_relay.services.providers import PROVIDERS


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Other tools share the same .env files, so unknown keys are ignored
    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        env_file=[".env", ".env.local"],  # .env.local overrides .env
    )

    # Application settings
    app_name: str = "English Tutor Relay"
    environment: str = Field(
        default="local",
        validation_alias=AliasChoices("ENVIRONMENT", "SYSTEM_ENVIRONMENT"),
    )

    # Logging settings
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Upstream provider settings
    tutor_provider: str = Field(
        default="deepseek", validation_alias="TUTOR_PROVIDER"
    )
    tutor_model: Optional[str] = Field(default=None, validation_alias="TUTOR_MODEL")
    upstream_base_url: Optional[str] = Field(
        default=None, validation_alias="UPSTREAM_BASE_URL"
    )
    upstream_timeout_seconds: float = Field(
        default=30.0, validation_alias="UPSTREAM_TIMEOUT_SECONDS"
    )

    # Provider credentials
    deepseek_api_key: str = Field(default="", validation_alias="DEEPSEEK_API_KEY")
    openai_api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")

    @field_validator("tutor_provider")
    @classmethod
    def check_tutor_provider(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in PROVIDERS:
            raise ValueError(f"must be one of {sorted(PROVIDERS)}")
        return value

    @property
    def credentials(self) -> List[str]:
        """Every configured provider API key, used to scrub error output."""
        values = (getattr(self, spec.credential_name.lower(), "") for spec in PROVIDERS.values())
        return [value.strip() for value in values if value and value.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_local(self) -> bool:
        """Check if running in local development environment."""
        return self.environment == "local"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()

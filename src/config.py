"""Application configuration via pydantic-settings.

All secrets are loaded from environment variables (.env file).
Settings are organized into logical groups and composed into a single Settings object.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CommercetoolsSettings(BaseSettings):
    """Commerce platform API client credentials and endpoints."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ctp_project_key: str = Field(default="", description="Project key used in every API path")
    ctp_client_id: str = Field(default="", description="API client id")
    ctp_client_secret: str = Field(default="", description="API client secret")
    ctp_scope: str = Field(default="", description="Space-separated OAuth scopes (optional)")
    ctp_auth_url: str = Field(
        default="https://auth.europe-west1.gcp.commercetools.com",
        description="OAuth token service base URL",
    )
    ctp_api_url: str = Field(
        default="https://api.europe-west1.gcp.commercetools.com",
        description="HTTP API base URL",
    )
    ctp_timeout: float = Field(default=10.0, description="Request timeout in seconds")


class AssignmentSettings(BaseSettings):
    """Customer group assignment rules."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Kept raw: parsing (and recovering from bad values) happens at startup
    # in src.assignment.mapping so a broken value never blocks the service.
    cgroup_to_product_type_map: str = Field(
        default="{}",
        description='JSON object, e.g. {"cg-vip": ["pt-electronics", "pt-premium"]}',
    )


class Settings(BaseSettings):
    """Root settings composing all sub-settings.

    Usage:
        settings = Settings()
        settings.commercetools.ctp_project_key
        settings.assignment.cgroup_to_product_type_map
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")
    port: int = Field(default=8080)

    # Composed settings (loaded from same .env)
    commercetools: CommercetoolsSettings = Field(default_factory=CommercetoolsSettings)
    assignment: AssignmentSettings = Field(default_factory=AssignmentSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            msg = f"Invalid log level: {v}. Must be one of {valid}"
            raise ValueError(msg)
        return upper


# Module-level singleton — import this wherever settings are needed.
settings = Settings()

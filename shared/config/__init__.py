"""Shared configuration base classes.

Settings are read from the environment (and an optional ``.env`` file) by
pydantic-settings. Service settings inherit from these bases and add their own
fields.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseLoggingConfig(BaseSettings):
    """Common logging configuration."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_log_level: str = "INFO"
    # json | text
    app_log_format: str = "json"
    app_log_redaction_patterns: list[str] = [
        "password",
        "token",
        "secret",
        "authorization",
        "cookie",
    ]
    app_environment: str = "production"


class BaseServiceConfig(BaseLoggingConfig):
    """Base configuration for a runnable service.

    The otel_service_name should be overridden by each service.
    """

    otel_service_name: str = "unknown"  # Should be overridden by service


__all__ = ["BaseLoggingConfig", "BaseServiceConfig"]

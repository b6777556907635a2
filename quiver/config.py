"""Configuration loading for the Quiver test launcher.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Launcher configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support. Every variable carries the ``QUIVER_`` prefix,
    e.g. ``QUIVER_LOG_LEVEL=DEBUG``.
    """

    model_config = SettingsConfigDict(
        env_prefix="QUIVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Plugin discovery
    engine_entry_point_group: str = Field(
        default="quiver.engines",
        description="Entry point group engines are loaded from",
    )
    listener_entry_point_group: str = Field(
        default="quiver.listeners",
        description="Entry point group execution listeners are loaded from",
    )
    auto_register_listeners: bool = Field(
        default=True,
        description="Register listeners found in the listener entry point group",
    )

    # Engine contract enforcement
    strict_engine_contracts: bool = Field(
        default=False,
        description="Raise instead of logging when an engine returns no root node",
    )

    # Defaults handed to engines through every request
    configuration_parameters: dict[str, str] = Field(
        default_factory=dict,
        description="Fallback configuration parameters (JSON object in the environment)",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    @field_validator("engine_entry_point_group", "listener_entry_point_group")
    @classmethod
    def validate_entry_point_group(cls, v: str) -> str:
        """Ensure entry point groups are non-blank."""
        if not v or not v.strip():
            raise ValueError("entry point group must be a non-empty string")
        return v.strip()

    @field_validator("configuration_parameters")
    @classmethod
    def validate_configuration_parameters(cls, v: dict[str, str]) -> dict[str, str]:
        """Ensure configuration parameter keys are non-blank."""
        for key in v:
            if not key or not key.strip():
                raise ValueError("configuration parameter keys must be non-empty strings")
        return v


def load_settings(env_file: str | None = None) -> Settings:
    """Load launcher settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]

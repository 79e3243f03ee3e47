"""Centralized configuration management using pydantic-settings.

Configuration is loaded from environment variables with sensible defaults.
All settings can be overridden via environment variables or a .env file.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Override via environment variables (prefixed with QB_) or a .env file.

    Examples:
        QB_SQLITE_PATH=/var/lib/quotebook/quotebook.db
        QB_LOG_LEVEL=DEBUG
        QB_ENVIRONMENT=production
    """

    model_config = SettingsConfigDict(
        env_prefix="QB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Quotebook"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = Field(default=False, description="Enable debug mode")

    # Database
    sqlite_path: Path = Field(
        default=Path("quotebook.db"),
        description="SQLite database file path",
    )

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format: 'json' for production, 'console' for development",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    # API Server
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    api_reload: bool = Field(
        default=False, description="Enable auto-reload (development only)"
    )

    # Defaults used when the settings record is created for the first time
    default_currency: str = Field(default="USD", min_length=3, max_length=3)
    default_template_id: str = "classic"

    @field_validator("debug", mode="before")
    @classmethod
    def set_debug_from_environment(cls, v: bool, info) -> bool:
        """Auto-enable debug in development environment."""
        if info.data.get("environment") == Environment.DEVELOPMENT:
            return True
        return v

    @field_validator("default_currency", mode="after")
    @classmethod
    def uppercase_currency(cls, v: str) -> str:
        return v.upper()

    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.sqlite_path}"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()

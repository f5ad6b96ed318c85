"""Configuration management for SchemaProxy.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded at process
startup and is immutable during runtime.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SCHEMAPROXY_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "SchemaProxy"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 3434

    # Descriptor Storage Settings
    resources_directory: str = "./resources"
    descriptor_filename: str = "config.json"

    # Backend Settings
    backend_url: str = "http://localhost:3123"
    backend_admin_header: str = "dpd-ssh-key"
    backend_admin_key: str = Field(
        default="change-me",
        description="Credential sent on administrative backend calls",
    )
    backend_timeout_seconds: float | None = Field(
        default=None,
        description="Timeout for backend calls; None waits indefinitely",
    )

    # Concurrency Settings
    serialize_collection_writes: bool = True

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("backend_url")
    @classmethod
    def validate_backend_url(cls, v: str) -> str:
        """Require an http(s) URL and strip trailing slashes."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("backend_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("descriptor_filename")
    @classmethod
    def validate_descriptor_filename(cls, v: str) -> str:
        """Descriptor filename must be a bare file name."""
        if not v or "/" in v or "\\" in v:
            raise ValueError("descriptor_filename must be a plain file name")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once at startup.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()

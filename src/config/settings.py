"""
Application settings - pydantic-settings configuration.

This module defines application configuration using pydantic-settings
for environment variable loading with validation and defaults.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Storage configuration
    users_file: str = "./users.json"  # JSON snapshot location

    # Identity settings
    id_max_attempts: int = Field(default=5, ge=1)  # Id draws before giving up

    # Security settings
    bcrypt_cost: int = Field(default=10, ge=4, le=31)  # bcrypt work factor

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""
Configuration Settings

This module defines application configuration using Pydantic Settings.
All configuration is loaded from environment variables or .env file.

Design Decisions:
- Uses pydantic-settings for type-safe configuration
- Supports multiple environments (production, staging, dev)
- Defaults to SQLite (file-based) for easy local development
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings", "settings"]


class EnvSettingsOptions(Enum):
    """Environment options for deployment."""
    production = "production"
    staging = "staging"
    development = "dev"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    ENV_SETTING: EnvSettingsOptions = Field(
        default=EnvSettingsOptions.development,
        description="Environment setting (production, staging, dev)"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level applied at startup"
    )

    # Database Configuration
    # For SQLite: sqlite+aiosqlite:///./shortener.db (default)
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./shortener.db",
        description="Database connection string"
    )
    STORE_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        description="How long a store call waits on a locked database before failing"
    )
    AUTO_CREATE_TABLES: bool = Field(
        default=True,
        description="Create missing tables on startup (disable when running Alembic migrations)"
    )

    BASE_URL: str = Field(
        default="http://localhost:8000",
        description="Base URL for generating short URLs"
    )

    # Short code derivation
    SHORT_CODE_LENGTH: int = Field(
        default=8,
        description="Number of leading SHA-256 hex characters kept as the short code"
    )
    MAX_DERIVATION_ATTEMPTS: int = Field(
        default=5,
        description="Salted candidates tried before a hash collision is reported as a conflict"
    )
    MAX_URL_LENGTH: int = Field(
        default=2048,
        description="Longest original URL accepted"
    )

    # Credentials
    API_TOKEN_BYTES: int = Field(
        default=24,
        description="Random bytes behind each generated API credential"
    )
    TOKEN_GENERATION_ATTEMPTS: int = Field(
        default=3,
        description="Attempts at generating a unique API credential"
    )

    POPULAR_LIMIT: int = Field(
        default=10,
        description="Default number of records returned by the popularity ranking"
    )


settings = Settings()

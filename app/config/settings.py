"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management using Pydantic Settings.

This module implements the Singleton pattern to ensure a single global
configuration instance throughout the application lifecycle.

Features:
---------
- Environment variable loading with type validation
- .env file support for local development
- Computed properties for derived values
- Cached singleton accessor

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

Storage Notes:
-------------
- DATABASE_URL points at the Snapshot Store database (SQLite by default)
- LEGACY_STORE_URL selects the Legacy String Store backend: a
  ``redis://`` URL uses Redis, an empty value uses the in-process store
- GEMINI_API_KEY enables the voice/text command interpreter

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number
        database_url: SQLAlchemy URL of the Snapshot Store database
        legacy_store_url: Redis URL for the Legacy String Store (optional)
        mirror_size_limit: Byte ceiling for the legacy backup mirror
        default_currency: Currency symbol used when none is persisted
        gemini_api_key: API key for the natural-language classifier
        gemini_model: Model name used by the classifier
        placeholder_image_url: Image assigned to command-created products
        cors_origins: Allowed CORS origins (JSON array string)

    Example:
        >>> settings = Settings()
        >>> print(settings.app_name)
        'Royal Inventory API'
        >>> print(settings.uses_redis)
        False
    """

    # =========================================================================
    # PYDANTIC SETTINGS CONFIGURATION
    # =========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="Royal Inventory API",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=True,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # STORAGE SETTINGS
    # =========================================================================
    database_url: str = Field(
        default="sqlite:///./storage/db/inventory.db",
        description="SQLAlchemy connection string for the Snapshot Store"
    )

    legacy_store_url: str = Field(
        default="",
        description="Redis URL for the Legacy String Store; empty uses memory"
    )

    mirror_size_limit: int = Field(
        default=4_500_000,
        ge=0,
        description="Maximum serialized size mirrored into the legacy backup key"
    )

    # =========================================================================
    # CATALOG SETTINGS
    # =========================================================================
    default_currency: str = Field(
        default="$",
        min_length=1,
        max_length=8,
        description="Currency symbol used when none is persisted"
    )

    placeholder_image_url: str = Field(
        default=(
            "https://images.unsplash.com/photo-1556228453-efd6c1ff04f6"
            "?auto=format&fit=crop&q=80&w=400"
        ),
        description="Image assigned to products created by voice command"
    )

    # =========================================================================
    # COMMAND INTERPRETER SETTINGS
    # =========================================================================
    gemini_api_key: str = Field(
        default="",
        description="API key for the natural-language classifier"
    )

    gemini_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used to classify inventory commands"
    )

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """
        Validate and normalize application environment.

        Args:
            value: Raw environment value

        Returns:
            Lowercase normalized environment name
        """
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("legacy_store_url")
    @classmethod
    def validate_legacy_store_url(cls, value: str) -> str:
        """
        Validate the Legacy String Store URL scheme.

        Raises:
            ValueError: If a non-Redis URL is configured
        """
        value = value.strip()
        if value and not value.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError(
                f"Unsupported legacy store URL: {value}. "
                "Use a redis:// URL or leave empty for the in-memory store"
            )
        return value

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def uses_redis(self) -> bool:
        """Check if the Legacy String Store is backed by Redis."""
        return bool(self.legacy_store_url)

    @property
    def commands_enabled(self) -> bool:
        """Check if the natural-language classifier is configured."""
        return bool(self.gemini_api_key)

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================
    def get_database_path(self) -> Optional[Path]:
        """
        Extract database file path for SQLite databases.

        Returns:
            Path to database file, or None for in-memory or non-SQLite databases
        """
        if self.database_url.startswith("sqlite:///"):
            db_path = self.database_url.replace("sqlite:///", "")
            if db_path.startswith("./"):
                db_path = db_path[2:]
            if not db_path or db_path == ":memory:":
                return None
            return Path(db_path)
        return None

    def ensure_directories(self) -> None:
        """Create the Snapshot Store database directory (SQLite only)."""
        db_path = self.get_database_path()
        if db_path:
            db_path.parent.mkdir(parents=True, exist_ok=True)

        logger.debug("Required directories created/verified")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"debug={self.debug}, "
            f"uses_redis={self.uses_redis})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance (singleton pattern).

    Returns:
        Global Settings instance
    """
    settings = Settings()

    settings.ensure_directories()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings

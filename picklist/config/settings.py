"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management using Pydantic Settings.

Settings are cached by ``get_settings()`` so the whole process shares one
instance. The database itself is NOT a singleton: the application builds a
``DatabaseManager`` from these settings at startup.

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

Security Considerations:
-----------------------
- Never commit .env files to version control
- Use a strong JWT_SECRET_KEY in production

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
        debug: Enable debug mode for verbose logging and SQL echo
        host: Server bind address
        port: Server port number
        database_url: SQLAlchemy database connection string
        sqlite_busy_timeout_seconds: How long SQLite writers wait for a lock
        pool_size: Pooled connections for non-SQLite databases
        max_overflow: Extra connections allowed under load
        jwt_secret_key: Secret key for JWT token signing
        jwt_algorithm: Algorithm for JWT signing (e.g., HS256)
        jwt_issuer: Issuer claim stamped on every token
        access_token_expire_days: Token lifetime in days
        free_order_sentinel: Order reference marking "not a real order"
        unknown_label: Label rendered for missing brand/supplier
        request_timeout_seconds: Deadline applied around storage calls
        seed_sample_data: Insert sample rows at startup (non-production)
        cors_origins: Allowed CORS origins (JSON array string)
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
        default="Picklist API",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=False,
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
    # DATABASE SETTINGS
    # =========================================================================
    database_url: str = Field(
        default="sqlite:///./storage/db/picklist.db",
        description="SQLAlchemy database connection string"
    )

    sqlite_busy_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Seconds a SQLite writer waits on a locked database"
    )

    pool_size: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Connection pool size for server databases"
    )

    max_overflow: int = Field(
        default=10,
        ge=0,
        le=200,
        description="Additional connections allowed under load"
    )

    # =========================================================================
    # JWT AUTHENTICATION SETTINGS
    # =========================================================================
    jwt_secret_key: str = Field(
        default="picklist-change-this-in-production",
        min_length=16,
        description="Secret key for JWT token signing"
    )

    jwt_algorithm: str = Field(
        default="HS256",
        description="Algorithm for JWT signing"
    )

    jwt_issuer: str = Field(
        default="picklist-app",
        description="Issuer claim for tokens"
    )

    access_token_expire_days: int = Field(
        default=90,
        ge=1,
        le=365,
        description="Access token lifetime in days"
    )

    # =========================================================================
    # PICK SYSTEM SETTINGS
    # =========================================================================
    free_order_sentinel: str = Field(
        default="#FREE",
        min_length=1,
        description="Order reference that excludes an item from all work"
    )

    unknown_label: str = Field(
        default="Unknown",
        description="Label used when brand or supplier is missing"
    )

    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Deadline for a single storage-bound operation"
    )

    seed_sample_data: bool = Field(
        default=False,
        description="Insert sample picks at startup (never in production)"
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

        Unknown values fall back to 'development' with a warning.
        """
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, value: str) -> str:
        """
        Validate JWT algorithm is supported.

        Raises:
            ValueError: If algorithm is not supported
        """
        supported = {"HS256", "HS384", "HS512"}

        if value.upper() not in supported:
            raise ValueError(
                f"Unsupported JWT algorithm: {value}. "
                f"Supported: {', '.join(sorted(supported))}"
            )

        return value.upper()

    @field_validator("free_order_sentinel")
    @classmethod
    def validate_sentinel(cls, value: str) -> str:
        """Sentinel must not be blank once trimmed."""
        if not value.strip():
            raise ValueError("free_order_sentinel cannot be blank")
        return value.strip()

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured database is SQLite."""
        return self.database_url.startswith("sqlite")

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

    @property
    def access_token_expire_seconds(self) -> int:
        """Get access token expiry in seconds."""
        return self.access_token_expire_days * 24 * 60 * 60

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================
    def get_database_path(self) -> Optional[Path]:
        """
        Extract database file path for SQLite databases.

        Returns:
            Path to database file, or None for in-memory/non-SQLite databases
        """
        if not self.is_sqlite:
            return None

        db_path = self.database_url.split("///", 1)[-1] if "///" in self.database_url else ""
        if not db_path or db_path == ":memory:":
            return None
        if db_path.startswith("./"):
            db_path = db_path[2:]
        return Path(db_path)

    def ensure_directories(self) -> None:
        """Create the SQLite database directory if needed."""
        db_path = self.get_database_path()
        if db_path:
            db_path.parent.mkdir(parents=True, exist_ok=True)

        logger.debug("Required directories created/verified")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"debug={self.debug})"
        )


# =============================================================================
# CACHED INSTANCE
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the process-wide Settings instance.

    Returns:
        Cached Settings instance
    """
    settings = Settings()

    settings.ensure_directories()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings

"""
==============================================================================
Application Settings Module
==============================================================================

Production-grade configuration management using Pydantic Settings.

This module implements the Singleton pattern to ensure a single global
configuration instance throughout the application lifecycle.

Features:
---------
- Environment variable loading with type validation
- .env file support for local development
- Enumerated duplicate handling policy validated at load time
- Computed properties for derived values

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

==============================================================================
"""

from __future__ import annotations

import enum
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


class DuplicateHandling(str, enum.Enum):
    """
    Duplicate suppression policy for a scan session.

    - BLOCK: a code already present in the session log is dropped
    - ALLOW: every accepted detection is recorded
    """

    BLOCK = "block"
    ALLOW = "allow"

    def __str__(self) -> str:
        """Return the enum value as string."""
        return self.value


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number
        database_url: SQLAlchemy database connection string
        duplicate_handling: Duplicate policy (block/allow)
        scan_speed_ms: Interval between frames pushed by scanning clients
        google_sheets_url: Spreadsheet web-app endpoint (empty disables sync)
        sheet_name: Target sheet for synced rows
        auto_sync: Sync after every accepted batch of scans
        sync_timeout_seconds: HTTP timeout for sync requests
        default_user: Operator name used when none is supplied
        recent_limit: Size of the recent scans list
        max_storage_kb: Storage budget used for the usage gauge
        export_directory: Directory for CSV exports and backups
        cors_origins: Allowed CORS origins (JSON array string)

    Example:
        >>> settings = Settings()
        >>> settings.duplicate_handling
        <DuplicateHandling.BLOCK: 'block'>
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
        default="IMEI/UPC Scanner API",
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
        default="sqlite:///./storage/db/scans.db",
        description="SQLAlchemy database connection string"
    )

    # =========================================================================
    # SCANNING SETTINGS
    # =========================================================================
    duplicate_handling: DuplicateHandling = Field(
        default=DuplicateHandling.BLOCK,
        description="Duplicate policy: block or allow"
    )

    scan_speed_ms: int = Field(
        default=100,
        ge=20,
        le=2000,
        description="Frame interval for scanning clients in milliseconds"
    )

    default_user: str = Field(
        default="operator",
        min_length=1,
        max_length=50,
        description="Operator name used when none is supplied"
    )

    recent_limit: int = Field(
        default=25,
        ge=1,
        le=500,
        description="Number of scans returned by the recent list"
    )

    # =========================================================================
    # SYNC SETTINGS
    # =========================================================================
    google_sheets_url: str = Field(
        default="",
        description="Spreadsheet web-app URL, empty disables sync"
    )

    sheet_name: str = Field(
        default="scanning manu",
        description="Target sheet name for synced rows"
    )

    auto_sync: bool = Field(
        default=True,
        description="Sync after each accepted batch of scans"
    )

    sync_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="HTTP timeout for sync requests"
    )

    # =========================================================================
    # STORAGE SETTINGS
    # =========================================================================
    max_storage_kb: int = Field(
        default=50 * 1024,
        ge=1,
        description="Storage budget in KB for the usage gauge"
    )

    export_directory: str = Field(
        default="storage/exports",
        description="Directory for CSV exports and backups"
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

    @field_validator("duplicate_handling", mode="before")
    @classmethod
    def normalize_duplicate_handling(cls, value):
        """Accept any casing and surrounding whitespace for the policy."""
        if isinstance(value, str):
            return value.lower().strip()
        return value

    @field_validator("google_sheets_url")
    @classmethod
    def validate_sheets_url(cls, value: str) -> str:
        """
        Validate the sync endpoint.

        Raises:
            ValueError: If a non-empty value is not an http(s) URL
        """
        value = value.strip()
        if value and not value.startswith(("http://", "https://")):
            raise ValueError(f"Sync URL must be http(s): {value}")
        return value

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def sync_enabled(self) -> bool:
        """Sync is possible only when an endpoint is configured."""
        return bool(self.google_sheets_url)

    @property
    def export_path(self) -> Path:
        """
        Get export directory as Path object.

        Creates the directory if it doesn't exist.
        """
        path = Path(self.export_directory)
        path.mkdir(parents=True, exist_ok=True)
        return path

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
            Path to database file, or None for non-SQLite or in-memory databases
        """
        if not self.database_url.startswith("sqlite:///"):
            return None

        db_path = self.database_url.replace("sqlite:///", "")
        if not db_path or db_path == ":memory:":
            return None
        if db_path.startswith("./"):
            db_path = db_path[2:]
        return Path(db_path)

    def ensure_directories(self) -> None:
        """Create the database directory (SQLite only)."""
        db_path = self.get_database_path()
        if db_path:
            db_path.parent.mkdir(parents=True, exist_ok=True)

        logger.debug("Required directories created/verified")

    def public_view(self) -> dict:
        """Settings exposed to clients and included in backups."""
        return {
            "duplicate_handling": self.duplicate_handling.value,
            "scan_speed_ms": self.scan_speed_ms,
            "sheet_name": self.sheet_name,
            "auto_sync": self.auto_sync,
            "sync_enabled": self.sync_enabled,
            "recent_limit": self.recent_limit,
            "max_storage_kb": self.max_storage_kb,
        }

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"duplicate_handling={self.duplicate_handling.value!r})"
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

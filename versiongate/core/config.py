"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: Uses the mock backend client (no Supabase keys needed)
    - STAGING / PRODUCTION: Talks to the hosted Supabase backend

The ENV_MODE variable controls which backend client is instantiated,
enabling seamless switching between local testing and a live backend.

The same settings object also carries the deployed-version table used by
the migration compatibility checker. Those values are maintained by hand
at release time (DEPLOYED_*_VERSION) and are only as fresh as whoever
last updated them.

Usage:
    from versiongate.core.config import get_settings

    settings = get_settings()
    if settings.is_development:
        # Use mock backend
    else:
        # Use Supabase

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from typing import Optional, TextIO
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from versiongate.schemas import (
    AppName,
    ApiVersion,
    ClientIdentity,
    CURRENT_API_VERSION,
)


class ConfigurationError(ValueError):
    """Raised when required configuration is missing. Not recoverable."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            f"Missing required configuration: {', '.join(missing)}. "
            "Set it in your .env file or environment variables."
        )


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with the mock backend
        PRODUCTION: Live environment against the hosted backend
        STAGING: Pre-production backend
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class MigrationSettings(BaseSettings):
    """
    Settings read by the migration compatibility checker.

    The checker loads only these, so runtime-only variables such as
    APP_NAME never reach it. Empty variables fall back to their defaults,
    the same as unset ones.

    Attributes:
        deployed_*_version: Version currently live for each app
        migrations_dir / safe_migrations_dir: Where migrations live
        migration_template_name: Template file skipped by the checker
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # DEPLOYED VERSIONS (MIGRATION CHECKER)
    # ==========================================================================

    deployed_web_version: str = Field(
        default="1.3.0",
        description="Web dashboard version currently in production"
    )
    deployed_customer_version: str = Field(
        default="1.2.0",
        description="Customer iOS app version currently on the App Store"
    )
    deployed_business_version: str = Field(
        default="1.2.0",
        description="Business iOS app version currently on the App Store"
    )

    # ==========================================================================
    # MIGRATION FILES
    # ==========================================================================

    migrations_dir: str = Field(
        default="supabase/migrations",
        description="Primary migrations directory"
    )
    safe_migrations_dir: str = Field(
        default="supabase/safe_migrations",
        description="Additive/safe migrations directory"
    )
    migration_template_name: str = Field(
        default="MIGRATION_TEMPLATE.sql",
        description="Template file ignored in the safe migrations directory"
    )

    @property
    def deployed_versions(self) -> dict[str, str]:
        """Deployed version per app name, as configured."""
        return {
            AppName.WEB.value: self.deployed_web_version,
            AppName.CUSTOMER.value: self.deployed_customer_version,
            AppName.BUSINESS.value: self.deployed_business_version,
        }


class Settings(MigrationSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Sensitive values (API keys) should NEVER be committed to version control.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging

        # Client identity
        app_name: Which client this process is (web/customer/business)
        app_version: Semantic version of this client build
        api_version: Protocol version this client advertises

        # Backend
        supabase_url: Hosted backend base URL
        supabase_anon_key: Public (anon) API key
        http_timeout_seconds: Timeout for every backend call
        feature_flags_ttl_seconds: Feature flag cache lifetime

        (plus every MigrationSettings field)
    """

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # CLIENT IDENTITY
    # ==========================================================================

    app_name: AppName = Field(
        default=AppName.WEB,
        description="Client application name sent as X-App-Name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Client application version sent as X-App-Version"
    )
    api_version: ApiVersion = Field(
        default=CURRENT_API_VERSION,
        description="Protocol version sent as X-Api-Version"
    )

    # ==========================================================================
    # SUPABASE BACKEND
    # ==========================================================================

    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (https://<ref>.supabase.co)"
    )
    supabase_anon_key: Optional[str] = Field(
        default=None,
        description="Supabase anon/public API key"
    )
    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for backend RPC calls"
    )
    feature_flags_ttl_seconds: float = Field(
        default=300.0,
        ge=0,
        description="How long fetched feature flags stay fresh"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    @field_validator("app_name", mode="before")
    @classmethod
    def validate_app_name(cls, v: str) -> AppName:
        """Convert string to AppName enum."""
        if isinstance(v, AppName):
            return v
        try:
            return AppName(v.strip().lower())
        except ValueError:
            valid = [e.value for e in AppName]
            raise ValueError(f"Invalid app_name. Must be one of: {valid}")

    @field_validator("api_version", mode="before")
    @classmethod
    def validate_api_version(cls, v: str) -> ApiVersion:
        """Convert string to ApiVersion enum."""
        if isinstance(v, ApiVersion):
            return v
        try:
            return ApiVersion(v.strip().lower())
        except ValueError:
            valid = [e.value for e in ApiVersion]
            raise ValueError(f"Invalid api_version. Must be one of: {valid}")

    @field_validator("supabase_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        """Normalize the backend URL so paths can be appended safely."""
        if v is None:
            return None
        return v.rstrip("/") or None

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def is_staging(self) -> bool:
        """Check if running in staging mode."""
        return self.env_mode == EnvironmentMode.STAGING

    @property
    def use_real_services(self) -> bool:
        """Check if the hosted backend should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    @property
    def client_identity(self) -> ClientIdentity:
        """Identity of this client build."""
        return ClientIdentity(
            app_name=self.app_name,
            app_version=self.app_version,
            api_version=self.api_version,
        )

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_backend_config(self) -> list[str]:
        """
        Validate that the backend endpoint and key are configured.

        Returns:
            List of missing configuration keys (empty if all present)
        """
        missing = []

        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_anon_key:
            missing.append("SUPABASE_ANON_KEY")

        return missing

    def require_backend_config(self) -> None:
        """
        Fail fast when the backend cannot be reached at all.

        Raises:
            ConfigurationError: If the backend URL or key is missing
        """
        missing = self.validate_backend_config()
        if missing:
            raise ConfigurationError(missing)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are loaded only once per process,
    which also makes the client identity immutable for the process
    lifetime.

    Returns:
        Settings: Configured application settings

    Example:
        >>> settings = get_settings()
        >>> print(settings.env_mode)
        EnvironmentMode.DEVELOPMENT
    """
    return Settings()


@lru_cache()
def get_migration_settings() -> MigrationSettings:
    """Get cached settings for the migration compatibility checker."""
    return MigrationSettings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(
    level: int = logging.INFO,
    stream: Optional[TextIO] = None,
    debug: Optional[bool] = None,
) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        stream: Where log lines go, stdout when None
        debug: Force DEBUG; read from settings when None

    Returns:
        Configured package logger
    """
    if debug is None:
        debug = get_settings().debug

    # Set level based on debug mode
    if debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(stream or sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return logging.getLogger("versiongate")

"""
Core module initialization.
Exports configuration and logging utilities.
"""

from versiongate.core.config import (
    get_settings,
    get_migration_settings,
    Settings,
    MigrationSettings,
    EnvironmentMode,
    ConfigurationError,
)

__all__ = [
    "get_settings",
    "get_migration_settings",
    "Settings",
    "MigrationSettings",
    "EnvironmentMode",
    "ConfigurationError",
]

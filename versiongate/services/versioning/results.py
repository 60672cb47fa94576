"""
Versioning Result Types

Author: Khalil Bannouri
Version: 1.0.0
"""

from dataclasses import dataclass, field
from typing import Optional

from versiongate.schemas import FeatureFlag


@dataclass
class CompatibilityResult:
    """
    Outcome of the schema compatibility check.

    Attributes:
        compatible: Whether this client may use the live schema
        required_version: Minimum client version, when the backend says so
        breaking_changes: Descriptions of changes that broke this client
    """
    compatible: bool
    required_version: Optional[str] = None
    breaking_changes: list[str] = field(default_factory=list)


@dataclass
class InitResult:
    """Startup outcome: schema compatibility plus the active flag set."""
    compatible: bool
    features: list[FeatureFlag] = field(default_factory=list)


@dataclass
class VersionInfo:
    """Version snapshot for diagnostics screens and logs."""
    app_version: str
    app_name: str
    api_version: str
    supported_versions: list[str] = field(default_factory=list)

"""
Pydantic Schemas and Enums

Shared vocabulary between the runtime versioning layer, the backend
client and the migration checker:

- Known client applications and protocol versions
- Minimum client version required for each protocol version
- Feature flag payloads returned by the backend

Author: Khalil Bannouri
Version: 1.0.0
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from versiongate.semver import SemVer, parse


# =============================================================================
# ENUMS
# =============================================================================

class AppName(str, Enum):
    """Client applications that talk to the shared backend."""
    WEB = "web"
    CUSTOMER = "customer"
    BUSINESS = "business"


class ApiVersion(str, Enum):
    """Protocol versions, declared oldest to newest."""
    V1 = "v1"
    V2 = "v2"
    V3 = "v3"


# =============================================================================
# PROTOCOL CONSTANTS
# =============================================================================

CURRENT_API_VERSION = ApiVersion.V3

SUPPORTED_API_VERSIONS: list[ApiVersion] = list(ApiVersion)

# Minimum client app version allowed to speak each protocol version
API_VERSION_REQUIREMENTS: dict[ApiVersion, str] = {
    ApiVersion.V1: "1.0.0",
    ApiVersion.V2: "1.2.0",
    ApiVersion.V3: "1.4.0",
}

ALL_APP_NAMES: list[str] = [app.value for app in AppName]

# Outbound request header names
HEADER_APP_VERSION = "X-App-Version"
HEADER_APP_NAME = "X-App-Name"
HEADER_API_VERSION = "X-Api-Version"


# =============================================================================
# BACKEND PAYLOADS
# =============================================================================

class FeatureFlag(BaseModel):
    """
    Feature flag as returned by ``get_feature_flags``.

    The backend sends ``minVersion`` in camelCase; the snake_case field
    name is accepted as well so flags can be built directly in code.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    feature: str = Field(..., min_length=1, examples=["scheduled_orders"])
    enabled: bool = Field(default=False)
    min_version: Optional[str] = Field(
        default=None,
        alias="minVersion",
        examples=["1.4.0"],
    )

    @field_validator("min_version", mode="before")
    @classmethod
    def blank_min_version_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty minVersion the same as an absent one."""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @property
    def min_semver(self) -> Optional[SemVer]:
        """Parsed minimum version, if the flag declares one."""
        if self.min_version is None:
            return None
        return parse(self.min_version)


class ClientIdentity(BaseModel):
    """
    Who this process is, as advertised to the backend.

    Built once at startup from configuration and never mutated.
    """

    model_config = ConfigDict(frozen=True)

    app_name: AppName
    app_version: str = Field(..., examples=["1.3.0"])
    api_version: ApiVersion = CURRENT_API_VERSION

    @property
    def semver(self) -> SemVer:
        """Parsed app version."""
        return parse(self.app_version)

    def headers(self) -> dict[str, str]:
        """Version headers attached to every backend request."""
        return {
            HEADER_APP_VERSION: self.app_version,
            HEADER_APP_NAME: self.app_name.value,
            HEADER_API_VERSION: self.api_version.value,
        }


__all__ = [
    "AppName",
    "ApiVersion",
    "CURRENT_API_VERSION",
    "SUPPORTED_API_VERSIONS",
    "API_VERSION_REQUIREMENTS",
    "ALL_APP_NAMES",
    "HEADER_APP_VERSION",
    "HEADER_APP_NAME",
    "HEADER_API_VERSION",
    "FeatureFlag",
    "ClientIdentity",
]

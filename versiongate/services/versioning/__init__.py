"""
Versioning Service Factory

Composition root for the runtime versioning layer. Builds one
VersionNegotiator and one CompatibilityGate per process from settings and
the configured backend client.

Usage:
    from versiongate.services.versioning import get_compatibility_gate

    gate = get_compatibility_gate()
    result = await gate.init_versioning()

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from functools import lru_cache

from versiongate.core.config import get_settings
from versiongate.services.backend import get_backend_client
from versiongate.services.versioning.cache import TTLCache
from versiongate.services.versioning.gate import CompatibilityGate
from versiongate.services.versioning.negotiator import VersionNegotiator
from versiongate.services.versioning.results import (
    CompatibilityResult,
    InitResult,
    VersionInfo,
)

logger = logging.getLogger(__name__)


@lru_cache()
def get_version_negotiator() -> VersionNegotiator:
    """
    Get the process-wide version negotiator.

    Returns:
        VersionNegotiator: Negotiator bound to this client's identity
    """
    settings = get_settings()
    identity = settings.client_identity

    negotiator = VersionNegotiator(
        identity=identity,
        backend=get_backend_client(),
        cache=TTLCache(),
        feature_flags_ttl=settings.feature_flags_ttl_seconds,
    )

    logger.info(
        f"Versioning: {identity.app_name.value} v{identity.app_version} "
        f"(api {identity.api_version.value}, best {negotiator.best_api_version().value})"
    )
    return negotiator


@lru_cache()
def get_compatibility_gate() -> CompatibilityGate:
    """Get the process-wide compatibility gate."""
    return CompatibilityGate(get_version_negotiator())


def reset_versioning() -> None:
    """
    Clear the cached negotiator and gate.

    Useful for testing or when configuration changes at runtime.
    """
    get_compatibility_gate.cache_clear()
    get_version_negotiator.cache_clear()
    logger.debug("Versioning cache cleared")


__all__ = [
    "get_version_negotiator",
    "get_compatibility_gate",
    "reset_versioning",
    "VersionNegotiator",
    "CompatibilityGate",
    "CompatibilityResult",
    "InitResult",
    "VersionInfo",
    "TTLCache",
]

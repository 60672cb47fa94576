"""
Compatibility Gate

Confirms, before the client starts using the backend, that the live
schema still supports this client version.

The check fails OPEN: if the backend cannot answer, the client is
assumed compatible so a broken check never takes the app down. This is
the opposite of feature flags, which fail closed, and both behaviors are
kept as they are.

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import logging

from versiongate.services.versioning.negotiator import VersionNegotiator
from versiongate.services.versioning.results import CompatibilityResult, InitResult

logger = logging.getLogger(__name__)


class CompatibilityGate:
    """
    Schema compatibility check plus startup orchestration.

    Stateless apart from the negotiator it wraps; safe to call from
    several places at once.

    Example:
        >>> gate = CompatibilityGate(negotiator)
        >>> result = await gate.init_versioning()
        >>> if not result.compatible:
        ...     show_update_prompt()
    """

    def __init__(self, negotiator: VersionNegotiator):
        self.negotiator = negotiator

    async def check_schema_compatibility(self) -> CompatibilityResult:
        """
        Ask the backend whether this client version can use the schema.

        Never raises. Errors are logged and reported as compatible.
        """
        app_version = self.negotiator.identity.app_version

        try:
            result = await self.negotiator.backend.rpc("can_client_use_schema", {
                "p_app_version": app_version,
            })
        except Exception as e:
            logger.warning(f"[Versioning] Error checking schema compatibility: {e}")
            return CompatibilityResult(compatible=True)

        if not result.success:
            logger.warning(
                f"[Versioning] Schema compatibility check failed: "
                f"{result.error_code} {result.error_message}"
            )
            return CompatibilityResult(compatible=True)

        return CompatibilityResult(compatible=result.data is True)

    async def init_versioning(self) -> InitResult:
        """
        Run the compatibility check and the feature flag fetch.

        The two calls are independent; neither outcome blocks the other.
        An incompatible schema is logged, not raised; the caller decides
        what to do with ``compatible=False``.
        """
        compatibility, features = await asyncio.gather(
            self.check_schema_compatibility(),
            self.negotiator.fetch_feature_flags(),
        )

        if not compatibility.compatible:
            logger.error(
                f"[Versioning] App version "
                f"{self.negotiator.identity.app_version} incompatible with schema. "
                f"Required: {compatibility.required_version or 'unknown'}"
            )

        return InitResult(
            compatible=compatibility.compatible,
            features=features,
        )

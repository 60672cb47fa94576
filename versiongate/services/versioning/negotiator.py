"""
Version Negotiator

Exposes this client's identity to the backend and decides which protocol
features the running client may use:

    - Version headers for every outbound request
    - Newest API version this client build is allowed to speak
    - Feature flags, fetched from the backend and cached with a TTL
    - Versioned RPC dispatch

Feature flags fail closed: an unknown flag, a disabled flag or a flag
whose minimum version this build does not meet is treated as off.

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import logging
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from versiongate.schemas import (
    ApiVersion,
    ClientIdentity,
    FeatureFlag,
    API_VERSION_REQUIREMENTS,
    SUPPORTED_API_VERSIONS,
)
from versiongate.semver import meets_minimum
from versiongate.services.backend.base import BaseBackendClient, RpcResult
from versiongate.services.versioning.cache import TTLCache
from versiongate.services.versioning.results import VersionInfo

logger = logging.getLogger(__name__)

FEATURE_FLAGS_CACHE_KEY = "feature_flags"
FEATURE_FLAGS_CACHE_TTL = 5 * 60  # seconds


class VersionNegotiator:
    """
    Client-side version negotiation.

    One instance per process, owned by whoever builds the backend client.
    The flag cache is injected so freshness can be driven by a fake clock
    in tests.

    Example:
        >>> negotiator = VersionNegotiator(identity, backend)
        >>> negotiator.best_api_version()
        <ApiVersion.V3: 'v3'>
        >>> flags = await negotiator.fetch_feature_flags()
        >>> negotiator.is_feature_enabled(flags, "scheduled_orders")
        True
    """

    def __init__(
        self,
        identity: ClientIdentity,
        backend: BaseBackendClient,
        cache: Optional[TTLCache[list[FeatureFlag]]] = None,
        feature_flags_ttl: float = FEATURE_FLAGS_CACHE_TTL,
    ):
        """
        Args:
            identity: This client's name, version and API version
            backend: Client used for RPC calls
            cache: Feature flag cache (default: a fresh TTLCache)
            feature_flags_ttl: Seconds a fetched flag set stays fresh
        """
        self.identity = identity
        self.backend = backend
        self.feature_flags_ttl = feature_flags_ttl
        self._cache: TTLCache[list[FeatureFlag]] = cache if cache is not None else TTLCache()
        self._fetch_lock = asyncio.Lock()

    # =========================================================================
    # IDENTITY & API VERSION
    # =========================================================================

    def headers(self) -> dict[str, str]:
        """Version headers to include with every backend request."""
        return self.identity.headers()

    def can_use_api_version(self, version: ApiVersion) -> bool:
        """Check whether this build meets the minimum for an API version."""
        required = API_VERSION_REQUIREMENTS[version]
        return meets_minimum(self.identity.app_version, required)

    def best_api_version(self) -> ApiVersion:
        """
        Newest API version this build may use.

        Pure and total: falls back to the oldest version when no
        requirement is met (e.g. a 0.x development build).
        """
        for version in reversed(SUPPORTED_API_VERSIONS):
            if self.can_use_api_version(version):
                return version
        return SUPPORTED_API_VERSIONS[0]

    def version_info(self) -> VersionInfo:
        """Version snapshot for debugging."""
        return VersionInfo(
            app_version=self.identity.app_version,
            app_name=self.identity.app_name.value,
            api_version=self.identity.api_version.value,
            supported_versions=[v.value for v in SUPPORTED_API_VERSIONS],
        )

    # =========================================================================
    # FEATURE FLAGS
    # =========================================================================

    def is_feature_enabled(
        self,
        flags: Iterable[FeatureFlag],
        name: str,
    ) -> bool:
        """
        Evaluate a feature flag for this build.

        Returns False when the flag is missing, disabled, or requires a
        newer app version than this one.
        """
        flag = next((f for f in flags if f.feature == name), None)

        if flag is None:
            return False

        if not flag.enabled:
            return False

        if flag.min_version and not meets_minimum(
            self.identity.app_version, flag.min_version
        ):
            return False

        return True

    async def fetch_feature_flags(self) -> list[FeatureFlag]:
        """
        Get the feature flags for this app, from cache when fresh.

        Never raises. On a failed refresh the last good flag set (or an
        empty list) is returned and the stale entry is kept so the next
        call tries again. Concurrent callers share one in-flight fetch.
        """
        cached = self._cache.get(FEATURE_FLAGS_CACHE_KEY)
        if cached is not None:
            return list(cached)

        async with self._fetch_lock:
            # Another caller may have refreshed while we waited
            cached = self._cache.get(FEATURE_FLAGS_CACHE_KEY)
            if cached is not None:
                return list(cached)

            flags = await self._load_feature_flags()

            if flags is None:
                return list(self._cache.peek(FEATURE_FLAGS_CACHE_KEY) or [])

            self._cache.set(FEATURE_FLAGS_CACHE_KEY, flags, self.feature_flags_ttl)
            return list(flags)

    async def _load_feature_flags(self) -> Optional[list[FeatureFlag]]:
        """
        One get_feature_flags call.

        Returns:
            Parsed flags, or None if the call failed
        """
        try:
            result = await self.backend.rpc("get_feature_flags", {
                "p_app_name": self.identity.app_name.value,
                "p_app_version": self.identity.app_version,
            })
        except Exception as e:
            logger.warning(f"[Versioning] Error fetching feature flags: {e}")
            return None

        if not result.success:
            logger.warning(
                f"[Versioning] Failed to fetch feature flags: "
                f"{result.error_code} {result.error_message}"
            )
            return None

        data = result.data if result.data is not None else []

        if not isinstance(data, list):
            logger.warning(
                f"[Versioning] Unexpected feature flag payload: {type(data).__name__}"
            )
            return None

        flags = []
        for item in data:
            try:
                flags.append(FeatureFlag.model_validate(item))
            except ValidationError as e:
                logger.warning(f"[Versioning] Skipping malformed feature flag {item!r}: {e}")

        logger.debug(f"[Versioning] Loaded {len(flags)} feature flags")
        return flags

    # =========================================================================
    # VERSIONED DISPATCH
    # =========================================================================

    async def dispatch_rpc(
        self,
        name: str,
        payload: dict[str, Any],
        version: Optional[ApiVersion] = None,
    ) -> RpcResult:
        """
        Call a named operation through a version-specific dispatcher.

        Args:
            name: Operation name understood by rpc_vN_dispatch
            payload: Operation arguments
            version: API version to use (default: this client's API version)
        """
        version = version or self.identity.api_version

        return await self.backend.rpc(f"rpc_{version.value}_dispatch", {
            "p_name": name,
            "p_payload": payload,
        })

    async def route_api_call(
        self,
        name: str,
        payload: dict[str, Any],
        requested_version: Optional[ApiVersion] = None,
    ) -> RpcResult:
        """
        Call a named operation through the universal router, which picks
        the version server-side when none is requested.
        """
        return await self.backend.rpc("route_api_call", {
            "p_name": name,
            "p_payload": payload,
            "p_requested_version": requested_version.value if requested_version else None,
        })

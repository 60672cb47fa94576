"""
Mock Backend Client Implementation

Answers the RPC contract consumed by the versioning layer without any
network access. Used in development mode (ENV_MODE=development) for
local testing.

Behavior:
    - get_feature_flags returns a configurable flag list
    - can_client_use_schema compares the caller against a minimum version
    - rpc_vN_dispatch / route_api_call echo the call back with the version
      that handled it
    - Simulates network latency and a configurable failure rate
    - Unknown procedures fail the way PostgREST does (PGRST202)

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import random
import logging
from collections import deque
from typing import Any, Optional

from versiongate.schemas import ApiVersion, CURRENT_API_VERSION
from versiongate.semver import meets_minimum
from versiongate.services.backend.base import BaseBackendClient, RpcResult

logger = logging.getLogger(__name__)


DEFAULT_FEATURE_FLAGS: list[dict[str, Any]] = [
    {"feature": "scheduled_orders", "enabled": True, "minVersion": None},
    {"feature": "loyalty_rewards", "enabled": True, "minVersion": "1.2.0"},
    {"feature": "kitchen_display_v2", "enabled": True, "minVersion": "1.4.0"},
    {"feature": "ai_insights", "enabled": False, "minVersion": None},
]


class MockBackendClient(BaseBackendClient):
    """
    Mock implementation of the backend client.

    Attributes:
        feature_flags: Flags returned by get_feature_flags
        min_schema_version: Oldest client version the mock schema accepts
        failure_rate: Probability of simulated backend failure (0.0-1.0)
        min_latency: Minimum response time in seconds
        max_latency: Maximum response time in seconds
        calls: Most recent (name, params) pairs received, oldest first

    Example:
        >>> client = MockBackendClient(failure_rate=0.0)
        >>> result = await client.rpc(
        ...     "can_client_use_schema", {"p_app_version": "1.3.0"}
        ... )
        >>> print(result.data)
        True
    """

    DISPATCH_PROCEDURES = {
        f"rpc_{version.value}_dispatch": version for version in ApiVersion
    }

    def __init__(
        self,
        feature_flags: Optional[list[dict[str, Any]]] = None,
        min_schema_version: str = "1.0.0",
        failure_rate: float = 0.05,
        min_latency: float = 0.05,
        max_latency: float = 0.2,
        call_log_size: int = 100,
    ):
        """
        Initialize the mock backend.

        Args:
            feature_flags: Flag payloads to serve (default: a sample set)
            min_schema_version: Minimum client version for the live schema
            failure_rate: Probability of backend failure (default: 5%)
            min_latency: Minimum response time in seconds
            max_latency: Maximum response time in seconds
            call_log_size: How many recent calls to keep in ``calls``
        """
        self.feature_flags = (
            list(feature_flags) if feature_flags is not None
            else [dict(f) for f in DEFAULT_FEATURE_FLAGS]
        )
        self.min_schema_version = min_schema_version
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.calls: deque[tuple[str, dict[str, Any]]] = deque(maxlen=call_log_size)

        logger.info(
            f"MockBackendClient initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"flags={len(self.feature_flags)}, "
            f"min_schema_version={min_schema_version})"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    async def _simulate_latency(self) -> float:
        """
        Simulate network latency.

        Returns:
            float: Latency in milliseconds
        """
        latency = random.uniform(self.min_latency, self.max_latency)
        await asyncio.sleep(latency)
        return latency * 1000

    def _should_fail(self) -> bool:
        """Determine if this request should simulate a failure."""
        return random.random() < self.failure_rate

    def _handle(self, name: str, params: dict[str, Any]) -> RpcResult:
        """Route a call to its canned answer."""
        if name == "get_feature_flags":
            return RpcResult(success=True, data=[dict(f) for f in self.feature_flags])

        if name == "can_client_use_schema":
            version = params.get("p_app_version") or "0.0.0"
            return RpcResult(
                success=True,
                data=meets_minimum(version, self.min_schema_version),
            )

        if name in self.DISPATCH_PROCEDURES:
            return RpcResult(success=True, data={
                "version": self.DISPATCH_PROCEDURES[name].value,
                "name": params.get("p_name"),
                "payload": params.get("p_payload"),
            })

        if name == "route_api_call":
            version = params.get("p_requested_version") or CURRENT_API_VERSION.value
            return RpcResult(success=True, data={
                "version": version,
                "name": params.get("p_name"),
                "payload": params.get("p_payload"),
            })

        return RpcResult(
            success=False,
            error_message=f"Could not find the function public.{name}",
            error_code="PGRST202",
            status_code=404,
        )

    async def rpc(
        self,
        name: str,
        params: Optional[dict[str, Any]] = None,
    ) -> RpcResult:
        """
        Answer an RPC call (mock implementation).
        """
        params = dict(params or {})
        self.calls.append((name, params))

        logger.debug(f"Mock: RPC {name} {params}")

        latency_ms = await self._simulate_latency()

        if self._should_fail():
            logger.debug("Mock: Simulated backend failure")
            return RpcResult(
                success=False,
                error_message="Backend temporarily unavailable",
                error_code="service_unavailable",
                status_code=503,
                response_time_ms=latency_ms,
            )

        result = self._handle(name, params)
        result.response_time_ms = latency_ms
        return result

    async def health_check(self) -> bool:
        """Mock health check always returns True."""
        logger.debug("Mock: Backend health check passed")
        return True

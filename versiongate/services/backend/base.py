"""
Backend Client Abstract Base Class

Defines the interface contract for talking to the hosted backend's RPC
surface. Both MockBackendClient and SupabaseBackendClient must implement
these methods.

RPC procedures consumed by this package:
    - get_feature_flags(p_app_name, p_app_version)
    - can_client_use_schema(p_app_version)
    - rpc_v1_dispatch / rpc_v2_dispatch / rpc_v3_dispatch(p_name, p_payload)
    - route_api_call(p_name, p_payload, p_requested_version)

Author: Khalil Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class RpcResult:
    """
    Standardized result from a backend RPC call.

    Transport and server failures are reported here rather than raised,
    so callers decide how to degrade.

    Attributes:
        success: Whether the call returned a usable response
        data: Decoded JSON body on success
        error_message: Human-readable error if the call failed
        error_code: Machine-readable error code
        status_code: HTTP status, when a response was received
        response_time_ms: Round-trip time
    """
    success: bool
    data: Any = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    status_code: Optional[int] = None
    response_time_ms: float = 0.0


class BaseBackendClient(ABC):
    """
    Abstract base class for backend clients.

    Example:
        >>> client = get_backend_client()
        >>> result = await client.rpc(
        ...     "can_client_use_schema",
        ...     {"p_app_version": "1.3.0"},
        ... )
        >>> if result.success:
        ...     print(result.data)
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the backend provider.

        Returns:
            str: Provider name (e.g., "mock", "supabase")
        """
        pass

    @abstractmethod
    async def rpc(
        self,
        name: str,
        params: Optional[dict[str, Any]] = None,
    ) -> RpcResult:
        """
        Invoke a server-side procedure.

        A single best-effort attempt: no retries. Timeouts are bounded by
        the underlying transport.

        Args:
            name: Procedure name (e.g., "get_feature_flags")
            params: Named procedure arguments

        Returns:
            RpcResult: Decoded response or failure details
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the backend.

        Returns:
            bool: True if the backend is reachable
        """
        pass

    async def close(self) -> None:
        """Release transport resources. Default is a no-op."""
        return None

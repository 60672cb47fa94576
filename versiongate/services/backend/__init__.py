"""
Backend Client Factory

Provides a single entry point for obtaining a backend client instance.
Automatically selects Mock or Supabase based on ENV_MODE configuration.

Usage:
    from versiongate.services.backend import get_backend_client

    client = get_backend_client()
    result = await client.rpc("can_client_use_schema", {
        "p_app_version": "1.3.0",
    })

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from functools import lru_cache

from versiongate.core.config import get_settings
from versiongate.services.backend.base import BaseBackendClient, RpcResult
from versiongate.services.backend.mock import MockBackendClient
from versiongate.services.backend.supabase import SupabaseBackendClient

logger = logging.getLogger(__name__)


@lru_cache()
def get_backend_client() -> BaseBackendClient:
    """
    Get the configured backend client instance.

    Factory function that returns either MockBackendClient or
    SupabaseBackendClient based on the ENV_MODE configuration. The real
    client sends this process's version headers on every request.

    Returns:
        BaseBackendClient: Configured backend client

    Raises:
        ConfigurationError: If a live mode is selected but SUPABASE_URL or
            SUPABASE_ANON_KEY is missing
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Backend: Using MockBackendClient (development mode)")
        return MockBackendClient(
            failure_rate=0.05,  # 5% simulated failures
            min_latency=0.05,
            max_latency=0.2,
        )

    settings.require_backend_config()

    logger.info(
        f"Backend: Using SupabaseBackendClient "
        f"({settings.env_mode.value} mode)"
    )
    return SupabaseBackendClient(headers=settings.client_identity.headers())


def reset_backend_client() -> None:
    """
    Clear the cached backend client instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_backend_client.cache_clear()
    logger.debug("Backend client cache cleared")


__all__ = [
    "get_backend_client",
    "reset_backend_client",
    "BaseBackendClient",
    "RpcResult",
    "MockBackendClient",
    "SupabaseBackendClient",
]

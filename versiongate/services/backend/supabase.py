"""
Supabase Backend Client Implementation

Production implementation calling PostgREST RPC endpoints of the hosted
Supabase project. Used when ENV_MODE=production or ENV_MODE=staging.

Requirements:
    - SUPABASE_URL and SUPABASE_ANON_KEY must be set in environment

Every request carries the API key plus the client's version headers
(X-App-Version, X-App-Name, X-Api-Version) so the backend can negotiate
per client.

API Documentation:
    https://postgrest.org/en/stable/references/api/functions.html

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from versiongate.core.config import get_settings, ConfigurationError
from versiongate.services.backend.base import BaseBackendClient, RpcResult

logger = logging.getLogger(__name__)


class SupabaseBackendClient(BaseBackendClient):
    """
    Production Supabase RPC client.

    Configuration:
        Requires SUPABASE_URL and SUPABASE_ANON_KEY environment variables,
        unless passed explicitly.

    Example:
        >>> client = SupabaseBackendClient(headers=negotiator.headers())
        >>> result = await client.rpc("get_feature_flags", {
        ...     "p_app_name": "web",
        ...     "p_app_version": "1.3.0",
        ... })
        >>> print(result.data)
        [{'feature': 'scheduled_orders', 'enabled': True, 'minVersion': None}]
    """

    RPC_PATH = "/rest/v1/rpc/"

    def __init__(
        self,
        url: Optional[str] = None,
        anon_key: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the HTTP client.

        Args:
            url: Supabase project URL (default: SUPABASE_URL)
            anon_key: Anon API key (default: SUPABASE_ANON_KEY)
            headers: Extra headers sent with every request (version headers)
            timeout: Request timeout in seconds (default: HTTP_TIMEOUT_SECONDS)
            transport: Optional httpx transport, mainly for tests

        Raises:
            ConfigurationError: If the URL or key is not configured
        """
        settings = get_settings()

        url = (url or settings.supabase_url or "").rstrip("/")
        anon_key = anon_key or settings.supabase_anon_key

        missing = []
        if not url:
            missing.append("SUPABASE_URL")
        if not anon_key:
            missing.append("SUPABASE_ANON_KEY")
        if missing:
            raise ConfigurationError(missing)

        request_headers = {
            "apikey": anon_key,
            "Authorization": f"Bearer {anon_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        request_headers.update(headers or {})

        self._client = httpx.AsyncClient(
            base_url=url,
            headers=request_headers,
            timeout=timeout if timeout is not None else settings.http_timeout_seconds,
            transport=transport,
        )

        logger.info(f"SupabaseBackendClient initialized ({url})")

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "supabase"

    @staticmethod
    def _extract_error(response: httpx.Response) -> tuple[str, str]:
        """
        Pull a message and code out of a PostgREST error body.

        Returns:
            tuple: (error_message, error_code)
        """
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            message = body.get("message") or response.reason_phrase
            code = body.get("code") or f"http_{response.status_code}"
            return str(message), str(code)

        return response.reason_phrase or "Request failed", f"http_{response.status_code}"

    async def rpc(
        self,
        name: str,
        params: Optional[dict[str, Any]] = None,
    ) -> RpcResult:
        """
        POST the named arguments to /rest/v1/rpc/<name>.
        """
        start_time = datetime.now()

        logger.debug(f"Supabase: RPC {name}")

        try:
            response = await self._client.post(
                f"{self.RPC_PATH}{name}",
                json=params or {},
            )

            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000

            if response.is_error:
                message, code = self._extract_error(response)
                logger.warning(
                    f"Supabase: RPC {name} failed - "
                    f"{response.status_code} {code}: {message}"
                )
                return RpcResult(
                    success=False,
                    error_message=message,
                    error_code=code,
                    status_code=response.status_code,
                    response_time_ms=elapsed_ms,
                )

            data = response.json() if response.content else None

            return RpcResult(
                success=True,
                data=data,
                status_code=response.status_code,
                response_time_ms=elapsed_ms,
            )

        except httpx.TimeoutException:
            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
            logger.error(f"Supabase: RPC {name} timed out")

            return RpcResult(
                success=False,
                error_message="Backend request timed out",
                error_code="timeout",
                response_time_ms=elapsed_ms,
            )

        except httpx.TransportError as e:
            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
            logger.error(f"Supabase: Transport error - {e}")

            return RpcResult(
                success=False,
                error_message="Unable to reach backend",
                error_code="transport_error",
                response_time_ms=elapsed_ms,
            )

        except ValueError as e:
            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
            logger.error(f"Supabase: Malformed response from {name} - {e}")

            return RpcResult(
                success=False,
                error_message="Malformed backend response",
                error_code="malformed_response",
                response_time_ms=elapsed_ms,
            )

    async def health_check(self) -> bool:
        """
        Verify backend connectivity.

        Any non-5xx response from the REST root means the gateway is up.
        """
        try:
            response = await self._client.get("/rest/v1/")

            if response.status_code < 500:
                logger.debug("Supabase: Health check passed")
                return True

            return False

        except httpx.HTTPError as e:
            logger.error(f"Supabase: Health check failed - {e}")
            return False

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

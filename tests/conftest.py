"""Shared fixtures: clean settings, a scriptable backend and a fake clock."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, Union

import pytest

from versiongate.core.config import get_migration_settings, get_settings
from versiongate.schemas import AppName, ClientIdentity
from versiongate.services.backend import BaseBackendClient, RpcResult, reset_backend_client
from versiongate.services.versioning import reset_versioning
from versiongate.services.versioning.cache import TTLCache
from versiongate.services.versioning.negotiator import VersionNegotiator

ENV_VARS = [
    "ENV_MODE",
    "DEBUG",
    "APP_NAME",
    "APP_VERSION",
    "API_VERSION",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "HTTP_TIMEOUT_SECONDS",
    "FEATURE_FLAGS_TTL_SECONDS",
    "DEPLOYED_WEB_VERSION",
    "DEPLOYED_CUSTOMER_VERSION",
    "DEPLOYED_BUSINESS_VERSION",
    "MIGRATIONS_DIR",
    "SAFE_MIGRATIONS_DIR",
    "MIGRATION_TEMPLATE_NAME",
    "GITHUB_OUTPUT",
]


def _clear_caches() -> None:
    get_settings.cache_clear()
    get_migration_settings.cache_clear()
    reset_backend_client()
    reset_versioning()


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    """Isolate every test from the host environment and any .env file."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    _clear_caches()
    yield
    _clear_caches()


Response = Union[RpcResult, Exception, Callable[[dict[str, Any]], RpcResult]]


class FakeBackend(BaseBackendClient):
    """Backend whose answers are scripted per procedure name."""

    def __init__(self, responses: Optional[dict[str, Response]] = None):
        self.responses: dict[str, Response] = dict(responses or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.release: Optional[asyncio.Event] = None

    @property
    def provider_name(self) -> str:
        return "fake"

    def calls_to(self, name: str) -> list[dict[str, Any]]:
        return [params for call_name, params in self.calls if call_name == name]

    async def rpc(self, name, params=None):
        params = dict(params or {})
        self.calls.append((name, params))

        if self.release is not None:
            await self.release.wait()

        response = self.responses.get(name)
        if response is None:
            return RpcResult(success=False, error_message="not scripted", error_code="PGRST202")
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(params)
        return response

    async def health_check(self) -> bool:
        return True


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def make_negotiator(backend, clock):
    """Build a negotiator for a given app version against the fake backend."""

    def _make(app_version: str = "1.3.0", app_name: AppName = AppName.WEB, ttl: float = 300):
        identity = ClientIdentity(app_name=app_name, app_version=app_version)
        return VersionNegotiator(
            identity=identity,
            backend=backend,
            cache=TTLCache(clock=clock),
            feature_flags_ttl=ttl,
        )

    return _make

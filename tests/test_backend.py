"""Tests for the backend clients and their factory."""

import json

import httpx
import pytest

from versiongate.core.config import ConfigurationError
from versiongate.services.backend import (
    MockBackendClient,
    SupabaseBackendClient,
    get_backend_client,
    reset_backend_client,
)

URL = "https://demo.supabase.co"
KEY = "anon-key"
VERSION_HEADERS = {
    "X-App-Version": "1.3.0",
    "X-App-Name": "web",
    "X-Api-Version": "v3",
}


def _client(handler, **kwargs):
    return SupabaseBackendClient(
        url=URL,
        anon_key=KEY,
        headers=VERSION_HEADERS,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


# =============================================================================
# SUPABASE CLIENT
# =============================================================================

@pytest.mark.asyncio
async def test_rpc_posts_params_with_key_and_version_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=True)

    client = _client(handler)
    result = await client.rpc("can_client_use_schema", {"p_app_version": "1.3.0"})
    await client.close()

    assert result.success is True
    assert result.data is True
    assert result.status_code == 200
    assert seen["method"] == "POST"
    assert seen["url"] == f"{URL}/rest/v1/rpc/can_client_use_schema"
    assert seen["body"] == {"p_app_version": "1.3.0"}
    assert seen["headers"]["apikey"] == KEY
    assert seen["headers"]["authorization"] == f"Bearer {KEY}"
    for name, value in VERSION_HEADERS.items():
        assert seen["headers"][name] == value


@pytest.mark.asyncio
async def test_rpc_empty_body_is_none():
    client = _client(lambda request: httpx.Response(204))
    result = await client.rpc("void_fn")
    await client.close()

    assert result.success is True
    assert result.data is None


@pytest.mark.asyncio
async def test_rpc_maps_postgrest_error_body():
    def handler(request):
        return httpx.Response(404, json={
            "code": "PGRST202",
            "message": "Could not find the function public.get_feature_flags",
        })

    client = _client(handler)
    result = await client.rpc("get_feature_flags", {})
    await client.close()

    assert result.success is False
    assert result.status_code == 404
    assert result.error_code == "PGRST202"
    assert "get_feature_flags" in result.error_message


@pytest.mark.asyncio
async def test_rpc_maps_non_json_error():
    client = _client(lambda request: httpx.Response(502, text="Bad Gateway"))
    result = await client.rpc("get_feature_flags", {})
    await client.close()

    assert result.success is False
    assert result.error_code == "http_502"


@pytest.mark.asyncio
async def test_rpc_timeout_is_a_failed_result():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = _client(handler)
    result = await client.rpc("get_feature_flags", {})
    await client.close()

    assert result.success is False
    assert result.error_code == "timeout"


@pytest.mark.asyncio
async def test_rpc_transport_error_is_a_failed_result():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client = _client(handler)
    result = await client.rpc("get_feature_flags", {})
    await client.close()

    assert result.success is False
    assert result.error_code == "transport_error"


@pytest.mark.asyncio
async def test_rpc_malformed_json_is_a_failed_result():
    client = _client(lambda request: httpx.Response(200, text="{not json"))
    result = await client.rpc("get_feature_flags", {})
    await client.close()

    assert result.success is False
    assert result.error_code == "malformed_response"


@pytest.mark.asyncio
async def test_health_check():
    up = _client(lambda request: httpx.Response(200, json={}))
    down = _client(lambda request: httpx.Response(503))

    assert await up.health_check() is True
    assert await down.health_check() is False

    await up.close()
    await down.close()


def test_supabase_client_requires_url_and_key():
    with pytest.raises(ConfigurationError) as exc_info:
        SupabaseBackendClient()

    assert exc_info.value.missing == ["SUPABASE_URL", "SUPABASE_ANON_KEY"]


# =============================================================================
# MOCK CLIENT
# =============================================================================

def _mock(**kwargs):
    return MockBackendClient(failure_rate=0.0, min_latency=0.0, max_latency=0.0, **kwargs)


@pytest.mark.asyncio
async def test_mock_serves_feature_flags():
    client = _mock(feature_flags=[{"feature": "a", "enabled": True, "minVersion": None}])

    result = await client.rpc("get_feature_flags", {"p_app_name": "web", "p_app_version": "1.0.0"})

    assert result.success is True
    assert result.data == [{"feature": "a", "enabled": True, "minVersion": None}]
    assert client.calls[0][0] == "get_feature_flags"


@pytest.mark.asyncio
async def test_mock_schema_check_uses_min_version():
    client = _mock(min_schema_version="1.2.0")

    old = await client.rpc("can_client_use_schema", {"p_app_version": "1.1.9"})
    new = await client.rpc("can_client_use_schema", {"p_app_version": "1.2.0"})

    assert old.data is False
    assert new.data is True


@pytest.mark.asyncio
async def test_mock_dispatch_and_route():
    client = _mock()

    dispatched = await client.rpc("rpc_v2_dispatch", {"p_name": "menu", "p_payload": {}})
    routed = await client.rpc("route_api_call", {"p_name": "menu", "p_payload": {}, "p_requested_version": None})

    assert dispatched.data["version"] == "v2"
    assert routed.data["version"] == "v3"


@pytest.mark.asyncio
async def test_mock_unknown_procedure_fails_like_postgrest():
    result = await _mock().rpc("drop_everything", {})

    assert result.success is False
    assert result.error_code == "PGRST202"
    assert result.status_code == 404


@pytest.mark.asyncio
async def test_mock_call_log_keeps_only_recent_calls():
    client = _mock(call_log_size=3)

    for i in range(5):
        await client.rpc("can_client_use_schema", {"p_app_version": f"1.{i}.0"})

    assert len(client.calls) == 3
    assert [params["p_app_version"] for _, params in client.calls] == [
        "1.2.0",
        "1.3.0",
        "1.4.0",
    ]


@pytest.mark.asyncio
async def test_mock_simulated_failure():
    client = MockBackendClient(failure_rate=1.0, min_latency=0.0, max_latency=0.0)

    result = await client.rpc("get_feature_flags", {})

    assert result.success is False
    assert result.error_code == "service_unavailable"


# =============================================================================
# FACTORY
# =============================================================================

def test_factory_uses_mock_in_development():
    client = get_backend_client()

    assert client.provider_name == "mock"
    assert get_backend_client() is client


def test_factory_requires_backend_config_outside_development(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "production")

    with pytest.raises(ConfigurationError):
        get_backend_client()


@pytest.mark.asyncio
async def test_factory_builds_supabase_client_with_identity_headers(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "staging")
    monkeypatch.setenv("SUPABASE_URL", URL)
    monkeypatch.setenv("SUPABASE_ANON_KEY", KEY)
    monkeypatch.setenv("APP_NAME", "business")
    monkeypatch.setenv("APP_VERSION", "1.4.0")

    client = get_backend_client()

    assert client.provider_name == "supabase"
    assert client._client.headers["X-App-Name"] == "business"
    assert client._client.headers["X-App-Version"] == "1.4.0"
    assert client._client.headers["X-Api-Version"] == "v3"

    await client.close()
    reset_backend_client()

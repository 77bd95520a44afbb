from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from portal_client.core.errors import ErrorCode, TransportError
from portal_client.core.http import AUTH_STATE_KEYS, ApiClient
from portal_client.core.logging import bind_correlation_id, reset_correlation_id
from portal_client.core.storage import InMemoryPreferenceStore
from tests.helpers import make_unsigned_jwt

NOW = 1_700_000_000.0

Handler = Callable[[httpx.Request], httpx.Response]


def build_client(
    handler: Handler,
    store: InMemoryPreferenceStore | None = None,
) -> tuple[ApiClient, InMemoryPreferenceStore]:
    preference_store = store or InMemoryPreferenceStore()
    client = ApiClient(
        "http://collector.test/",
        store=preference_store,
        transport=httpx.MockTransport(handler),
        clock=lambda: NOW,
    )
    return client, preference_store


def identity_state(token: str) -> dict[str, str]:
    return {
        "authToken": token,
        "user": json.dumps({"email": "parent@example.com"}),
        "userId": "42",
        "userFullname": "Parent",
        "userRole": "parent",
        "userLanguage": "en",
    }


@pytest.mark.asyncio
async def test_post_decodes_json_and_sets_default_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True})

    client, _ = build_client(handler)
    async with client:
        response = await client.post("/api/method/track")

    assert response.status_code == 200
    assert response.data == {"success": True}
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "http://collector.test/api/method/track"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["User-Agent"].startswith("portal-client/")
    assert "Authorization" not in request.headers


@pytest.mark.asyncio
async def test_empty_body_yields_none() -> None:
    client, _ = build_client(lambda request: httpx.Response(204))

    response = await client.post("/api/method/track")

    assert response.data is None
    await client.close()


@pytest.mark.asyncio
async def test_valid_token_is_attached_and_correlation_id_forwarded() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    token = make_unsigned_jwt({"sub": "42", "exp": int(NOW) + 3600})
    client, store = build_client(handler, InMemoryPreferenceStore(identity_state(token)))

    correlation = bind_correlation_id("evt-1")
    try:
        await client.post("/api/method/track")
    finally:
        reset_correlation_id(correlation)
    await client.close()

    assert seen[0].headers["Authorization"] == f"Bearer {token}"
    assert seen[0].headers["X-Request-ID"] == "evt-1"
    assert await store.get("authToken") == token


@pytest.mark.asyncio
async def test_expired_token_clears_auth_state_and_sends_anonymous_request() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True})

    token = make_unsigned_jwt({"sub": "42", "exp": int(NOW) - 1})
    client, store = build_client(handler, InMemoryPreferenceStore(identity_state(token)))

    await client.post("/api/method/track")
    await client.close()

    assert "Authorization" not in seen[0].headers
    assert store.snapshot() == {"userLanguage": "en"}


@pytest.mark.asyncio
async def test_malformed_token_is_not_sent_but_kept() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    client, store = build_client(handler, InMemoryPreferenceStore({"authToken": "not-a-jwt"}))

    await client.post("/api/method/track")
    await client.close()

    assert "Authorization" not in seen[0].headers
    assert await store.get("authToken") == "not-a-jwt"


@pytest.mark.asyncio
async def test_unauthorized_response_clears_auth_state() -> None:
    token = make_unsigned_jwt({"sub": "42", "exp": int(NOW) + 3600})
    client, store = build_client(
        lambda request: httpx.Response(401, json={"message": "Session expired"}),
        InMemoryPreferenceStore(identity_state(token)),
    )

    with pytest.raises(TransportError) as exc_info:
        await client.post("/api/method/track")
    await client.close()

    assert exc_info.value.code == ErrorCode.UNAUTHORIZED
    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Session expired"
    assert all(key not in store.snapshot() for key in AUTH_STATE_KEYS)
    assert store.snapshot() == {"userLanguage": "en"}


@pytest.mark.asyncio
async def test_server_error_maps_to_http_error() -> None:
    client, _ = build_client(lambda request: httpx.Response(503, text="upstream down"))

    with pytest.raises(TransportError) as exc_info:
        await client.post("/api/method/track")
    await client.close()

    error = exc_info.value
    assert error.code == ErrorCode.HTTP_ERROR
    assert error.status_code == 503
    assert error.message == "HTTP 503 Service Unavailable"
    assert error.details["response_body"] == "upstream down"
    assert error.details["path"] == "/api/method/track"


@pytest.mark.asyncio
async def test_invalid_json_maps_to_malformed_response() -> None:
    client, _ = build_client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(TransportError) as exc_info:
        await client.post("/api/method/track")
    await client.close()

    assert exc_info.value.code == ErrorCode.MALFORMED_RESPONSE


@pytest.mark.asyncio
async def test_connection_errors_map_to_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = build_client(handler)

    with pytest.raises(TransportError) as exc_info:
        await client.post("/api/method/track")
    await client.close()

    assert exc_info.value.code == ErrorCode.NETWORK_ERROR
    assert exc_info.value.message == "connection refused"
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_timeouts_map_to_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client, _ = build_client(handler)

    with pytest.raises(TransportError) as exc_info:
        await client.post("/api/method/track")
    await client.close()

    assert exc_info.value.code == ErrorCode.TIMEOUT


@pytest.mark.asyncio
async def test_store_failure_during_token_lookup_does_not_block_request() -> None:
    class BrokenStore(InMemoryPreferenceStore):
        async def get(self, key: str) -> str | None:
            raise OSError("disk unavailable")

    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True})

    client, _ = build_client(handler, BrokenStore())

    response = await client.post("/api/method/track")
    await client.close()

    assert response.data == {"success": True}
    assert "Authorization" not in seen[0].headers

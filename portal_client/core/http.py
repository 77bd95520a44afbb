"""
HTTP client for backend calls.

Wraps a shared httpx.AsyncClient and mirrors the behaviour the mobile app
expects from its API layer:

- the stored bearer token is attached to every request while it is valid;
- an expired token is discarded together with the cached identity keys and
  the request goes out unauthenticated;
- a 401 response discards the same keys before the error is reported.

Every failure surfaces as TransportError carrying an ErrorCode and
structured details; callers decide whether to contain it.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Callable, Final, Sequence

import httpx
from jose import JWTError, jwt

from portal_client.core.errors import ErrorCode, TransportError
from portal_client.core.logging import get_correlation_id
from portal_client.core.storage import PreferenceStore
from portal_client.core.version import USER_AGENT

logger = logging.getLogger("portal_client.core.http")

AUTH_TOKEN_KEY: Final[str] = "authToken"  # noqa: S105
AUTH_STATE_KEYS: Final[tuple[str, ...]] = (
    AUTH_TOKEN_KEY,
    "user",
    "userId",
    "userFullname",
    "userRole",
)

_MAX_BODY_CHARS = 400


@dataclass(slots=True)
class ApiResponse:
    """Decoded response of a successful request; ``data`` is None for empty bodies."""

    status_code: int
    data: Any


class ApiClient:
    """Thin async client bound to the backend base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        store: PreferenceStore,
        timeout: float = 5.0,
        auth_token_key: str = AUTH_TOKEN_KEY,
        auth_state_keys: Sequence[str] = AUTH_STATE_KEYS,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._auth_token_key = auth_token_key
        self._auth_state_keys = tuple(dict.fromkeys((auth_token_key, *auth_state_keys)))
        self._clock = clock
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
        )

    @property
    def base_url(self) -> str:
        return str(self._client.base_url)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def post(self, path: str, json: Any = None) -> ApiResponse:
        return await self.request("POST", path, json=json)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
    ) -> ApiResponse:
        """
        Send a request and decode the JSON body.

        Raises:
            TransportError: on timeouts, connection errors, non-2xx statuses
                and bodies that are not valid JSON.
        """
        headers = await self._build_headers()
        details = {"method": method, "path": path}

        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                headers=headers,
            )
        except httpx.TimeoutException as exc:
            raise TransportError(
                ErrorCode.TIMEOUT,
                f"Request timed out: {method} {path}",
                details=details,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(
                ErrorCode.NETWORK_ERROR,
                str(exc) or f"Network error: {method} {path}",
                details=details,
            ) from exc

        if response.status_code == httpx.codes.UNAUTHORIZED:
            await self.clear_auth_state()

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            code = (
                ErrorCode.UNAUTHORIZED
                if response.status_code == httpx.codes.UNAUTHORIZED
                else ErrorCode.HTTP_ERROR
            )
            raise TransportError(
                code,
                _extract_error_message(response),
                status_code=response.status_code,
                details={**details, "response_body": _body_excerpt(response)},
            ) from exc

        return ApiResponse(status_code=response.status_code, data=_decode_body(response, details))

    async def clear_auth_state(self) -> None:
        """Remove the token and cached identity keys; failures are logged only."""
        for key in self._auth_state_keys:
            try:
                await self._store.remove(key)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "Failed to clear auth state key",
                    extra={"key": key, "error": str(exc), "error_type": type(exc).__name__},
                )

    async def _build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}

        correlation_id = get_correlation_id()
        if correlation_id:
            headers["X-Request-ID"] = correlation_id

        token = await self._load_valid_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _load_valid_token(self) -> str | None:
        try:
            token = await self._store.get(self._auth_token_key)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Token lookup failed, sending request without credentials",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            return None

        if not token:
            return None

        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError as exc:
            logger.warning("Token validation error: %s", exc)
            return None

        expires_at = claims.get("exp")
        if isinstance(expires_at, (int, float)) and expires_at < self._clock():
            logger.info("Stored token expired, clearing auth state")
            await self.clear_auth_state()
            return None

        return token


def _decode_body(response: httpx.Response, details: dict[str, Any]) -> Any:
    if not response.content or not response.content.strip():
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise TransportError(
            ErrorCode.MALFORMED_RESPONSE,
            "Response body is not valid JSON",
            status_code=response.status_code,
            details={**details, "response_body": _body_excerpt(response)},
        ) from exc


def _extract_error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        for field in ("message", "error", "exception", "detail"):
            value = payload.get(field)
            if isinstance(value, str) and value.strip():
                return value.strip()

    reason = response.reason_phrase or "error"
    return f"HTTP {response.status_code} {reason}"


def _body_excerpt(response: httpx.Response) -> str | None:
    text = response.text
    if not text:
        return None
    if len(text) > _MAX_BODY_CHARS:
        return text[: _MAX_BODY_CHARS - 3] + "..."
    return text


__all__ = ["AUTH_STATE_KEYS", "AUTH_TOKEN_KEY", "ApiClient", "ApiResponse"]

"""Shared error primitives and helpers that turn exceptions into log-safe context."""

from __future__ import annotations

import json
from enum import StrEnum
from typing import Any, Mapping

UNKNOWN_ERROR_MESSAGE = "Unknown error"


class ErrorCode(StrEnum):
    """Canonical error codes attached to contained failures."""

    # Persistence
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"

    # Transport
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    HTTP_ERROR = "HTTP_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"

    # Localization
    UNSUPPORTED_LOCALE = "UNSUPPORTED_LOCALE"

    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class PortalClientError(Exception):
    """Base error for failures raised by client collaborators."""

    def __init__(
        self,
        code: ErrorCode | str,
        message: str,
        *,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = str(code)
        self.message = message
        self.details: dict[str, Any] = dict(details or {})


class StoreUnavailableError(PortalClientError):
    """Durable preference storage could not be read or written."""

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        merged = dict(details or {})
        if key is not None:
            merged.setdefault("key", key)
        super().__init__(ErrorCode.STORE_UNAVAILABLE, message, details=merged)
        self.key = key


class TransportError(PortalClientError):
    """Outbound HTTP call failed before a usable payload was received."""

    def __init__(
        self,
        code: ErrorCode | str,
        message: str,
        *,
        status_code: int | None = None,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(code, message, details=details)
        self.status_code = status_code


def build_error_context(exc: BaseException, *, max_body_chars: int = 400) -> dict[str, Any]:
    """Return a JSON-safe dict describing ``exc`` for logs and results."""

    context: dict[str, Any] = {"error_type": type(exc).__name__}
    message = str(exc).strip()
    if message:
        context["error"] = message

    if isinstance(exc, PortalClientError):
        context["code"] = exc.code
        for key, value in exc.details.items():
            if value is None or key in context:
                continue
            context[key] = _truncate(_normalize_value(value), max_body_chars)
        if isinstance(exc, TransportError) and exc.status_code is not None:
            context["status_code"] = exc.status_code
    else:
        context["code"] = ErrorCode.UNKNOWN_ERROR.value

    cause = exc.__cause__
    if cause is not None:
        context["cause_type"] = type(cause).__name__
        cause_message = str(cause).strip()
        if cause_message:
            context["cause"] = _truncate(cause_message, max_body_chars)

    return context


def summarize_error(exc: BaseException) -> str:
    """Return the human readable message of ``exc`` or a generic fallback."""

    if isinstance(exc, PortalClientError) and exc.message.strip():
        return exc.message
    message = str(exc).strip()
    return message or UNKNOWN_ERROR_MESSAGE


def _normalize_value(value: object) -> object:
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (dict, list)):
        try:
            json.dumps(value)
            return value
        except TypeError:
            return str(value)
    return str(value)


def _truncate(value: object, limit: int) -> object:
    if isinstance(value, str) and len(value) > limit:
        return value[: limit - 3] + "..."
    return value


__all__ = [
    "UNKNOWN_ERROR_MESSAGE",
    "ErrorCode",
    "PortalClientError",
    "StoreUnavailableError",
    "TransportError",
    "build_error_context",
    "summarize_error",
]

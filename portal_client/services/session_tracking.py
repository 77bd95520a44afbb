"""
Session tracking service.

Reports app opens/resumes and closes/backgrounds to the parent portal
analytics collector. Tracking is best-effort: every outcome, including
transport failures, comes back as a SessionEventResult and is logged; nothing
is retried and nothing is raised to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol
from uuid import uuid4

from pydantic import ValidationError

from portal_client.core.errors import (
    ErrorCode,
    TransportError,
    build_error_context,
    summarize_error,
)
from portal_client.core.logging import bind_correlation_id, reset_correlation_id
from portal_client.schemas.session import SessionEvent, SessionEventResponse, SessionEventResult

logger = logging.getLogger("portal_client.services.session_tracking")

_EVENT_LABELS: Mapping[SessionEvent, str] = {
    SessionEvent.SESSION_START: "App session",
    SessionEvent.SESSION_END: "App close",
}


class TransportResponse(Protocol):
    data: Any


class SessionTransport(Protocol):
    """Anything that can POST to a path and expose the decoded body as ``data``."""

    async def post(self, path: str) -> TransportResponse: ...


class SessionEventReporter:
    """Send session lifecycle events to fixed collector endpoints."""

    def __init__(
        self,
        transport: SessionTransport,
        *,
        start_path: str,
        end_path: str,
    ) -> None:
        self._transport = transport
        self._paths: dict[SessionEvent, str] = {
            SessionEvent.SESSION_START: start_path,
            SessionEvent.SESSION_END: end_path,
        }

    async def report_start(self) -> SessionEventResult:
        """Track a cold start or a resume from background."""
        return await self.report(SessionEvent.SESSION_START)

    async def report_end(self) -> SessionEventResult:
        """Track the app being closed or sent to background."""
        return await self.report(SessionEvent.SESSION_END)

    async def report(self, event: SessionEvent) -> SessionEventResult:
        token = bind_correlation_id(uuid4().hex)
        try:
            return await self._send(event)
        finally:
            reset_correlation_id(token)

    async def _send(self, event: SessionEvent) -> SessionEventResult:
        label = _EVENT_LABELS[event]
        path = self._paths[event]
        try:
            response = await self._transport.post(path)
            result = _result_from_payload(getattr(response, "data", None))
        except Exception as exc:  # noqa: BLE001
            context = build_error_context(exc)
            logger.error(
                "%s tracking failed",
                label,
                extra={"event": event.value, "path": path, **context},
            )
            return SessionEventResult(success=False, message=summarize_error(exc), error=context)

        logger.info(
            "%s tracked",
            label,
            extra={"event": event.value, "path": path, "success": result.success},
        )
        return result


def _result_from_payload(data: Any) -> SessionEventResult:
    if not data:
        return SessionEventResult(success=False)

    if not isinstance(data, Mapping):
        return SessionEventResult(success=True)

    payload = data
    # Frappe wraps method return values as {"message": <value>}
    inner = payload.get("message")
    if "success" not in payload and isinstance(inner, Mapping):
        if not inner:
            return SessionEventResult(success=False)
        payload = inner

    try:
        parsed = SessionEventResponse.model_validate(dict(payload))
    except ValidationError as exc:
        raise TransportError(
            ErrorCode.MALFORMED_RESPONSE,
            "Unexpected session tracking payload",
            details={"validation_errors": exc.error_count()},
        ) from exc

    return SessionEventResult(success=parsed.success, message=parsed.message)


__all__ = ["SessionEventReporter", "SessionTransport"]

"""Public exports for Pydantic schemas."""

from __future__ import annotations

from .session import SessionEvent, SessionEventResponse, SessionEventResult

__all__ = [
    "SessionEvent",
    "SessionEventResponse",
    "SessionEventResult",
]

"""Schemas describing session tracking payloads and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class SessionEvent(StrEnum):
    """Lifecycle events reported to the collector."""

    SESSION_START = "session_start"
    SESSION_END = "session_end"


class SessionEventResponse(BaseModel):
    """Payload returned by the collector for a tracked event."""

    success: bool = True
    message: str | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("message", mode="before")
    @classmethod
    def _text_message_only(cls, value: Any) -> str | None:
        # Collectors may echo ids or lists here; only text is surfaced
        return value if isinstance(value, str) else None


@dataclass(slots=True)
class SessionEventResult:
    """Outcome handed back to the caller; failures are values, never exceptions."""

    success: bool
    message: str | None = None
    error: dict[str, Any] | None = field(default=None)


__all__ = ["SessionEvent", "SessionEventResponse", "SessionEventResult"]

"""Translate host app state changes into session tracking reports."""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum

from portal_client.schemas.session import SessionEvent, SessionEventResult
from portal_client.services.session_tracking import SessionEventReporter

logger = logging.getLogger("portal_client.services.lifecycle")


class AppState(StrEnum):
    """States reported by the host platform."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    BACKGROUND = "background"


class LifecycleObserver:
    """Schedule session reports for foreground/background transitions.

    Reports run as background tasks so the caller (usually a UI callback)
    never waits on the network.
    """

    def __init__(self, reporter: SessionEventReporter) -> None:
        self._reporter = reporter
        self._state: AppState | None = None
        self._session_open = False
        self._pending: set[asyncio.Task[SessionEventResult]] = set()

    @property
    def state(self) -> AppState | None:
        return self._state

    @property
    def pending(self) -> int:
        return len(self._pending)

    def on_launch(self) -> asyncio.Task[SessionEventResult]:
        """Record a cold start; the app is considered active afterwards."""
        self._state = AppState.ACTIVE
        self._session_open = True
        return self._schedule(SessionEvent.SESSION_START)

    def handle_state_change(
        self,
        next_state: AppState | str,
    ) -> asyncio.Task[SessionEventResult] | None:
        try:
            state = AppState(next_state)
        except ValueError:
            logger.warning("Ignoring unknown app state", extra={"app_state": str(next_state)})
            return None

        previous = self._state
        if state == previous:
            return None
        self._state = state

        if state is AppState.ACTIVE and not self._session_open:
            self._session_open = True
            return self._schedule(SessionEvent.SESSION_START)
        if state is AppState.BACKGROUND and self._session_open:
            self._session_open = False
            return self._schedule(SessionEvent.SESSION_END)
        return None

    async def drain(self) -> list[SessionEventResult]:
        """Wait for outstanding reports and return their results."""
        if not self._pending:
            return []
        tasks = list(self._pending)
        return list(await asyncio.gather(*tasks))

    def _schedule(self, event: SessionEvent) -> asyncio.Task[SessionEventResult]:
        task = asyncio.create_task(
            self._reporter.report(event),
            name=f"session-tracking-{event.value}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        logger.debug("Session report scheduled", extra={"event": event.value})
        return task


__all__ = ["AppState", "LifecycleObserver"]

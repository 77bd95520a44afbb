from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from portal_client.schemas.session import SessionEvent, SessionEventResult
from portal_client.services.lifecycle import AppState, LifecycleObserver


def build_observer() -> tuple[LifecycleObserver, AsyncMock]:
    reporter = AsyncMock()
    reporter.report = AsyncMock(side_effect=lambda event: SessionEventResult(success=True))
    return LifecycleObserver(reporter), reporter


def reported_events(reporter: AsyncMock) -> list[SessionEvent]:
    return [call.args[0] for call in reporter.report.await_args_list]


@pytest.mark.asyncio
async def test_launch_reports_session_start() -> None:
    observer, reporter = build_observer()

    task = observer.on_launch()
    result = await task

    assert result.success is True
    assert observer.state is AppState.ACTIVE
    assert reported_events(reporter) == [SessionEvent.SESSION_START]


@pytest.mark.asyncio
async def test_background_then_resume_reports_end_then_start() -> None:
    observer, reporter = build_observer()
    observer.on_launch()

    observer.handle_state_change("inactive")
    observer.handle_state_change(AppState.BACKGROUND)
    observer.handle_state_change("active")
    results = await observer.drain()

    assert len(results) == 3
    assert all(result.success for result in results)
    assert reported_events(reporter) == [
        SessionEvent.SESSION_START,
        SessionEvent.SESSION_END,
        SessionEvent.SESSION_START,
    ]


@pytest.mark.asyncio
async def test_active_to_background_reports_end() -> None:
    observer, reporter = build_observer()
    observer.on_launch()
    await observer.drain()

    task = observer.handle_state_change("background")
    assert task is not None
    await task

    assert reported_events(reporter) == [SessionEvent.SESSION_START, SessionEvent.SESSION_END]


@pytest.mark.asyncio
async def test_inactive_and_repeated_states_schedule_nothing() -> None:
    observer, reporter = build_observer()
    observer.on_launch()
    await observer.drain()

    assert observer.handle_state_change("active") is None
    assert observer.handle_state_change("inactive") is None
    assert observer.handle_state_change("inactive") is None
    assert observer.handle_state_change("sleeping") is None

    assert reported_events(reporter) == [SessionEvent.SESSION_START]


@pytest.mark.asyncio
async def test_reports_run_in_background_and_drain_waits() -> None:
    release = asyncio.Event()
    reporter = AsyncMock()

    async def slow_report(event: SessionEvent) -> SessionEventResult:
        await release.wait()
        return SessionEventResult(success=False, message="offline")

    reporter.report = slow_report
    observer = LifecycleObserver(reporter)

    observer.on_launch()
    await asyncio.sleep(0)
    assert observer.pending == 1

    release.set()
    results = await observer.drain()

    assert results == [SessionEventResult(success=False, message="offline")]
    assert observer.pending == 0
    assert await observer.drain() == []


@pytest.mark.asyncio
async def test_inactive_round_trip_does_not_restart_session() -> None:
    observer, reporter = build_observer()
    observer.on_launch()

    observer.handle_state_change("inactive")
    observer.handle_state_change("active")
    await observer.drain()

    assert reported_events(reporter) == [SessionEvent.SESSION_START]


@pytest.mark.asyncio
async def test_background_without_open_session_reports_nothing() -> None:
    observer, reporter = build_observer()

    assert observer.handle_state_change("background") is None
    task = observer.handle_state_change("active")
    assert task is not None
    await task

    assert reported_events(reporter) == [SessionEvent.SESSION_START]

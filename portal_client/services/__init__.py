"""Services reporting app lifecycle activity to the backend."""

from portal_client.services.lifecycle import AppState, LifecycleObserver
from portal_client.services.session_tracking import SessionEventReporter, SessionTransport

__all__ = [
    "AppState",
    "LifecycleObserver",
    "SessionEventReporter",
    "SessionTransport",
]

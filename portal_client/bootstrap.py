"""Runtime assembly: startup and shutdown of the client core."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from portal_client.core.config import Settings, get_settings
from portal_client.core.http import ApiClient
from portal_client.core.logging import configure_logging
from portal_client.core.storage import PreferenceStore, create_preference_store
from portal_client.core.version import APP_VERSION
from portal_client.i18n.detector import LanguageResolver
from portal_client.i18n.language import LanguageService
from portal_client.i18n.translator import Localizer, init_localization
from portal_client.services.lifecycle import LifecycleObserver
from portal_client.services.session_tracking import SessionEventReporter

logger = logging.getLogger("portal_client.bootstrap")


@dataclass(slots=True)
class PortalRuntime:
    """Container for the objects wired together at startup."""

    settings: Settings
    store: PreferenceStore
    resolver: LanguageResolver
    localizer: Localizer
    language: LanguageService
    api_client: ApiClient
    reporter: SessionEventReporter
    lifecycle: LifecycleObserver


async def bootstrap(
    app_settings: Settings | None = None,
    *,
    store: PreferenceStore | None = None,
    api_client: ApiClient | None = None,
) -> PortalRuntime:
    """Build the runtime; store and network problems never abort startup."""

    resolved_settings = app_settings or get_settings()
    configure_logging(resolved_settings.log_level)

    preference_store = store or create_preference_store(
        resolved_settings.preference_store_url,
        namespace=resolved_settings.preference_namespace,
    )

    resolver = LanguageResolver(
        preference_store,
        key=resolved_settings.language_preference_key,
        default_locale=resolved_settings.default_locale,
    )
    locale = await resolver.detect()
    localizer = init_localization(locale, default_locale=resolved_settings.default_locale)

    client = api_client or ApiClient(
        resolved_settings.api_origin,
        store=preference_store,
        timeout=resolved_settings.request_timeout_seconds,
        auth_token_key=resolved_settings.auth_token_key,
    )
    reporter = SessionEventReporter(
        client,
        start_path=resolved_settings.session_start_path,
        end_path=resolved_settings.session_end_path,
    )

    logger.info(
        "Portal client started",
        extra={
            "version": APP_VERSION,
            "environment": resolved_settings.environment,
            "locale": localizer.locale,
        },
    )

    return PortalRuntime(
        settings=resolved_settings,
        store=preference_store,
        resolver=resolver,
        localizer=localizer,
        language=LanguageService(localizer, resolver),
        api_client=client,
        reporter=reporter,
        lifecycle=LifecycleObserver(reporter),
    )


async def shutdown(runtime: PortalRuntime) -> None:
    """Flush pending session reports and release network/storage resources."""

    await runtime.lifecycle.drain()
    await runtime.api_client.close()
    try:
        await runtime.store.close()
    except Exception:  # noqa: BLE001
        logger.exception("Failed to close preference store")
    logger.info("Portal client stopped")


__all__ = ["PortalRuntime", "bootstrap", "shutdown"]

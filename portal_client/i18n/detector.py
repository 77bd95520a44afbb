"""Startup language detection backed by the preference store."""

from __future__ import annotations

import logging

from portal_client.core.errors import build_error_context
from portal_client.core.storage import PreferenceStore
from portal_client.i18n.config import DEFAULT_LOCALE, SUPPORTED_LOCALE_CODES, normalize_locale

logger = logging.getLogger("portal_client.i18n.detector")

LANGUAGE_PREFERENCE_KEY = "userLanguage"


class LanguageResolver:
    """Resolve the active locale from the stored preference.

    Neither method raises: a store failure is logged and handled as if no
    preference had been saved.
    """

    def __init__(
        self,
        store: PreferenceStore,
        *,
        key: str = LANGUAGE_PREFERENCE_KEY,
        default_locale: str = DEFAULT_LOCALE,
    ) -> None:
        self._store = store
        self._key = key
        self._default_locale = default_locale

    @property
    def default_locale(self) -> str:
        return self._default_locale

    async def detect(self) -> str:
        """Return the stored locale, or the default locale when none is usable."""
        try:
            stored = await self._store.get(self._key)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Error reading language preference, using default locale",
                extra={
                    "key": self._key,
                    "locale": self._default_locale,
                    **build_error_context(exc),
                },
            )
            return self._default_locale

        candidate = stored.strip() if isinstance(stored, str) else ""
        if not candidate:
            logger.info(
                "No language preference stored, using default locale",
                extra={"locale": self._default_locale},
            )
            return self._default_locale

        resolved = normalize_locale(candidate, default=self._default_locale)
        if resolved != candidate and candidate not in SUPPORTED_LOCALE_CODES:
            logger.warning(
                "Stored language preference is not supported",
                extra={"stored": candidate[:32], "locale": resolved},
            )

        logger.info("Language preference resolved", extra={"locale": resolved})
        return resolved

    async def cache(self, locale: str) -> bool:
        """Persist ``locale`` as the user's choice; returns False if the write failed."""
        try:
            await self._store.set(self._key, locale)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Error saving language preference",
                extra={"key": self._key, "locale": locale, **build_error_context(exc)},
            )
            return False

        logger.debug("Language preference saved", extra={"locale": locale})
        return True


__all__ = ["LANGUAGE_PREFERENCE_KEY", "LanguageResolver"]

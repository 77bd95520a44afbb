"""User-facing language switching."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from portal_client.i18n.config import SUPPORTED_LOCALES, get_supported_locale, normalize_locale
from portal_client.i18n.detector import LanguageResolver
from portal_client.i18n.translator import Localizer

logger = logging.getLogger("portal_client.i18n.language")


@dataclass(frozen=True, slots=True)
class LanguageOption:
    """Entry of the language picker."""

    code: str
    name: str
    native_name: str
    is_current: bool


class LanguageService:
    """Expose the available languages and apply the user's choice."""

    def __init__(self, localizer: Localizer, resolver: LanguageResolver) -> None:
        self._localizer = localizer
        self._resolver = resolver

    @property
    def current_language(self) -> str:
        return self._localizer.locale

    def available_languages(self) -> list[LanguageOption]:
        current = self._localizer.locale
        return [
            LanguageOption(
                code=locale.code,
                name=self._localizer.translate(locale.name_key),
                native_name=locale.native_name,
                is_current=locale.code == current,
            )
            for locale in SUPPORTED_LOCALES
        ]

    def current_language_name(self) -> str:
        """Return the native name of the active language."""
        current = get_supported_locale(self._localizer.locale)
        if current is None:
            current = get_supported_locale(self._localizer.default_locale)
        return current.native_name if current is not None else SUPPORTED_LOCALES[0].native_name

    async def change_language(self, code: str) -> bool:
        """
        Switch the active language and remember it.

        The switch applies to the running session even when the preference
        cannot be persisted. Returns False only for unsupported codes.
        """
        candidate = normalize_locale(code, default="")
        if not candidate:
            logger.warning("Rejected unsupported language", extra={"locale": code[:32]})
            return False

        if candidate == self._localizer.locale:
            return True

        self._localizer.switch(candidate)
        persisted = await self._resolver.cache(candidate)
        logger.info(
            "Language changed",
            extra={"locale": candidate, "persisted": persisted},
        )
        return True


__all__ = ["LanguageOption", "LanguageService"]

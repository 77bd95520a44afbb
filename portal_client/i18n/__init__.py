"""Client internationalization (i18n) module.

Detects the active locale from the stored preference at startup and serves
translated strings from the bundled Vietnamese and English catalogs.
"""

from portal_client.i18n.config import (
    DEFAULT_LOCALE,
    SUPPORTED_LOCALE_CODES,
    SUPPORTED_LOCALES,
    SupportedLocale,
    is_supported_locale,
    normalize_locale,
)
from portal_client.i18n.detector import LANGUAGE_PREFERENCE_KEY, LanguageResolver
from portal_client.i18n.language import LanguageOption, LanguageService
from portal_client.i18n.translator import (
    Localizer,
    get_localizer,
    init_localization,
    load_catalog,
    reset_localization,
    translate,
)

__all__ = [
    "DEFAULT_LOCALE",
    "LANGUAGE_PREFERENCE_KEY",
    "SUPPORTED_LOCALES",
    "SUPPORTED_LOCALE_CODES",
    "LanguageOption",
    "LanguageResolver",
    "LanguageService",
    "Localizer",
    "SupportedLocale",
    "get_localizer",
    "init_localization",
    "is_supported_locale",
    "load_catalog",
    "normalize_locale",
    "reset_localization",
    "translate",
]

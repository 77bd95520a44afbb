"""Supported locales of the portal client."""

from typing import NamedTuple


class SupportedLocale(NamedTuple):
    """A supported locale with its metadata."""

    code: str
    name_key: str
    native_name: str


SUPPORTED_LOCALES: tuple[SupportedLocale, ...] = (
    SupportedLocale("vi", "profile.vietnamese", "Tiếng Việt"),
    SupportedLocale("en", "profile.english", "English"),
)

SUPPORTED_LOCALE_CODES: frozenset[str] = frozenset(loc.code for loc in SUPPORTED_LOCALES)

DEFAULT_LOCALE = "vi"


def is_supported_locale(code: str) -> bool:
    """Check if a locale code is supported."""
    return code in SUPPORTED_LOCALE_CODES


def get_supported_locale(code: str) -> SupportedLocale | None:
    for locale in SUPPORTED_LOCALES:
        if locale.code == code:
            return locale
    return None


def normalize_locale(code: str | None, default: str = DEFAULT_LOCALE) -> str:
    """Normalize a locale code to a supported code.

    Handles region-qualified and differently cased codes:
    - "en-US" -> "en"
    - "VI_vn" -> "vi"

    Returns ``default`` if no match found.
    """
    if not code:
        return default

    candidate = code.strip()
    if candidate in SUPPORTED_LOCALE_CODES:
        return candidate

    base = candidate.replace("_", "-").split("-")[0].lower()
    if base in SUPPORTED_LOCALE_CODES:
        return base

    return default

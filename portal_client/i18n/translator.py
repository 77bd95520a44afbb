"""Translation tables and the process-wide localizer.

Catalogs are the i18next-style JSON files under ``locales/``: nested objects
are flattened to dotted keys and ``{{name}}`` placeholders are interpolated.
Tables are read-only once loaded. A locale switch publishes a new immutable
snapshot with a single assignment, so readers see either the old or the new
table pair and never a mix of both.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, ClassVar, Iterable, Mapping, TypeAlias

from portal_client.i18n.config import DEFAULT_LOCALE, SUPPORTED_LOCALE_CODES, normalize_locale

logger = logging.getLogger("portal_client.i18n.translator")

TRANSLATIONS_DIR = Path(__file__).parent / "locales"

TranslationTable: TypeAlias = Mapping[str, str]

_EMPTY_TABLE: TranslationTable = MappingProxyType({})
_PLACEHOLDER = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


def flatten_catalog(data: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """Flatten nested catalog objects into dotted keys."""
    flat: dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(flatten_catalog(value, full_key))
        elif isinstance(value, str):
            flat[full_key] = value
        elif value is not None:
            flat[full_key] = str(value)
    return flat


def build_table(data: Mapping[str, Any]) -> TranslationTable:
    """Return a read-only table built from a (possibly nested) catalog."""
    return MappingProxyType(flatten_catalog(data))


def load_catalog(
    directory: Path | None = None,
    locales: Iterable[str] = SUPPORTED_LOCALE_CODES,
) -> dict[str, TranslationTable]:
    """Load ``<code>.json`` for every locale.

    A missing or unreadable file yields an empty table so that startup
    never fails on a broken catalog.
    """
    base_dir = directory or TRANSLATIONS_DIR
    catalog: dict[str, TranslationTable] = {}
    for code in sorted(locales):
        path = base_dir / f"{code}.json"
        try:
            with path.open(encoding="utf-8") as fp:
                raw = json.load(fp)
        except (OSError, ValueError) as exc:
            logger.error(
                "Failed to load translation catalog",
                extra={"locale": code, "path": str(path), "error": str(exc)},
            )
            catalog[code] = _EMPTY_TABLE
            continue

        if not isinstance(raw, dict):
            logger.error(
                "Translation catalog must be a JSON object",
                extra={"locale": code, "path": str(path)},
            )
            catalog[code] = _EMPTY_TABLE
            continue

        catalog[code] = build_table(raw)
        logger.debug(
            "Loaded translation catalog",
            extra={"locale": code, "keys": len(catalog[code])},
        )
    return catalog


def interpolate(template: str, params: Mapping[str, object]) -> str:
    """Replace ``{{name}}`` placeholders; unknown placeholders stay as-is."""
    if not params or "{{" not in template:
        return template

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in params:
            return str(params[name])
        return match.group(0)

    return _PLACEHOLDER.sub(_replace, template)


@dataclass(frozen=True, slots=True)
class _Snapshot:
    locale: str
    active: TranslationTable
    fallback: TranslationTable


class Localizer:
    """Resolve translation keys against the active and default tables."""

    def __init__(
        self,
        catalog: Mapping[str, TranslationTable],
        locale: str,
        *,
        default_locale: str = DEFAULT_LOCALE,
    ) -> None:
        self._catalog: Mapping[str, TranslationTable] = MappingProxyType(
            {code: MappingProxyType(dict(table)) for code, table in catalog.items()}
        )
        self._default_locale = default_locale
        self._snapshot = self._build_snapshot(locale)

    @property
    def locale(self) -> str:
        return self._snapshot.locale

    @property
    def default_locale(self) -> str:
        return self._default_locale

    def switch(self, locale: str) -> str:
        """Activate ``locale`` and return the effective locale code."""
        snapshot = self._build_snapshot(locale)
        self._snapshot = snapshot
        logger.info("Active locale switched", extra={"locale": snapshot.locale})
        return snapshot.locale

    def translate(self, key: str, **params: object) -> str:
        """Return the translation of ``key``; falls back to the default table, then the key."""
        snapshot = self._snapshot
        value = snapshot.active.get(key)
        if value is None:
            value = snapshot.fallback.get(key)
        if value is None:
            logger.debug(
                "Missing translation",
                extra={"key": key, "locale": snapshot.locale},
            )
            return key
        return interpolate(value, params)

    def has(self, key: str) -> bool:
        snapshot = self._snapshot
        return key in snapshot.active or key in snapshot.fallback

    def _build_snapshot(self, locale: str) -> _Snapshot:
        resolved = normalize_locale(locale, default=self._default_locale)
        if resolved not in self._catalog:
            resolved = self._default_locale
        return _Snapshot(
            locale=resolved,
            active=self._catalog.get(resolved, _EMPTY_TABLE),
            fallback=self._catalog.get(self._default_locale, _EMPTY_TABLE),
        )


class _LocalizationState:
    """Holder for the process-wide localizer."""

    localizer: ClassVar[Localizer | None] = None


def init_localization(
    locale: str,
    *,
    catalog: Mapping[str, TranslationTable] | None = None,
    default_locale: str = DEFAULT_LOCALE,
) -> Localizer:
    """Create the shared localizer once; later calls only switch the locale."""
    existing = _LocalizationState.localizer
    if existing is not None:
        if existing.default_locale != default_locale:
            logger.warning(
                "Localization already initialized; default locale change ignored",
                extra={
                    "default_locale": existing.default_locale,
                    "requested_default_locale": default_locale,
                },
            )
        if existing.locale != normalize_locale(locale, default=existing.default_locale):
            existing.switch(locale)
        return existing

    localizer = Localizer(
        catalog if catalog is not None else load_catalog(),
        locale,
        default_locale=default_locale,
    )
    _LocalizationState.localizer = localizer
    logger.info("Localization initialized", extra={"locale": localizer.locale})
    return localizer


def get_localizer() -> Localizer:
    """Return the shared localizer.

    Raises:
        RuntimeError: if init_localization() has not run yet.
    """
    localizer = _LocalizationState.localizer
    if localizer is None:
        raise RuntimeError("Localization not initialized. Call init_localization() first.")
    return localizer


def reset_localization() -> None:
    """Drop the shared localizer so the next init starts from scratch."""
    _LocalizationState.localizer = None


def translate(key: str, **params: object) -> str:
    """Translate ``key`` with the shared localizer."""
    return get_localizer().translate(key, **params)


__all__ = [
    "TRANSLATIONS_DIR",
    "Localizer",
    "TranslationTable",
    "build_table",
    "flatten_catalog",
    "get_localizer",
    "init_localization",
    "interpolate",
    "load_catalog",
    "reset_localization",
    "translate",
]

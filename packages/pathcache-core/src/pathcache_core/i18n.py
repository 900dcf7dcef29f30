"""Localization utilities for pathcache."""

from __future__ import annotations

import gettext as _gettext_module
import importlib
import locale as _locale
from collections.abc import Iterable
from pathlib import Path

_DOMAIN = "pathcache"
_LOCALE_DIR = Path(__file__).resolve().parent / "locales"

_current_locale: str | None = None
_translator: _gettext_module.NullTranslations = _gettext_module.NullTranslations()


def _normalize_locale(value: str | None) -> str | None:
    """Normalize locale strings (e.g. ``fr-FR`` -> ``fr_FR``)."""
    if not value:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    candidate = candidate.replace("-", "_").split(".", maxsplit=1)[0]
    parts = candidate.split("_", maxsplit=1)
    language = parts[0].lower()
    if len(parts) == 1:
        return language
    return f"{language}_{parts[1].upper()}"


def detect_system_locale() -> str | None:
    """Best-effort locale detection, returning ``None`` if undetectable."""
    try:
        detected = _locale.getlocale()
    except ValueError:
        return None
    return _normalize_locale(detected[0])


def _candidate_languages(locale_value: str | None) -> list[str]:
    normalized = _normalize_locale(locale_value)
    if not normalized:
        return []
    candidates = [normalized]
    base = normalized.split("_", maxsplit=1)[0]
    if base and base not in candidates:
        candidates.append(base)
    return candidates


def set_locale(locale_value: str | None) -> str | None:
    """Install translations for the provided locale and return the value used."""
    global _translator, _current_locale

    languages = _candidate_languages(locale_value)
    if not languages:
        languages = _candidate_languages(detect_system_locale())

    translator = _gettext_module.translation(
        _DOMAIN,
        localedir=_LOCALE_DIR,
        languages=languages or None,
        fallback=True,
    )
    _translator = translator  # type: ignore[assignment]

    # Click renders its own usage/errors; keep them in the same language.
    for module_name in ("click.core", "click.exceptions", "click.formatting"):
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError:  # pragma: no cover - optional deps
            continue
        if hasattr(module, "_"):
            module._ = translator.gettext  # type: ignore[attr-defined]

    _current_locale = languages[0] if languages else None
    return _current_locale


def get_current_locale() -> str | None:
    """Return the locale currently in use."""
    return _current_locale


def gettext_(message: str) -> str:
    """Translate a simple message."""
    return _translator.gettext(message)


def ngettext_(singular: str, plural: str, count: int) -> str:
    """Translate a plural-aware message."""
    return _translator.ngettext(singular, plural, count)


def resolve_preferred_locale(*candidates: Iterable[str | None] | str | None) -> str | None:
    """Return the first non-empty locale among the provided candidates."""
    flattened: list[str | None] = []
    for candidate in candidates:
        if isinstance(candidate, Iterable) and not isinstance(candidate, (str, bytes)):
            flattened.extend(candidate)
        else:
            flattened.append(candidate)  # type: ignore[arg-type]

    for value in flattened:
        normalized = _normalize_locale(value)
        if normalized:
            return normalized
    return None


_ = gettext_
gettext = gettext_
ngettext = ngettext_

__all__ = [
    "_",
    "detect_system_locale",
    "get_current_locale",
    "gettext",
    "ngettext",
    "resolve_preferred_locale",
    "set_locale",
]

"""Locale selection for CLI invocations."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import typer

from pathcache_core.i18n import detect_system_locale, resolve_preferred_locale, set_locale

if TYPE_CHECKING:  # pragma: no cover - typing only
    from pathcache_core.config import CacheConfig

ENV_LOCALE_VAR = "PATHCACHE_LOCALE"


def apply_locale(
    ctx: typer.Context | None,
    *,
    config: CacheConfig | None = None,
    override: str | None = None,
) -> None:
    """Install the locale following CLI/env/config precedence."""
    ctx_locale = None
    if ctx is not None:
        ctx.ensure_object(dict)
        if isinstance(ctx.obj, dict):
            ctx_locale = ctx.obj.get("cli_locale")

    final_locale = resolve_preferred_locale(
        override,
        ctx_locale,
        os.environ.get(ENV_LOCALE_VAR),
        config.locale if config else None,
        detect_system_locale(),
    )
    set_locale(final_locale)


__all__ = ["ENV_LOCALE_VAR", "apply_locale"]

"""Configuration loading shared by CLI commands."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

import typer

from pathcache_core.i18n import _

from .deps import get_config_module
from .locale import apply_locale
from .logs import configure_logging

if TYPE_CHECKING:  # pragma: no cover - typing only
    from pathcache_core.config import CacheConfig


def load_settings(
    ctx: typer.Context,
    config_path: Path | None,
    *,
    base_dir: Path | None = None,
    one_shot: bool = True,
) -> CacheConfig:
    """Load the configuration for a command, exiting with code 1 on errors.

    Locale and log level are applied from the loaded file; ``--log-level`` on
    the command line wins over ``[logging] level``.
    """
    config_module = get_config_module()
    target = config_path or config_module.default_config_path()
    try:
        config = config_module.load_config(target)
    except RuntimeError as exc:
        apply_locale(ctx)
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    apply_locale(ctx, config=config)

    ctx.ensure_object(dict)
    cli_level = ctx.obj.get("log_level") if isinstance(ctx.obj, dict) else None
    configure_logging(cli_level or config.log_level)

    overrides: dict[str, object] = {"one_shot": one_shot or config.one_shot}
    if base_dir is not None:
        overrides["base_dir"] = str(base_dir.expanduser())
    config = replace(config, **overrides)

    if config.base_dir and not Path(config.base_dir).expanduser().is_dir():
        typer.echo(
            _("Base directory not found: {path}").format(path=config.base_dir),
            err=True,
        )
        raise typer.Exit(code=1)
    return config


__all__ = ["load_settings"]

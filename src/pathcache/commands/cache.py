"""Cache maintenance CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import typer

from pathcache_core.i18n import _, ngettext

from ..cli_support.deps import get_path_cache_cls
from ..cli_support.settings import load_settings


def _open_cache(ctx: typer.Context, config_path: Path | None, base_dir: Path | None):
    config = load_settings(ctx, config_path, base_dir=base_dir)
    return get_path_cache_cls()(config, search_roots=[])


def cache_info(
    ctx: typer.Context,
    base_dir: Path | None = typer.Option(None, "--base-dir", help=_("Base directory.")),
    config_path: Path | None = typer.Option(None, "--config-path", hidden=True),
) -> None:
    """Describe where and how the cache is persisted."""
    cache = _open_cache(ctx, config_path, base_dir)
    try:
        snapshot = cache.backend.load()
        config = cache.config
        typer.echo(_("Base directory: {path}").format(path=cache.base_dir))
        typer.echo(_("Backend: {name}").format(name=cache.backend.name))
        if cache.backend.source_file is not None:
            typer.echo(_("Cache file: {path}").format(path=cache.backend.source_file))
        if cache.backend.name == "shared":
            typer.echo(_("Shared store: {path}").format(path=config.shared_store_path()))
            typer.echo(_("Cache key: {key}").format(key=config.cache_key()))
        flag_state = _("raised") if cache.signal.is_raised() else _("clear")
        typer.echo(
            _("Invalidation flag: {state} ({path})").format(
                state=flag_state, path=cache.signal.flag_path
            )
        )
        count = len(snapshot)
        typer.echo(
            ngettext("{count} cached entry", "{count} cached entries", count).format(count=count)
        )
    finally:
        cache.close()


def cache_show(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help=_("Print the snapshot as JSON.")),
    base_dir: Path | None = typer.Option(None, "--base-dir", help=_("Base directory.")),
    config_path: Path | None = typer.Option(None, "--config-path", hidden=True),
) -> None:
    """List the persisted identifier to path entries."""
    cache = _open_cache(ctx, config_path, base_dir)
    try:
        snapshot = cache.backend.load()
    finally:
        cache.close()

    if json_output:
        typer.echo(json.dumps(snapshot, indent=2, sort_keys=True))
        return

    if not snapshot:
        typer.echo(_("The cache is empty."))
        return

    for identifier in sorted(snapshot):
        entry = snapshot[identifier]
        typer.echo(f"{identifier} -> {entry if entry is not None else _('(not found)')}")


def cache_invalidate(
    ctx: typer.Context,
    base_dir: Path | None = typer.Option(None, "--base-dir", help=_("Base directory.")),
    config_path: Path | None = typer.Option(None, "--config-path", hidden=True),
) -> None:
    """Ask the next process to rebuild the cache before using it."""
    cache = _open_cache(ctx, config_path, base_dir)
    try:
        flag = cache.signal.raise_flag()
    except OSError as exc:
        typer.echo(_("Unable to raise the invalidation flag: {error}").format(error=exc), err=True)
        raise typer.Exit(code=1) from exc
    finally:
        cache.close()
    typer.echo(_("Invalidation flag raised: {path}").format(path=flag))


def cache_clear(
    ctx: typer.Context,
    base_dir: Path | None = typer.Option(None, "--base-dir", help=_("Base directory.")),
    config_path: Path | None = typer.Option(None, "--config-path", hidden=True),
) -> None:
    """Delete the persisted snapshot."""
    cache = _open_cache(ctx, config_path, base_dir)
    try:
        cleared = cache.backend.clear()
    finally:
        cache.close()
    if not cleared:
        typer.echo(
            _("Unable to clear the cache ({backend} backend); see the log for details.").format(
                backend=cache.backend.name
            ),
            err=True,
        )
        raise typer.Exit(code=1)
    typer.echo(_("Cache cleared ({backend} backend).").format(backend=cache.backend.name))


__all__ = ["cache_clear", "cache_info", "cache_invalidate", "cache_show"]

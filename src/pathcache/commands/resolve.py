"""Implementation of the `resolve` CLI command."""

from __future__ import annotations

from pathlib import Path

import typer

from pathcache_core.i18n import _

from ..cli_support.deps import get_path_cache_cls
from ..cli_support.settings import load_settings


def resolve(
    ctx: typer.Context,
    identifier: str = typer.Argument(..., help=_("Identifier to locate, e.g. Foo_Bar.")),
    roots: list[Path] = typer.Option(
        [],
        "--root",
        "-r",
        help=_("Search root, in priority order (repeatable). Overrides the configuration."),
    ),
    base_dir: Path | None = typer.Option(
        None,
        "--base-dir",
        help=_("Base directory entries are stored relative to."),
    ),
    relative: bool = typer.Option(
        False,
        "--relative",
        help=_("Print the stored entry (relative to the base directory) instead."),
    ),
    config_path: Path | None = typer.Option(None, "--config-path", hidden=True),
) -> None:
    """Print the file defining an identifier, using and updating the cache."""
    config = load_settings(ctx, config_path, base_dir=base_dir)
    path_cache_cls = get_path_cache_cls()

    search_roots = [root.expanduser() for root in roots] if roots else None
    with path_cache_cls(config, search_roots=search_roots) as cache:
        entry = cache.full_path(identifier)
        location = cache.absolute(entry) if entry is not None else None

    if entry is None or location is None:
        typer.echo(_("Not found: {identifier}").format(identifier=identifier), err=True)
        raise typer.Exit(code=1)

    typer.echo(entry if relative else str(location))


__all__ = ["resolve"]

"""Config-related CLI commands."""

from __future__ import annotations

from pathlib import Path

import typer

from pathcache_core.i18n import _

from ..cli_support.deps import get_config_module
from ..cli_support.locale import apply_locale


def config_path(
    ctx: typer.Context,
    config_path: Path | None = typer.Option(None, "--config-path", hidden=True),
) -> None:
    """Print the configuration file path in use."""
    apply_locale(ctx)
    config_module = get_config_module()
    target = config_path or config_module.default_config_path()
    typer.echo(str(target))


def config_show(
    ctx: typer.Context,
    config_path: Path | None = typer.Option(None, "--config-path", hidden=True),
) -> None:
    """Show the effective cache settings."""
    apply_locale(ctx)
    config_module = get_config_module()
    target = config_path or config_module.default_config_path()
    try:
        config = config_module.load_config(target)
    except RuntimeError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    apply_locale(ctx, config=config)
    roots = ", ".join(config.search_roots) if config.search_roots else _("sys.path")
    yes, no = _("yes"), _("no")

    typer.echo(_("Configuration file: {path}").format(path=target))
    typer.echo(_("Base directory: {path}").format(path=config.base_path()))
    typer.echo(_("Search roots: {roots}").format(roots=roots))
    typer.echo(
        _("Naming: separator {separator!r}, suffix {suffix}").format(
            separator=config.separator, suffix=config.suffix
        )
    )
    typer.echo(_("Backend: {backend}").format(backend=config.backend))
    typer.echo(_("Cache file: {path}").format(path=config.cache_file_path()))
    typer.echo(
        _("Cache misses: {misses}, prime bytecode: {prime}").format(
            misses=yes if config.cache_misses else no,
            prime=yes if config.prime_bytecode else no,
        )
    )
    typer.echo(
        _("Rebuild hook: {hook}").format(hook=config.rebuild_hook or _("built-in revalidation"))
    )
    typer.echo(_("Log level: {level}").format(level=config.log_level))


def config_init(
    ctx: typer.Context,
    base_dir: Path | None = typer.Option(None, "--base-dir", help=_("Base directory.")),
    roots: list[str] = typer.Option(
        [],
        "--root",
        "-r",
        help=_("Search root, relative to the base directory or absolute (repeatable)."),
    ),
    backend: str = typer.Option(
        "auto",
        "--backend",
        help=_("Persistence backend: auto, shared, file or none."),
    ),
    force: bool = typer.Option(False, "--force", help=_("Overwrite an existing file.")),
    config_path: Path | None = typer.Option(None, "--config-path", hidden=True),
) -> None:
    """Write a configuration file with the given settings."""
    apply_locale(ctx)
    config_module = get_config_module()
    target = config_path or config_module.default_config_path()

    if target.exists() and not force:
        typer.echo(
            _("A configuration already exists at {path}; use --force to replace it.").format(
                path=target
            ),
            err=True,
        )
        raise typer.Exit(code=1)

    backend_value = backend.strip().lower()
    if backend_value not in config_module.BACKEND_CHOICES:
        typer.echo(_("Unknown backend: {backend}").format(backend=backend), err=True)
        raise typer.Exit(code=1)

    config = config_module.CacheConfig(
        base_dir=str(base_dir.expanduser()) if base_dir else None,
        search_roots=tuple(roots),
        backend=backend_value,
    )
    written = config_module.write_config(config, target)
    typer.echo(_("Configuration written to {path}").format(path=written))


__all__ = ["config_init", "config_path", "config_show"]

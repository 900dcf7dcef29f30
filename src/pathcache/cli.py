"""Command-line interface for pathcache."""

from __future__ import annotations

import typer

from pathcache_core.i18n import _, set_locale

from .commands import cache as cache_commands
from .commands import config as config_commands
from .commands.resolve import resolve

app = typer.Typer(
    add_completion=False,
    help=_("Persistent cache mapping identifiers to the files that define them."),
)
cache_app = typer.Typer(
    add_completion=False,
    help=_("Inspect and maintain the persisted cache."),
)
config_app = typer.Typer(
    add_completion=False,
    help=_("Manage local configuration."),
)

app.add_typer(cache_app, name="cache")
app.add_typer(config_app, name="config")


@app.callback()
def main(
    ctx: typer.Context,
    locale_option: str | None = typer.Option(
        None,
        "--locale",
        help=_("Override the locale for this invocation (examples: en, fr, fr_FR)."),
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help=_("Log level for this invocation (debug, info, warning, error)."),
    ),
) -> None:
    """Top-level callback for the CLI application."""
    ctx.ensure_object(dict)
    ctx.obj["cli_locale"] = locale_option
    ctx.obj["log_level"] = log_level
    if locale_option:
        set_locale(locale_option)


app.command(help=_("Print the file defining an identifier."))(resolve)

cache_app.command("info", help=_("Describe the cache backend and its files."))(
    cache_commands.cache_info
)
cache_app.command("show", help=_("List persisted entries."))(cache_commands.cache_show)
cache_app.command("invalidate", help=_("Request a rebuild on the next start."))(
    cache_commands.cache_invalidate
)
cache_app.command("clear", help=_("Delete the persisted snapshot."))(cache_commands.cache_clear)

config_app.command("path", help=_("Print the configuration file path."))(
    config_commands.config_path
)
config_app.command("show", help=_("Show the effective settings."))(config_commands.config_show)
config_app.command("init", help=_("Write a configuration file."))(config_commands.config_init)


__all__ = ["app"]

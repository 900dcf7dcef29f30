"""CLI tests for the resolve, cache and config commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from pathcache.cli import app
from pathcache_core.backends import GeneratedFileBackend
from pathcache_core.config import load_config, write_config


@pytest.fixture()
def config_file(project, tmp_path: Path) -> Path:
    """Write a file-backend configuration for the test project."""
    return write_config(project.config(), tmp_path / "config.toml")


def test_resolve_prints_absolute_path(cli_runner: CliRunner, project, config_file: Path) -> None:
    """Resolving prints the defining file and persists the entry."""
    target = project.add_file("core", "Foo/Bar.py")

    result = cli_runner.invoke(app, ["resolve", "Foo_Bar", "--config-path", str(config_file)])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == str(target)
    assert project.base.joinpath("var", "cache", "path_cache.py").is_file()


def test_resolve_relative_prefers_first_root(
    cli_runner: CliRunner, project, config_file: Path
) -> None:
    """The first matching root wins and ``--relative`` prints the stored entry."""
    project.add_file("core", "Foo/Bar.py")
    project.add_file("local", "Foo/Bar.py")

    result = cli_runner.invoke(
        app, ["resolve", "Foo_Bar", "--relative", "--config-path", str(config_file)]
    )

    assert result.exit_code == 0, result.output
    assert result.output.strip() == "local/Foo/Bar.py"


def test_resolve_with_explicit_roots(cli_runner: CliRunner, project, config_file: Path) -> None:
    """Command-line roots replace the configured ones."""
    target = project.add_file("plugins", "Extra.py")

    result = cli_runner.invoke(
        app,
        [
            "resolve",
            "Extra",
            "--root",
            str(project.base / "plugins"),
            "--config-path",
            str(config_file),
        ],
    )

    assert result.exit_code == 0, result.output
    assert result.output.strip() == str(target)


def test_resolve_missing_identifier_exits_with_error(
    cli_runner: CliRunner, config_file: Path
) -> None:
    """Unknown identifiers are reported with exit code 1."""
    result = cli_runner.invoke(app, ["resolve", "Nope_Nothing", "--config-path", str(config_file)])

    assert result.exit_code == 1
    assert "Not found: Nope_Nothing" in result.output


def test_resolve_rejects_invalid_configuration(cli_runner: CliRunner, tmp_path: Path) -> None:
    """A broken configuration file stops the command."""
    broken = tmp_path / "broken.toml"
    broken.write_text('[cache]\nbackend = "redis"\n', encoding="utf-8")

    result = cli_runner.invoke(app, ["resolve", "Foo_Bar", "--config-path", str(broken)])

    assert result.exit_code == 1
    assert "cache.backend" in result.output


def test_resolve_rejects_missing_base_dir(
    cli_runner: CliRunner, config_file: Path, tmp_path: Path
) -> None:
    """A base directory that does not exist is an error."""
    result = cli_runner.invoke(
        app,
        [
            "resolve",
            "Foo_Bar",
            "--base-dir",
            str(tmp_path / "missing"),
            "--config-path",
            str(config_file),
        ],
    )

    assert result.exit_code == 1
    assert "Base directory not found" in result.output


def test_cache_show_lists_entries(cli_runner: CliRunner, project, config_file: Path) -> None:
    """Entries written by ``resolve`` are listed, also as JSON."""
    project.add_file("core", "Foo/Bar.py")
    cli_runner.invoke(app, ["resolve", "Foo_Bar", "--config-path", str(config_file)])

    listing = cli_runner.invoke(app, ["cache", "show", "--config-path", str(config_file)])
    as_json = cli_runner.invoke(
        app, ["cache", "show", "--json", "--config-path", str(config_file)]
    )

    assert listing.exit_code == 0, listing.output
    assert "Foo_Bar -> core/Foo/Bar.py" in listing.output
    assert '"Foo_Bar": "core/Foo/Bar.py"' in as_json.output


def test_cache_show_empty(cli_runner: CliRunner, config_file: Path) -> None:
    """An absent snapshot is reported as empty."""
    result = cli_runner.invoke(app, ["cache", "show", "--config-path", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "The cache is empty." in result.output


def test_cache_info_describes_backend(cli_runner: CliRunner, project, config_file: Path) -> None:
    """The info command names the backend, its file and the flag state."""
    result = cli_runner.invoke(app, ["cache", "info", "--config-path", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "Backend: file" in result.output
    assert str(project.base / "var" / "cache" / "path_cache.py") in result.output
    assert "Invalidation flag: clear" in result.output
    assert "0 cached entries" in result.output


def test_cache_invalidate_raises_flag(cli_runner: CliRunner, project, config_file: Path) -> None:
    """Invalidation leaves the flag for the next process."""
    result = cli_runner.invoke(app, ["cache", "invalidate", "--config-path", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "Invalidation flag raised" in result.output
    assert project.base.joinpath("var", "cache", "path_cache.flag").exists()

    info = cli_runner.invoke(app, ["cache", "info", "--config-path", str(config_file)])
    assert "Invalidation flag: raised" in info.output


def test_cache_clear_removes_snapshot(cli_runner: CliRunner, project, config_file: Path) -> None:
    """Clearing deletes the generated cache file."""
    project.add_file("core", "Foo/Bar.py")
    cli_runner.invoke(app, ["resolve", "Foo_Bar", "--config-path", str(config_file)])

    result = cli_runner.invoke(app, ["cache", "clear", "--config-path", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "Cache cleared (file backend)." in result.output
    assert not project.base.joinpath("var", "cache", "path_cache.py").exists()


def test_cache_clear_failure_exits_with_error(
    cli_runner: CliRunner, config_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A backend that cannot clear stops with exit code 1 instead of a traceback."""
    monkeypatch.setattr(GeneratedFileBackend, "clear", lambda self: False)

    result = cli_runner.invoke(app, ["cache", "clear", "--config-path", str(config_file)])

    assert result.exit_code == 1
    assert "Unable to clear the cache (file backend)" in result.output


def test_config_path_uses_environment(cli_runner: CliRunner, isolated_config: Path) -> None:
    """The default location follows the environment override."""
    result = cli_runner.invoke(app, ["config", "path"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == str(isolated_config)


def test_config_init_and_show(cli_runner: CliRunner, tmp_path: Path) -> None:
    """``config init`` writes a file that ``config show`` reads back."""
    target = tmp_path / "written.toml"

    created = cli_runner.invoke(
        app,
        [
            "config",
            "init",
            "--base-dir",
            str(tmp_path),
            "--root",
            "local",
            "--root",
            "core",
            "--backend",
            "file",
            "--config-path",
            str(target),
        ],
    )

    assert created.exit_code == 0, created.output
    loaded = load_config(target)
    assert loaded.search_roots == ("local", "core")
    assert loaded.backend == "file"

    shown = cli_runner.invoke(app, ["config", "show", "--config-path", str(target)])
    assert shown.exit_code == 0, shown.output
    assert "Search roots: local, core" in shown.output
    assert "Backend: file" in shown.output


def test_config_init_refuses_to_overwrite(cli_runner: CliRunner, config_file: Path) -> None:
    """An existing file is kept unless ``--force`` is given."""
    before = config_file.read_text(encoding="utf-8")

    refused = cli_runner.invoke(app, ["config", "init", "--config-path", str(config_file)])
    assert refused.exit_code == 1
    assert config_file.read_text(encoding="utf-8") == before

    forced = cli_runner.invoke(
        app, ["config", "init", "--force", "--config-path", str(config_file)]
    )
    assert forced.exit_code == 0, forced.output
    assert load_config(config_file).backend == "auto"


def test_config_init_rejects_unknown_backend(cli_runner: CliRunner, tmp_path: Path) -> None:
    """Only known backends can be written."""
    target = tmp_path / "config.toml"

    result = cli_runner.invoke(
        app, ["config", "init", "--backend", "redis", "--config-path", str(target)]
    )

    assert result.exit_code == 1
    assert not target.exists()

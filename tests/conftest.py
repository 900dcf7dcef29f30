"""Shared pytest configuration for pathcache tests."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import pytest
from typer.testing import CliRunner

from pathcache_core.config import CacheConfig


@pytest.fixture(autouse=True)
def force_english_locale(monkeypatch: pytest.MonkeyPatch) -> None:
    """Force tests to use the English locale unless explicitly overridden."""
    monkeypatch.setenv("PATHCACHE_LOCALE", "en")
    from pathcache_core.i18n import set_locale

    set_locale("en")


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point the default configuration path at an absent per-test file."""
    target = tmp_path / "user-config" / "config.toml"
    monkeypatch.setenv("PATHCACHE_CONFIG_FILE", str(target))
    return target


@pytest.fixture(autouse=True)
def bytecode_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    """Allow ``.pyc`` writing even when PYTHONDONTWRITEBYTECODE is exported."""
    monkeypatch.setattr(sys, "dont_write_bytecode", False)


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Return a new CLI runner for each test."""
    return CliRunner()


@dataclass(slots=True)
class ProjectEnv:
    """Base directory with search roots, mirroring a deployed application."""

    base: Path

    def make_root(self, name: str) -> Path:
        """Create and return a search root below the base directory."""
        root = self.base / name
        root.mkdir(parents=True, exist_ok=True)
        return root

    def add_file(self, root: str, relative: str, content: str = "VALUE = 1\n") -> Path:
        """Create ``relative`` below ``root`` and return its path."""
        target = self.base / root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    def config(self, **overrides: object) -> CacheConfig:
        """Return a configuration anchored at the base directory."""
        values: dict[str, object] = {
            "base_dir": str(self.base),
            "search_roots": ("local", "core"),
            "backend": "file",
        }
        values.update(overrides)
        return CacheConfig(**values)  # type: ignore[arg-type]


@pytest.fixture()
def project(tmp_path: Path) -> ProjectEnv:
    """Provide an ``app`` directory with empty ``local`` and ``core`` roots."""
    env = ProjectEnv(base=tmp_path / "app")
    env.make_root("local")
    env.make_root("core")
    return env

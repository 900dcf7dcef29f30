"""Tests for the naming convention and the search-root resolver."""

from __future__ import annotations

import sys
from pathlib import Path, PurePosixPath

import pytest

from pathcache_core.naming import relative_path_for
from pathcache_core.resolver import Resolver, sys_path_roots


def test_relative_path_capitalizes_each_segment() -> None:
    """Map underscores to directories and upper-case segment initials."""
    assert relative_path_for("Foo_Bar") == PurePosixPath("Foo/Bar.py")
    assert relative_path_for("mage_core_model") == PurePosixPath("Mage/Core/Model.py")
    assert relative_path_for("Single") == PurePosixPath("Single.py")


def test_relative_path_keeps_inner_case_and_custom_suffix() -> None:
    """Only the first character of a segment changes."""
    assert relative_path_for("fooBar_bazQux", suffix=".php") == PurePosixPath("FooBar/BazQux.php")
    assert relative_path_for("pkg.mod", separator=".") == PurePosixPath("Pkg/Mod.py")


@pytest.mark.parametrize("identifier", ["", "_", "__"])
def test_relative_path_rejects_empty_identifiers(identifier: str) -> None:
    """Refuse identifiers without any segment."""
    with pytest.raises(ValueError):
        relative_path_for(identifier)


def test_resolve_returns_first_matching_root(project) -> None:
    """Scan roots in order and stop at the first regular file."""
    project.add_file("core", "Foo/Bar.py")
    resolver = Resolver()
    roots = [project.base / "local", project.base / "core"]

    assert resolver.resolve("Foo_Bar", roots) == project.base / "core" / "Foo" / "Bar.py"

    project.add_file("local", "Foo/Bar.py")
    assert resolver.resolve("Foo_Bar", roots) == project.base / "local" / "Foo" / "Bar.py"


def test_resolve_is_deterministic(project) -> None:
    """Return the same path for the same filesystem state and order."""
    project.add_file("core", "Foo/Bar.py")
    resolver = Resolver()
    roots = [project.base / "local", project.base / "core"]

    first = resolver.resolve("Foo_Bar", roots)
    assert all(resolver.resolve("Foo_Bar", roots) == first for _ in range(3))


def test_resolve_miss_and_directories_are_not_found(project) -> None:
    """A directory with the conventional name is not a match."""
    (project.base / "core" / "Foo" / "Bar.py").mkdir(parents=True)
    resolver = Resolver()

    assert resolver.resolve("Foo_Bar", [project.base / "core"]) is None
    assert resolver.resolve("Missing_Thing", [project.base / "core"]) is None
    assert resolver.resolve("", [project.base / "core"]) is None


def test_resolve_reads_roots_on_every_call(project) -> None:
    """Roots appended between calls are honoured."""
    project.add_file("vendor", "Foo/Bar.py")
    resolver = Resolver()
    roots: list[Path] = [project.base / "local"]

    assert resolver.resolve("Foo_Bar", roots) is None
    roots.append(project.base / "vendor")
    assert resolver.resolve("Foo_Bar", roots) == project.base / "vendor" / "Foo" / "Bar.py"


def test_sys_path_roots_follow_sys_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Expose the live interpreter search path, mapping '' to the current directory."""
    monkeypatch.setattr(sys, "path", ["", str(tmp_path)])

    assert sys_path_roots() == [".", str(tmp_path)]

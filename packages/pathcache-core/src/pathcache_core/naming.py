"""Naming convention turning identifiers into relative file paths."""

from __future__ import annotations

from pathlib import PurePosixPath

DEFAULT_SEPARATOR = "_"
DEFAULT_SUFFIX = ".py"


def _capitalize_segment(segment: str) -> str:
    # Only the first character changes; ``fooBar`` becomes ``FooBar``.
    return segment[:1].upper() + segment[1:]


def relative_path_for(
    identifier: str,
    *,
    separator: str = DEFAULT_SEPARATOR,
    suffix: str = DEFAULT_SUFFIX,
) -> PurePosixPath:
    """Return the conventional relative path for ``identifier``.

    Every separator becomes a directory boundary and each segment gets its first
    character upper-cased, so ``Foo_Bar`` maps to ``Foo/Bar.py``.
    """
    if not identifier:
        raise ValueError("identifier must not be empty")
    segments = [_capitalize_segment(part) for part in identifier.split(separator) if part]
    if not segments:
        raise ValueError(f"identifier {identifier!r} has no path segments")
    return PurePosixPath(*segments[:-1], segments[-1] + suffix)


__all__ = ["DEFAULT_SEPARATOR", "DEFAULT_SUFFIX", "relative_path_for"]

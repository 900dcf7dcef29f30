"""Keep the interpreter's bytecode cache in step with the generated cache file."""

from __future__ import annotations

import importlib
import importlib.util
import logging
import os
import py_compile
import sys
from pathlib import Path

logger = logging.getLogger("pathcache.primer")


class BytecodePrimer:
    """Invalidate then recompile the ``.pyc`` of a freshly replaced source file.

    Replacing a file on disk is not enough: a timestamp-based ``.pyc`` only
    records whole-second mtimes and the source size, so a rewrite inside the
    same second can keep serving the old code. The primer removes the stale
    entry and writes a hash-checked one for the new content.
    """

    def __init__(self, *, enabled: bool = True) -> None:
        """Probe the interpreter once for bytecode writing support."""
        self.enabled = (
            enabled
            and not sys.dont_write_bytecode
            and sys.implementation.cache_tag is not None
        )
        if enabled and not self.enabled:
            logger.debug("Bytecode writing disabled by the interpreter; priming skipped")

    @staticmethod
    def compiled_path(path: Path) -> Path:
        """Return where the interpreter caches the compiled form of ``path``."""
        return Path(importlib.util.cache_from_source(os.fspath(path)))

    def invalidate(self, path: Path) -> None:
        """Drop any compiled representation of ``path``."""
        try:
            self.compiled_path(path).unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Unable to remove compiled cache for %s: %s", path, exc)
        importlib.invalidate_caches()

    def compile(self, path: Path) -> bool:
        """Compile ``path`` into a hash-checked ``.pyc``; return ``True`` on success."""
        try:
            py_compile.compile(
                os.fspath(path),
                cfile=os.fspath(self.compiled_path(path)),
                doraise=True,
                invalidation_mode=py_compile.PycInvalidationMode.CHECKED_HASH,
            )
        except (py_compile.PyCompileError, OSError) as exc:
            logger.warning("Unable to compile %s: %s", path, exc)
            return False
        return True

    def prime_after_replace(self, path: Path) -> bool:
        """Invalidate and recompile ``path``; a no-op when priming is unavailable."""
        if not self.enabled:
            return False
        self.invalidate(path)
        primed = self.compile(path)
        if primed:
            logger.debug("Primed bytecode cache for %s", path)
        return primed


__all__ = ["BytecodePrimer"]

"""Locate the file defining an identifier across ordered search roots."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .naming import DEFAULT_SEPARATOR, DEFAULT_SUFFIX, relative_path_for

logger = logging.getLogger("pathcache.resolver")

SearchRoot = str | os.PathLike[str]


def sys_path_roots() -> list[str]:
    """Return the interpreter search path as it is right now.

    Other code may extend :data:`sys.path` at any time, so callers must not
    keep the returned list around between lookups.
    """
    return [entry or os.curdir for entry in sys.path]


@dataclass(slots=True, frozen=True)
class Resolver:
    """Scan search roots in order for the file matching an identifier."""

    separator: str = DEFAULT_SEPARATOR
    suffix: str = DEFAULT_SUFFIX

    def relative_path(self, identifier: str) -> Path:
        """Return the conventional relative path for ``identifier``."""
        return Path(relative_path_for(identifier, separator=self.separator, suffix=self.suffix))

    def resolve(self, identifier: str, search_roots: Iterable[SearchRoot]) -> Path | None:
        """Return the first existing candidate for ``identifier`` or ``None``."""
        try:
            relative = self.relative_path(identifier)
        except ValueError:
            logger.debug("Identifier %r cannot be mapped to a path", identifier)
            return None

        for root in search_roots:
            candidate = Path(root) / relative
            try:
                if candidate.is_file():
                    return candidate
            except OSError as exc:
                logger.debug("Skipping unreadable search root %s: %s", root, exc)
        return None


__all__ = ["Resolver", "SearchRoot", "sys_path_roots"]

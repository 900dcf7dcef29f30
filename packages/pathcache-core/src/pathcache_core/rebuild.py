"""Rebuild collaborators run when the invalidation flag is consumed.

A rebuild happens before the cache is trusted, so hooks are loaded straight
from their file path instead of going through the import system or the cache
being rebuilt.
"""

from __future__ import annotations

import importlib.util
import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from .store import Snapshot

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .service import PathCache

logger = logging.getLogger("pathcache.rebuild")

RebuildHook = Callable[["PathCache"], None]

_HOOK_MODULE = "_pathcache_rebuild_hook"


def load_rebuild_hook(reference: str, base_dir: Path) -> RebuildHook:
    """Load ``relative/file.py:function`` by direct path construction.

    Relative files are anchored at ``base_dir``. Raises ``RuntimeError`` when
    the reference is malformed or does not name a callable.
    """
    file_part, sep, attribute = reference.rpartition(":")
    if not sep or not file_part or not attribute:
        raise RuntimeError(f"Invalid rebuild hook reference {reference!r}; expected 'file.py:name'")

    hook_path = Path(file_part).expanduser()
    if not hook_path.is_absolute():
        hook_path = base_dir / hook_path
    if not hook_path.is_file():
        raise RuntimeError(f"Rebuild hook file not found: {hook_path}")

    spec = importlib.util.spec_from_file_location(_HOOK_MODULE, hook_path)
    if spec is None or spec.loader is None:
        raise RuntimeError(f"Cannot load rebuild hook from {hook_path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    hook = getattr(module, attribute, None)
    if not callable(hook):
        raise RuntimeError(f"{hook_path} does not define a callable named {attribute!r}")
    return hook


def revalidate_cache(cache: PathCache) -> None:
    """Re-resolve every persisted identifier and persist what still exists."""
    previous = cache.backend.load()
    fresh: Snapshot = {}
    for identifier in previous:
        entry = cache.resolve_entry(identifier)
        if entry is not None:
            fresh[identifier] = entry

    dropped = len(previous) - len(fresh)
    if cache.persist(fresh):
        logger.info("Revalidated %d cache entries (%d dropped)", len(fresh), dropped)
    else:
        logger.warning("Revalidated cache could not be persisted")


__all__ = ["RebuildHook", "load_rebuild_hook", "revalidate_cache"]

"""Durable storage strategies for the identifier to path snapshot."""

from __future__ import annotations

import importlib.util
import logging
import os
import pprint
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from .store import CacheEntry, Snapshot

try:  # pragma: no cover - depends on the environment
    import diskcache
except ImportError:  # pragma: no cover - shared store simply unavailable
    diskcache = None  # type: ignore[assignment]

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .config import CacheConfig

logger = logging.getLogger("pathcache.backends")

DEFAULT_FILE_MODE = 0o664
_SNAPSHOT_MODULE = "_pathcache_snapshot"
_SNAPSHOT_HEADER = '"""Identifier to path cache generated by pathcache. Do not edit."""\n\n'


class PersistenceBackend(Protocol):
    """Storage for the full snapshot, shared by every worker process."""

    name: str
    source_file: Path | None

    def load(self) -> Snapshot:
        """Return the persisted snapshot, or an empty mapping."""

    def save(self, mapping: Mapping[str, CacheEntry], *, force: bool = False) -> bool:
        """Overwrite the persisted snapshot; return ``True`` when written.

        ``force`` marks rebuild writes, which one-shot processes must not skip.
        """

    def clear(self) -> bool:
        """Remove the persisted snapshot; return ``False`` when that failed."""


def _coerce_snapshot(raw: Any, origin: object) -> Snapshot:
    if not isinstance(raw, Mapping):
        logger.warning("Ignoring malformed cache snapshot from %s", origin)
        return {}
    snapshot: Snapshot = {}
    for key, value in raw.items():
        if isinstance(key, str) and (value is None or isinstance(value, str)):
            snapshot[key] = value
    return snapshot


class NullBackend:
    """Backend that never persists anything."""

    name = "none"
    source_file: Path | None = None

    def load(self) -> Snapshot:
        """Return an empty snapshot."""
        return {}

    def save(self, mapping: Mapping[str, CacheEntry], *, force: bool = False) -> bool:
        """Discard ``mapping``."""
        return False

    def clear(self) -> bool:
        """Nothing to remove."""
        return True


class SharedStoreBackend:
    """Snapshot stored under one key of a multi-process ``diskcache`` store.

    Each save replaces the whole value in a single SQLite transaction, so
    readers in other processes always see a complete snapshot. One-shot
    processes only read: their few new entries are not worth a write. Rebuild
    writes (``force=True``) are the exception, since the flag that requested
    them is already consumed.
    """

    name = "shared"
    source_file: Path | None = None

    def __init__(self, directory: Path, key: str, *, skip_writes: bool = False) -> None:
        """Open the store in ``directory``; raises when it cannot be used."""
        if diskcache is None:
            raise RuntimeError("diskcache is not installed")
        self.directory = directory
        self.key = key
        self.skip_writes = skip_writes
        self._cache = diskcache.Cache(os.fspath(directory))

    def load(self) -> Snapshot:
        """Fetch the snapshot stored under :attr:`key`."""
        try:
            raw = self._cache.get(self.key)
        except Exception as exc:
            logger.warning("Shared store read failed in %s: %s", self.directory, exc)
            return {}
        if raw is None:
            return {}
        return _coerce_snapshot(raw, self.directory)

    def save(self, mapping: Mapping[str, CacheEntry], *, force: bool = False) -> bool:
        """Overwrite the value stored under :attr:`key`."""
        if self.skip_writes and not force:
            logger.debug("One-shot process; not writing %d entries", len(mapping))
            return False
        try:
            return bool(self._cache.set(self.key, dict(mapping)))
        except Exception as exc:
            logger.warning("Shared store write failed in %s: %s", self.directory, exc)
            return False

    def clear(self) -> bool:
        """Delete the stored snapshot."""
        try:
            self._cache.delete(self.key)
        except Exception as exc:
            logger.warning("Shared store delete failed in %s: %s", self.directory, exc)
            return False
        return True

    def close(self) -> None:
        """Release the underlying SQLite connection."""
        self._cache.close()


def render_snapshot(mapping: Mapping[str, CacheEntry]) -> str:
    """Render ``mapping`` as a Python module assigning a dict literal to ``CACHE``."""
    ordered = dict(sorted(mapping.items()))
    return f"{_SNAPSHOT_HEADER}CACHE = {pprint.pformat(ordered, sort_dicts=False, width=100)}\n"


class GeneratedFileBackend:
    """Snapshot kept in a generated Python module loaded by the import system."""

    name = "file"

    def __init__(self, cache_file: Path, *, file_mode: int = DEFAULT_FILE_MODE) -> None:
        """Persist into ``cache_file``, created with ``file_mode`` permissions."""
        self.cache_file = cache_file
        self.file_mode = file_mode

    @property
    def source_file(self) -> Path:
        """The canonical file whose bytecode must be primed after a save."""
        return self.cache_file

    def load(self) -> Snapshot:
        """Execute the canonical file and return its ``CACHE`` mapping."""
        if not self.cache_file.is_file():
            return {}
        spec = importlib.util.spec_from_file_location(_SNAPSHOT_MODULE, self.cache_file)
        if spec is None or spec.loader is None:
            logger.warning("Cannot build a loader for %s", self.cache_file)
            return {}
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except FileNotFoundError:
            return {}
        except Exception as exc:
            logger.warning("Ignoring unreadable cache file %s: %s", self.cache_file, exc)
            return {}
        return _coerce_snapshot(getattr(module, "CACHE", None), self.cache_file)

    def save(self, mapping: Mapping[str, CacheEntry], *, force: bool = False) -> bool:
        """Write to a temporary sibling file and atomically rename it into place."""
        content = render_snapshot(mapping)
        directory = self.cache_file.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, raw_tmp = tempfile.mkstemp(prefix=".path_cache-", suffix=".tmp", dir=directory)
        except OSError as exc:
            logger.warning("Unable to create a temporary cache file in %s: %s", directory, exc)
            return False

        tmp_path = Path(raw_tmp)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.replace(tmp_path, self.cache_file)
        except OSError as exc:
            logger.warning("Unable to write cache file %s: %s", self.cache_file, exc)
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                logger.debug("Leaving temporary cache file %s behind", tmp_path)
            return False

        try:
            os.chmod(self.cache_file, self.file_mode)
        except OSError as exc:
            logger.debug("Unable to normalize permissions of %s: %s", self.cache_file, exc)
        logger.debug("Wrote %d cache entries to %s", len(mapping), self.cache_file)
        return True

    def clear(self) -> bool:
        """Remove the canonical file and its compiled form."""
        try:
            self.cache_file.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Unable to remove cache file %s: %s", self.cache_file, exc)
            return False
        try:
            compiled = Path(importlib.util.cache_from_source(os.fspath(self.cache_file)))
            compiled.unlink(missing_ok=True)
        except NotImplementedError:  # pragma: no cover - interpreter without bytecode cache
            pass
        except OSError as exc:
            logger.debug("Leaving compiled cache %s behind: %s", self.cache_file, exc)
        return True


def open_shared_store(
    directory: Path, key: str, *, skip_writes: bool = False
) -> SharedStoreBackend | None:
    """Probe the shared store; return ``None`` when it cannot be used."""
    if diskcache is None:
        logger.debug("diskcache unavailable; shared store disabled")
        return None
    try:
        directory.mkdir(parents=True, exist_ok=True)
        return SharedStoreBackend(directory, key, skip_writes=skip_writes)
    except Exception as exc:
        logger.warning("Shared store unavailable in %s: %s", directory, exc)
        return None


def select_backend(config: CacheConfig) -> PersistenceBackend:
    """Pick the storage strategy for ``config`` once, by capability probing.

    ``auto`` and ``shared`` try the shared store first and fall back to the
    generated file when it cannot be opened; ``file`` and ``none`` are taken
    as given.
    """
    kind = config.backend
    if kind == "none":
        return NullBackend()

    if kind in ("auto", "shared"):
        shared = open_shared_store(
            config.shared_store_path(), config.cache_key(), skip_writes=config.one_shot
        )
        if shared is not None:
            return shared
        if kind == "shared":
            logger.warning("Falling back to the generated cache file")

    return GeneratedFileBackend(config.cache_file_path())


__all__ = [
    "GeneratedFileBackend",
    "NullBackend",
    "PersistenceBackend",
    "SharedStoreBackend",
    "open_shared_store",
    "render_snapshot",
    "select_backend",
]

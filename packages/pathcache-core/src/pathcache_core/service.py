"""Cache service tying the store, resolver and persistence together."""

from __future__ import annotations

import atexit
import logging
import os
from collections.abc import Callable, Iterable
from pathlib import Path
from types import TracebackType

from .backends import NullBackend, PersistenceBackend, select_backend
from .config import CacheConfig
from .invalidation import InvalidationSignal
from .primer import BytecodePrimer
from .rebuild import RebuildHook, load_rebuild_hook, revalidate_cache
from .resolver import Resolver, SearchRoot, sys_path_roots
from .store import CacheEntry, CacheStore, Snapshot

logger = logging.getLogger("pathcache.service")

SearchRoots = list[SearchRoot] | Callable[[], Iterable[SearchRoot]]


class PathCache:
    """Persistent identifier to file cache for one process.

    Use it as a context manager (or call :meth:`register_exit_hook`) so new
    entries are flushed and the bytecode cache primed when the process is done::

        with PathCache(load_config()) as cache:
            path = cache.locate("Foo_Bar")
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        *,
        search_roots: SearchRoots | None = None,
        backend: PersistenceBackend | None = None,
        resolver: Resolver | None = None,
        primer: BytecodePrimer | None = None,
        signal: InvalidationSignal | None = None,
        rebuild_hook: RebuildHook | None = None,
    ) -> None:
        """Build the service; the persistence backend is chosen here, once.

        Args:
            config: Settings; defaults are used when omitted.
            search_roots: Ordered roots, either a list that other code may
                mutate or a callable returning the roots. Read again on every
                resolution. Defaults to the configured roots, or the live
                :data:`sys.path` when none are configured.
            backend: Explicit persistence backend instead of probing.
            resolver: Explicit resolver instead of the configured convention.
            primer: Explicit bytecode primer.
            signal: Explicit invalidation signal.
            rebuild_hook: Callable run when the invalidation flag is consumed.

        """
        self.config = config or CacheConfig()
        self.base_dir = self.config.base_path()
        if search_roots is None:
            configured = self.config.root_paths()
            search_roots = configured if configured else sys_path_roots
        self.search_roots: SearchRoots = search_roots
        self.resolver = resolver or Resolver(
            separator=self.config.separator, suffix=self.config.suffix
        )
        self.store = CacheStore(cache_misses=self.config.cache_misses)
        self.backend = backend if backend is not None else select_backend(self.config)
        self.primer = primer or BytecodePrimer(enabled=self.config.prime_bytecode)
        self.signal = signal or InvalidationSignal(self.config.flag_path())
        self.search_count = 0
        self._rebuild_hook = rebuild_hook
        self._bootstrapped = False
        self._closed = False
        self._exit_hook_registered = False
        self._rebuilding = False
        self._unsaved_rebuild: Snapshot | None = None
        logger.debug("Path cache for %s using the %s backend", self.base_dir, self.backend.name)

    @property
    def closed(self) -> bool:
        """``True`` once :meth:`close` ran."""
        return self._closed

    def current_roots(self) -> list[SearchRoot]:
        """Return the search roots as they are at this moment."""
        if callable(self.search_roots):
            return list(self.search_roots())
        return list(self.search_roots)

    def bootstrap(self) -> PathCache:
        """Rebuild if the invalidation flag was consumed, then load the snapshot.

        When the rebuilt mapping could not be persisted, this process serves it
        from memory instead of the stale snapshot, and the flag is raised again
        so the next process retries the rebuild.
        """
        if self.signal.check_and_consume():
            self._run_rebuild()

        unsaved = self._unsaved_rebuild
        self._unsaved_rebuild = None
        if unsaved is None:
            self.store.load(self.backend.load())
        else:
            self.store.load({})
            for identifier, entry in unsaved.items():
                self.store.put(identifier, entry)
            if not isinstance(self.backend, NullBackend):
                try:
                    self.signal.raise_flag()
                except OSError as exc:
                    logger.warning("Unable to raise the invalidation flag again: %s", exc)
        self._bootstrapped = True
        logger.debug("Loaded %d cache entries", len(self.store))
        return self

    def _run_rebuild(self) -> None:
        hook = self._rebuild_hook
        if hook is None and self.config.rebuild_hook:
            try:
                hook = load_rebuild_hook(self.config.rebuild_hook, self.base_dir)
            except Exception:
                logger.exception("Unable to load rebuild hook %s", self.config.rebuild_hook)
                return
        if hook is None:
            hook = revalidate_cache
        self._rebuilding = True
        try:
            hook(self)
        except Exception:
            logger.exception("Cache rebuild failed; continuing with the persisted snapshot")
            self._unsaved_rebuild = None
        finally:
            self._rebuilding = False

    def _relativize(self, path: Path) -> str:
        # base_dir is symlink-resolved; roots may reach it through a link.
        absolute = Path(os.path.abspath(path))
        for candidate in (absolute, absolute.resolve()):
            try:
                return candidate.relative_to(self.base_dir).as_posix()
            except ValueError:
                continue
        return str(absolute)

    def absolute(self, entry: str) -> Path:
        """Turn a stored entry back into an absolute path."""
        path = Path(entry)
        return path if path.is_absolute() else self.base_dir / path

    def resolve_entry(self, identifier: str) -> CacheEntry:
        """Search the roots for ``identifier`` without touching the store."""
        self.search_count += 1
        found = self.resolver.resolve(identifier, self.current_roots())
        if found is None:
            return None
        return self._relativize(found)

    def full_path(self, identifier: str) -> CacheEntry:
        """Return the stored entry for ``identifier``, resolving it on a miss."""
        if self._closed:
            return self.resolve_entry(identifier)
        if not self._bootstrapped:
            self.bootstrap()
        return self.store.lookup(identifier, self.resolve_entry)

    def locate(self, identifier: str) -> Path | None:
        """Return the absolute path defining ``identifier`` or ``None``."""
        entry = self.full_path(identifier)
        if entry is None:
            return None
        return self.absolute(entry)

    def persist(self, mapping: Snapshot) -> bool:
        """Save ``mapping`` and prime the bytecode cache of the written file.

        Calls made by a rebuild hook always write, even in one-shot processes.
        """
        saved = self.backend.save(mapping, force=self._rebuilding)
        if self._rebuilding:
            self._unsaved_rebuild = None if saved else dict(mapping)
        source_file = self.backend.source_file
        if saved and source_file is not None:
            self.primer.prime_after_replace(source_file)
        return saved

    def flush(self) -> bool:
        """Persist the full snapshot when entries were added; ``True`` if written."""
        if self.store.added_count == 0:
            return False
        saved = self.persist(self.store.snapshot())
        if saved:
            logger.debug("Flushed %d new cache entries", self.store.added_count)
            self.store.mark_clean()
        return saved

    def close(self) -> None:
        """Flush once and stop serving lookups from the store."""
        if self._closed:
            return
        self._closed = True
        try:
            self.flush()
        except Exception:
            logger.exception("Unable to flush the path cache")
        release = getattr(self.backend, "close", None)
        if callable(release):
            try:
                release()
            except Exception as exc:
                logger.debug("Error while closing the %s backend: %s", self.backend.name, exc)

    def register_exit_hook(self) -> None:
        """Run :meth:`close` when the interpreter exits."""
        if not self._exit_hook_registered:
            atexit.register(self.close)
            self._exit_hook_registered = True

    def __enter__(self) -> PathCache:
        if not self._bootstrapped:
            self.bootstrap()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


__all__ = ["PathCache", "SearchRoots"]

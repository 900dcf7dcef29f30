"""In-memory identifier to path mapping with a dirty counter."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping

CacheEntry = str | None
"""A path relative to the base directory, or ``None`` for "not found"."""

Snapshot = dict[str, CacheEntry]


class CacheStore:
    """Mapping from identifier to :data:`CacheEntry` that only grows.

    ``added_count`` tracks how many identifiers were inserted since the last
    :meth:`load`; a flush is only worth doing when it is nonzero.
    """

    def __init__(self, *, cache_misses: bool = False) -> None:
        """Create an empty store.

        Args:
            cache_misses: Keep "not found" results instead of probing the
                filesystem again on the next lookup.

        """
        self.cache_misses = cache_misses
        self._entries: Snapshot = {}
        self._added = 0

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    @property
    def added_count(self) -> int:
        """Number of entries inserted since the store was loaded."""
        return self._added

    def get(self, identifier: str, default: CacheEntry = None) -> CacheEntry:
        """Return the entry for ``identifier`` or ``default`` when absent."""
        return self._entries.get(identifier, default)

    def put(self, identifier: str, entry: CacheEntry) -> None:
        """Record ``entry``; only a first insertion counts as a change."""
        if identifier not in self._entries:
            self._added += 1
        self._entries[identifier] = entry

    def snapshot(self) -> Snapshot:
        """Return a copy of the full mapping."""
        return dict(self._entries)

    def load(self, mapping: Mapping[str, CacheEntry]) -> None:
        """Replace the current state with ``mapping`` and reset the counter."""
        self._entries = dict(mapping)
        self._added = 0

    def mark_clean(self) -> None:
        """Forget pending changes once they have been persisted."""
        self._added = 0

    def lookup(self, identifier: str, resolve: Callable[[str], CacheEntry]) -> CacheEntry:
        """Return the cached entry, resolving and recording it on a miss."""
        if identifier in self._entries:
            return self._entries[identifier]

        entry = resolve(identifier)
        if entry is None and not self.cache_misses:
            return None
        self.put(identifier, entry)
        return entry


__all__ = ["CacheEntry", "CacheStore", "Snapshot"]

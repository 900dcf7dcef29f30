"""Persistent, cross-process cache mapping identifiers to the files defining them."""

from .backends import (
    GeneratedFileBackend,
    NullBackend,
    PersistenceBackend,
    SharedStoreBackend,
    select_backend,
)
from .config import CacheConfig, default_config_path, load_config
from .invalidation import InvalidationSignal
from .naming import relative_path_for
from .primer import BytecodePrimer
from .rebuild import load_rebuild_hook, revalidate_cache
from .resolver import Resolver, sys_path_roots
from .service import PathCache
from .store import CacheEntry, CacheStore

__all__ = [
    "BytecodePrimer",
    "CacheConfig",
    "CacheEntry",
    "CacheStore",
    "GeneratedFileBackend",
    "InvalidationSignal",
    "NullBackend",
    "PathCache",
    "PersistenceBackend",
    "Resolver",
    "SharedStoreBackend",
    "default_config_path",
    "load_config",
    "load_rebuild_hook",
    "relative_path_for",
    "revalidate_cache",
    "select_backend",
    "sys_path_roots",
]

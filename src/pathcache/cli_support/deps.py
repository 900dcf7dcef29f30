"""Lazy accessors for core modules used by CLI commands."""

from __future__ import annotations

from types import ModuleType

__all__ = [
    "get_config_module",
    "get_path_cache_cls",
]

_UNINITIALIZED = object()

_config_module: ModuleType | object = _UNINITIALIZED
_path_cache_cls: type | object = _UNINITIALIZED


def get_config_module() -> ModuleType:
    """Return the lazily-imported configuration module."""
    global _config_module
    if _config_module is _UNINITIALIZED:
        from pathcache_core import config as config_module

        _config_module = config_module
    assert isinstance(_config_module, ModuleType)
    return _config_module


def get_path_cache_cls() -> type:
    """Return the lazily-imported PathCache class."""
    global _path_cache_cls
    if _path_cache_cls is _UNINITIALIZED:
        from pathcache_core.service import PathCache

        _path_cache_cls = PathCache
    assert isinstance(_path_cache_cls, type)
    return _path_cache_cls

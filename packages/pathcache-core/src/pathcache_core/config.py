"""Configuration helpers for pathcache."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import platformdirs

from .i18n import _
from .naming import DEFAULT_SEPARATOR, DEFAULT_SUFFIX

try:  # pragma: no cover - depends on the Python version
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11
    import tomli as tomllib  # type: ignore[no-redef]

CONFIG_ENV_VAR = "PATHCACHE_CONFIG_FILE"
CONFIG_DIR_NAME = "pathcache"
CONFIG_FILE_NAME = "config.toml"

CACHE_FILE_NAME = "path_cache.py"
FLAG_FILE_NAME = "path_cache.flag"
SHARED_STORE_DIR_NAME = "shared"
CACHE_KEY_PREFIX = "pathcache"

BACKEND_CHOICES = ("auto", "shared", "file", "none")
LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


@dataclass(slots=True)
class CacheConfig:
    """Settings shared by the cache service and the CLI."""

    base_dir: str | None = None
    search_roots: tuple[str, ...] = ()
    suffix: str = DEFAULT_SUFFIX
    separator: str = DEFAULT_SEPARATOR
    backend: str = "auto"
    cache_dir: str = "var/cache"
    shared_store_dir: str | None = None
    cache_misses: bool = False
    prime_bytecode: bool = True
    one_shot: bool = False
    rebuild_hook: str | None = None
    log_level: str = "warning"
    locale: str | None = None

    def base_path(self) -> Path:
        """Return the absolute base directory (the working directory by default)."""
        if self.base_dir:
            return Path(self.base_dir).expanduser().resolve()
        return Path.cwd().resolve()

    def _anchor(self, value: str) -> Path:
        path = Path(value).expanduser()
        if path.is_absolute():
            return path
        return self.base_path() / path

    def cache_directory(self) -> Path:
        """Directory holding the generated cache file and the invalidation flag."""
        return self._anchor(self.cache_dir)

    def cache_file_path(self) -> Path:
        """Canonical location of the generated cache file."""
        return self.cache_directory() / CACHE_FILE_NAME

    def flag_path(self) -> Path:
        """Location of the invalidation flag."""
        return self.cache_directory() / FLAG_FILE_NAME

    def shared_store_path(self) -> Path:
        """Directory of the shared key-value store."""
        if self.shared_store_dir:
            return self._anchor(self.shared_store_dir)
        return self.cache_directory() / SHARED_STORE_DIR_NAME

    def cache_key(self) -> str:
        """Shared-store key, namespaced by the base directory."""
        digest = hashlib.md5(str(self.base_path()).encode("utf-8"), usedforsecurity=False)
        return f"{CACHE_KEY_PREFIX}_{digest.hexdigest()}"

    def root_paths(self) -> list[Path]:
        """Configured search roots, relative ones anchored at the base directory."""
        return [self._anchor(root) for root in self.search_roots]

    def to_toml_dict(self) -> dict:
        """Return the configuration as a nested dictionary consumable by TOML writers."""
        cache_section: dict[str, Any] = {
            "search_roots": list(self.search_roots),
            "suffix": self.suffix,
            "separator": self.separator,
            "backend": self.backend if self.backend in BACKEND_CHOICES else "auto",
            "cache_dir": self.cache_dir,
            "cache_misses": self.cache_misses,
            "prime_bytecode": self.prime_bytecode,
            "one_shot": self.one_shot,
        }
        if self.base_dir:
            cache_section["base_dir"] = self.base_dir
        if self.shared_store_dir:
            cache_section["shared_store_dir"] = self.shared_store_dir
        if self.rebuild_hook:
            cache_section["rebuild_hook"] = self.rebuild_hook

        data: dict[str, dict] = {
            "cache": cache_section,
            "logging": {
                "level": self.log_level if self.log_level in LOG_LEVELS else "warning",
            },
            "general": {},
        }
        if self.locale:
            data["general"]["locale"] = self.locale
        return data


def default_config_path() -> Path:
    """Return the user configuration file path."""
    env_value = os.environ.get(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()

    config_dir = Path(platformdirs.user_config_dir(CONFIG_DIR_NAME, appauthor=False))
    return config_dir / CONFIG_FILE_NAME


def _coerce_bool(raw: Any, field: str, default: bool) -> bool:
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    raise RuntimeError(_("The field {field} must be a boolean.").format(field=field))


def _coerce_optional_str(raw: Any, field: str) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw.strip() or None
    raise RuntimeError(_("The field {field} must be a string.").format(field=field))


def _coerce_choice(raw: Any, field: str, choices: tuple[str, ...], default: str) -> str:
    value = _coerce_optional_str(raw, field)
    if value is None:
        return default
    value = value.lower()
    if value not in choices:
        raise RuntimeError(
            _("The field {field} must be one of: {choices}.").format(
                field=field, choices=", ".join(choices)
            )
        )
    return value


def load_config(path: Path | None = None) -> CacheConfig:
    """Load configuration from disk and return a ``CacheConfig`` instance."""
    path = path or default_config_path()
    if not path.exists():
        return CacheConfig()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:  # pragma: no cover - depends on the environment
        message = _("Unable to read the configuration file: {error}").format(error=exc)
        raise RuntimeError(message) from exc
    except tomllib.TOMLDecodeError as exc:
        message = _("Invalid TOML configuration in {path}: {error}").format(path=path, error=exc)
        raise RuntimeError(message) from exc

    cache_section = data.get("cache", {}) or {}

    roots_raw = cache_section.get("search_roots", [])
    if roots_raw is None:
        roots_raw = []
    if isinstance(roots_raw, str):
        roots_raw = [part for part in roots_raw.split(os.pathsep) if part]
    if not isinstance(roots_raw, list) or not all(isinstance(item, str) for item in roots_raw):
        raise RuntimeError(_("The field cache.search_roots must be a list of strings."))

    suffix_value = _coerce_optional_str(cache_section.get("suffix"), "cache.suffix")
    if suffix_value is None:
        suffix_value = DEFAULT_SUFFIX
    elif not suffix_value.startswith("."):
        suffix_value = f".{suffix_value}"

    separator_raw = cache_section.get("separator", DEFAULT_SEPARATOR)
    if not isinstance(separator_raw, str) or not separator_raw:
        raise RuntimeError(_("The field cache.separator must be a non-empty string."))

    cache_dir_value = _coerce_optional_str(cache_section.get("cache_dir"), "cache.cache_dir")

    logging_section = data.get("logging", {}) or {}
    general_section = data.get("general", {}) or {}

    return CacheConfig(
        base_dir=_coerce_optional_str(cache_section.get("base_dir"), "cache.base_dir"),
        search_roots=tuple(roots_raw),
        suffix=suffix_value,
        separator=separator_raw,
        backend=_coerce_choice(cache_section.get("backend"), "cache.backend", BACKEND_CHOICES, "auto"),
        cache_dir=cache_dir_value or "var/cache",
        shared_store_dir=_coerce_optional_str(
            cache_section.get("shared_store_dir"), "cache.shared_store_dir"
        ),
        cache_misses=_coerce_bool(cache_section.get("cache_misses"), "cache.cache_misses", False),
        prime_bytecode=_coerce_bool(
            cache_section.get("prime_bytecode"), "cache.prime_bytecode", True
        ),
        one_shot=_coerce_bool(cache_section.get("one_shot"), "cache.one_shot", False),
        rebuild_hook=_coerce_optional_str(cache_section.get("rebuild_hook"), "cache.rebuild_hook"),
        log_level=_coerce_choice(logging_section.get("level"), "logging.level", LOG_LEVELS, "warning"),
        locale=_coerce_optional_str(general_section.get("locale"), "general.locale"),
    )


def ensure_config_dir(path: Path | None = None) -> Path:
    """Make sure the configuration directory exists and return its path."""
    final_path = path or default_config_path()
    final_path.parent.mkdir(parents=True, exist_ok=True)
    return final_path


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def write_config(config: CacheConfig, path: Path | None = None) -> Path:
    """Persist configuration to TOML and return the output path."""
    target = ensure_config_dir(path)
    data = config.to_toml_dict()
    cache_section = data["cache"]

    lines: list[str] = ["[cache]"]
    base_dir = cache_section.get("base_dir")
    if base_dir:
        lines.append(f"base_dir = {_quote(base_dir)}")
    else:
        lines.append('# base_dir = "/srv/app"')

    roots = ", ".join(_quote(root) for root in cache_section["search_roots"])
    lines.append(f"search_roots = [{roots}]")
    lines.append(f"suffix = {_quote(cache_section['suffix'])}")
    lines.append(f"separator = {_quote(cache_section['separator'])}")
    lines.append(f"backend = {_quote(cache_section['backend'])}")
    lines.append(f"cache_dir = {_quote(cache_section['cache_dir'])}")

    shared_dir = cache_section.get("shared_store_dir")
    if shared_dir:
        lines.append(f"shared_store_dir = {_quote(shared_dir)}")
    else:
        lines.append('# shared_store_dir = "/run/pathcache"')

    lines.append(f"cache_misses = {str(cache_section['cache_misses']).lower()}")
    lines.append(f"prime_bytecode = {str(cache_section['prime_bytecode']).lower()}")
    lines.append(f"one_shot = {str(cache_section['one_shot']).lower()}")

    hook = cache_section.get("rebuild_hook")
    if hook:
        lines.append(f"rebuild_hook = {_quote(hook)}")
    else:
        lines.append('# rebuild_hook = "tools/rebuild.py:revalidate"')
    lines.append("")

    lines.append("[logging]")
    lines.append(f"level = {_quote(data['logging']['level'])}")
    lines.append("")

    lines.append("[general]")
    locale_setting = data["general"].get("locale")
    if locale_setting:
        lines.append(f"locale = {_quote(locale_setting)}")
    else:
        lines.append('# locale = "fr_FR"')
    lines.append("")

    target.write_text("\n".join(lines).rstrip() + "\n", encoding="utf-8")
    return target


__all__ = [
    "BACKEND_CHOICES",
    "CONFIG_ENV_VAR",
    "CacheConfig",
    "default_config_path",
    "ensure_config_dir",
    "load_config",
    "write_config",
]

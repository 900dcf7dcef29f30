"""Sentinel flag requesting a full rebuild of the persisted cache."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger("pathcache.invalidation")


class InvalidationSignal:
    """A zero-length marker file whose existence asks for a rebuild.

    Several processes may notice the flag at the same time; only the one whose
    removal succeeds is allowed to rebuild.
    """

    def __init__(self, flag_path: Path) -> None:
        """Watch ``flag_path``."""
        self.flag_path = flag_path

    def is_raised(self) -> bool:
        """Return ``True`` when the flag is currently present."""
        return self.flag_path.exists()

    def raise_flag(self) -> Path:
        """Create the flag so the next process rebuilds the cache."""
        self.flag_path.parent.mkdir(parents=True, exist_ok=True)
        self.flag_path.touch()
        logger.info("Invalidation flag raised at %s", self.flag_path)
        return self.flag_path

    def check_and_consume(self) -> bool:
        """Remove the flag; return ``True`` only if this caller removed it."""
        if not self.flag_path.exists():
            return False
        try:
            self.flag_path.unlink()
        except FileNotFoundError:
            logger.debug("Invalidation flag already consumed by another process")
            return False
        except OSError as exc:
            logger.warning("Unable to consume invalidation flag %s: %s", self.flag_path, exc)
            return False
        logger.info("Invalidation flag consumed; rebuilding cache")
        return True


__all__ = ["InvalidationSignal"]

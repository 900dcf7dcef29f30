"""Logging setup for CLI invocations."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Send ``pathcache`` log records at ``level`` and above to stderr."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("pathcache").setLevel(numeric)


__all__ = ["configure_logging"]

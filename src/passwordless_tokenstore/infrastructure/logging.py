"""Logging setup for token store processes."""

from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Driver loggers that emit one record per statement at DEBUG.
_NOISY_DRIVER_LOGGERS = ("aiosqlite", "asyncpg", "sqlalchemy.engine")


def resolve_log_level(level: str) -> int:
    """Map a LOG_LEVEL name to a logging level, falling back to INFO."""

    resolved = logging.getLevelName(level.strip().upper() or "INFO")
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(*, level: str) -> int:
    """Configure process logging and return the effective level.

    Token store events log at the requested level; database driver chatter
    stays at WARNING so DEBUG runs do not print statements or token values.
    """

    resolved_level = resolve_log_level(level)
    logging.basicConfig(level=resolved_level, format=_LOG_FORMAT)
    for name in _NOISY_DRIVER_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved_level, logging.WARNING))
    return resolved_level

"""Structured logging configuration.

Loggers emit key/value events through structlog, filtered at the level
given by ``CSVDB_LOG_LEVEL`` and handed to the ``csvdb`` stdlib logger.
"""

from __future__ import annotations

import logging
from typing import Any

import structlog

from csvdb.config import DEFAULT_LOG_LEVEL, CsvDbConfig
from csvdb.errors import ConfigError

ROOT_LOGGER_NAME = "csvdb"


def configure_logging(level: str) -> None:
    """Configure structlog for the whole process.

    Args:
        level: Level name such as ``"INFO"``.
    """
    numeric_level = getattr(logging, level)
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"]),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(numeric_level)
    if numeric_level < logging.WARNING and not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Logging is configured on first use. An invalid CSVDB_LOG_LEVEL falls back
    to the default level so that importing csvdb never fails.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog bound logger.
    """
    if not structlog.is_configured():
        try:
            level = CsvDbConfig.from_env().log_level
        except ConfigError:
            level = DEFAULT_LOG_LEVEL
        configure_logging(level)
    return structlog.get_logger(name)

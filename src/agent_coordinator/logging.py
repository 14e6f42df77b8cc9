"""Logging setup for the coordinator.

Module loggers are children of ``agent_coordinator``, so configuring that one
logger controls the whole package. Nodes and strategies accept an injected
logger through their config and otherwise use ``get_logger(__name__)``.
"""

import logging
import os
import sys

PACKAGE_LOGGER = "agent_coordinator"
LOG_LEVEL_ENV = "AGENT_COORDINATOR_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def _resolve_level(level: str | None) -> int:
    name = (level or os.environ.get(LOG_LEVEL_ENV) or "WARNING").upper()
    numeric = logging.getLevelName(name)
    if isinstance(numeric, int):
        return numeric

    print(f"Warning: unknown log level '{name}', falling back to WARNING", file=sys.stderr)
    return logging.WARNING


def setup_logging(level: str | None = None) -> logging.Logger:
    """Point the package logger at stderr.

    Safe to call repeatedly: the handler is installed once and later calls
    only change the level.

    Args:
        level: Level name such as DEBUG or INFO. Falls back to the
            AGENT_COORDINATOR_LOG_LEVEL variable, then WARNING.

    Returns:
        The ``agent_coordinator`` logger.
    """
    numeric = _resolve_level(level)
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(numeric)

    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        package_logger.addHandler(handler)

    for handler in package_logger.handlers:
        handler.setLevel(numeric)
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, usually called with ``__name__``."""
    return logging.getLogger(name)

# rupeebook/logging_setup.py
"""Logging configuration for the ``rupeebook`` package.

Library modules only call ``logging.getLogger(__name__)``. Entrypoints (the
CLI) call :func:`configure_logging` once to attach a single stream handler to
the package logger.
"""
from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "rupeebook"
LOG_LEVEL_ENV_VAR = "RUPEEBOOK_LOG_LEVEL"

logging.getLogger(_PKG_LOGGER_NAME).addHandler(logging.NullHandler())


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV_VAR) or "INFO"
    level = level.strip().upper()
    if level.isdigit():
        return int(level)
    numeric = getattr(logging, level, None)
    if isinstance(numeric, int):
        return numeric
    raise ValueError(f"Unknown log level '{level}'.")


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach one StreamHandler to the package logger, replacing any earlier one."""
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt or "%(asctime)s %(name)s %(levelname)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(_parse_level(level))
    logger.propagate = False
    return logger

"""Logging configuration for the StreamVerse app and scripts.

Modules only call ``logging.getLogger(__name__)``; entry points (app factory,
CLI) call :func:`setup_logging` once.
"""

from __future__ import annotations

import logging
import sys

from .config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger to write to stdout.

    Args:
        level: Level name; defaults to ``LOG_LEVEL`` from settings.
    """
    level_name = (level or get_settings().log_level or "INFO").upper()
    log_level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(log_level)
    if root.hasHandlers():
        root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)
    logging.getLogger(__name__).debug("Logging initialized at %s", level_name)

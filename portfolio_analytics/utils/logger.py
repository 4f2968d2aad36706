"""Logging for Portfolio Analytics.

Each module builds its logger once at import.  The level defaults to
``Defaults.LOG_LEVEL`` (``app.log_level`` in settings.yaml, overridden by
``PORTFOLIO_LOG_LEVEL``), so ``PORTFOLIO_LOG_LEVEL=DEBUG`` surfaces the
analytics summaries.  Records go to stderr; stdout carries the JSON reports.
"""

import logging
import sys

from portfolio_analytics.config import Defaults

LOG_FORMAT = "%(asctime)s | %(name)-20s | %(levelname)-7s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level(level) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def setup_logger(name: str = "portfolio_analytics", level: str | int | None = None) -> logging.Logger:
    """Logger with a single stderr handler; repeated calls reuse the handler."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(_level(level if level is not None else Defaults.LOG_LEVEL))
    return logger

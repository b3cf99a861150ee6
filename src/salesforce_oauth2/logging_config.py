"""Logging setup for salesforce-oauth2.

Every module obtains its logger through :func:`get_logger`, which places it
under the ``salesforce_oauth2`` namespace so applications can tune the whole
library with a single logger name.
"""

from __future__ import annotations

import logging
import os

ROOT_LOGGER_NAME = "salesforce_oauth2"

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under the package root.

    Args:
        name: Dotted suffix, e.g. ``"client"`` or ``"cli"``

    Returns:
        logging.Logger named ``salesforce_oauth2.<name>``
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logging(level: str | None = None) -> None:
    """Configure a stream handler on the package root logger.

    The level comes from the ``level`` argument, then the ``LOG_LEVEL``
    environment variable, then ``INFO``. Calling this more than once
    replaces the previous handler instead of stacking a new one.
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(log_level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root.addHandler(handler)

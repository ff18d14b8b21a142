"""Logging configuration with Rich formatting.

Provides setup_logging() for app initialization and get_logger() for module-level loggers.
"""

import logging
from typing import Optional

from rich.logging import RichHandler

from .config import get_settings

# Somewhat noisy libraries never log below INFO; very noisy ones below WARNING.
VERBOSE_LIBRARIES = ("slack_bolt",)
NOISY_LIBRARIES = ("httpx", "httpcore", "slack_sdk", "urllib3")


def setup_logging(level: Optional[str] = None):
    level = (level or get_settings().LOG_LEVEL).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
        force=True,
    )

    root_level = logging.getLogger().getEffectiveLevel()
    for name in VERBOSE_LIBRARIES:
        logging.getLogger(name).setLevel(max(root_level, logging.INFO))
    for name in NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))


def get_logger(name: str):
    return logging.getLogger(name)

"""
log.py
loguru sink setup.
"""

from __future__ import annotations

import sys

from loguru import logger

from config import get_settings

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"


def setup_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with a single stderr sink at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=(level or get_settings().log_level).upper(), format=_FORMAT)

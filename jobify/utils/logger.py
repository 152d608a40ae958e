"""Centralized logger configuration.

Usage:
    from jobify.utils.logger import get_logger
    logger = get_logger(__name__)

The level comes from JOBIFY_LOG_LEVEL. httpx logs one INFO line per request,
which would echo every authenticated URL, so its loggers stay at WARNING
unless debugging.
"""
import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
CHATTY_LOGGERS = ("httpx", "httpcore")

_configured = False


def _level(name: Optional[str]) -> int:
    name = (name or os.getenv("JOBIFY_LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    global _configured
    resolved = _level(level)
    if not _configured and not logging.getLogger().handlers:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
    else:
        logging.getLogger("jobify").setLevel(resolved)
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(
            logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
        )
    _configured = True


def get_logger(name: str) -> logging.Logger:
    if not _configured:
        setup_logging()
    return logging.getLogger(name)

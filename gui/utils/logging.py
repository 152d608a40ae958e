"""Logging helpers for the UI-state layer.

Everything under `gui` logs on the `jobify.gui` child logger, so
`setup_logging()` in `jobify.utils.logger` controls it too.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("jobify.gui")


def log(message: str, level: int = logging.INFO, *args: object) -> None:
    """Log lazily: `args` are only interpolated if the level is enabled."""
    logger.log(level, message, *args)

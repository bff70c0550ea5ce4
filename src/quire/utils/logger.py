"""Logging helpers for quire.

Wraps the standard library logging so every quire logger lives under the
``quire.`` namespace. The library never installs handlers itself.

Example:
    >>> from quire.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("walking %d nodes", 12)
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> get_logger("walker").name
        'quire.walker'
    """
    if not (name == "quire" or name.startswith("quire.")):
        name = f"quire.{name}"
    return logging.getLogger(name)

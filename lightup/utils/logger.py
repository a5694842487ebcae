"""Logging set-up for the Light-Up engine.

Every module logs through a child of the ``lightup`` logger. The package
logger receives a single stream handler the first time a module asks for a
logger, unless the embedding application already configured the root logger.
"""

from __future__ import annotations

import logging
from typing import IO, Optional, Union


PACKAGE_LOGGER = "lightup"
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
DATE_FORMAT = "%H:%M:%S"


def configure_logging(level: Union[int, str] = logging.INFO, stream: Optional[IO[str]] = None) -> logging.Logger:
    """Install the package handler, replacing any earlier one, and set the level."""

    package = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package.handlers):
        package.removeHandler(handler)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    package.addHandler(handler)
    package.setLevel(level)
    return package


def get_logger(name: Optional[str] = None) -> logging.Logger:
    package = logging.getLogger(PACKAGE_LOGGER)
    if not package.handlers and not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name or PACKAGE_LOGGER)

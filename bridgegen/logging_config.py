"""Logging setup for bridgegen.

Every module asks for its logger through :func:`get_logger` so that all
output lives under the ``bridgegen`` hierarchy and can be tuned in one place.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.logging import RichHandler

_LOGGER_NAME = "bridgegen"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the bridgegen hierarchy."""
    if name and name.startswith(_LOGGER_NAME):
        return logging.getLogger(name)
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the bridgegen logger with rich console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated configuration does not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console_handler = RichHandler(show_path=False, markup=False)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]

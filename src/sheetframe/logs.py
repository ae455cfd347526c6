"""Logging setup for the ``sheetframe`` logger hierarchy."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "sheetframe"

_handler: RichHandler | None = None


def setup_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """Attach a single rich handler to the package logger.

    Idempotent: repeated calls only adjust the level.  Records do not
    propagate to the root logger.
    """
    global _handler

    logger = logging.getLogger(LOGGER_NAME)
    level = logging.DEBUG if verbose else logging.WARNING
    logger.setLevel(level)

    if _handler is None:
        _handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        logger.addHandler(_handler)
    _handler.setLevel(level)
    logger.propagate = False
    return logger


def reset_logging() -> None:
    """Detach the handler installed by :func:`setup_logging` (tests)."""
    global _handler
    if _handler is not None:
        logging.getLogger(LOGGER_NAME).removeHandler(_handler)
        _handler = None

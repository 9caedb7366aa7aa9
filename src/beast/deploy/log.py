"""Logging setup."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger writing through rich to stderr, configured once."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_time=False,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger

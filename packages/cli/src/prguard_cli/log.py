"""Console logging for the prguard command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "[%(asctime)s] [prguard] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOGGER_NAMES = ("prguard_core", "prguard_cache", "prguard_cli")

console = Console(stderr=True)


def configure_logging(debug: bool = False) -> None:
    """Route the project loggers to a RichHandler on stderr.

    Safe to call more than once: handlers from an earlier call are replaced.
    """
    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        rich_handler = RichHandler(
            console=console,
            show_time=False,
            show_level=False,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        rich_handler.setLevel(level)
        rich_handler.setFormatter(formatter)
        logger.addHandler(rich_handler)
        logger.setLevel(level)

"""Logging setup for the API process."""

import logging
import sys

from config import config

# Set once the root logger has been configured
_logging_initialized = False

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str | None = None) -> None:
    """
    Configure the root logger with a console handler.

    Later calls are no-ops.

    Args:
        level: Level name; defaults to LOG_LEVEL (DEBUG forces debug)
    """
    global _logging_initialized

    if _logging_initialized:
        return
    _logging_initialized = True

    if level is None:
        level = "DEBUG" if config.debug else config.log_level

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console_handler)

    # Quiet chatty libraries
    for name in ("httpx", "httpcore", "transitions"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging initialized at %s", level)

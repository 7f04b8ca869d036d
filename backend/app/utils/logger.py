"""
Logging helper shared by the API and the service layer.
"""
import logging
import sys

from backend.app.core.config import settings


def setup_logger(name: str = __name__, level: int | str | None = None) -> logging.Logger:
    """
    Return a logger with a single console handler.

    Args:
        name: logger name, usually ``__name__``
        level: logging level; defaults to ``LOG_LEVEL`` from the settings

    Returns:
        the configured Logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level or settings.log_level)

    # already configured (module re-imported)
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(console_handler)

    return logger

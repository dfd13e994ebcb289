"""Logging configuration for monogen.

Library modules obtain loggers through ``get_logger(__name__)`` and never
install handlers themselves. Entry points (the CLI) call ``setup_logging``
once to attach a rich console handler.
"""

import logging

from rich.logging import RichHandler

ROOT_LOGGER_NAME = "monogen"

_configured = False


def setup_logging(level: str | int = "INFO", show_path: bool = False) -> logging.Logger:
    """Configure the package logger with a rich console handler.

    Calling this more than once only updates the level.

    Args:
        level: Log level name or number.
        show_path: Whether rich should print the emitting module path.

    Returns:
        The configured package logger.
    """
    global _configured

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    if not _configured:
        handler = RichHandler(
            show_path=show_path,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
        _configured = True

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Args:
        name: The name for the logger (typically __name__ of the module).

    Returns:
        A logger instance under the package hierarchy.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)

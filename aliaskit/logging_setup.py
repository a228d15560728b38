"""Logging setup and utilities."""

import logging

from .ansi import LEVEL_COLORS, colorize, should_colorize
from .debug import is_debug, set_debug

__all__ = [
    "LogObjects",
    "get_logger",
    "init_logger",
]


class LogObjects:
    """Reusable objects for loggers."""

    handlers: list[logging.Handler] = []


def init_logger(filename: str | None = None, force_debug: bool = False) -> None:
    """Initialize the logging system.

    Every message goes to stderr: stdout is reserved for the generated shell code.

    Args:
        filename: Optional filename to log to
        force_debug: If True, force debug level
    """
    if force_debug:
        set_debug(True)

    class ScreenLogFormatter(logging.Formatter):
        """A custom formatter, adding colors based on log level.

        Respects NO_COLOR environment variable and TTY detection.
        """

        LOG_FORMAT = r"%(name)15s - %(message)s // %(filename)s:%(lineno)d" if is_debug() else r"aliaskit: %(message)s"

        def __init__(self) -> None:
            super().__init__(self.LOG_FORMAT)
            colors = should_colorize()
            self._formatters = {
                level: logging.Formatter(colorize(self.LOG_FORMAT, code) if colors else self.LOG_FORMAT)
                for level, code in LEVEL_COLORS.items()
            }

        def format(self, record: logging.LogRecord) -> str:
            formatter = self._formatters.get(record.levelno)
            return formatter.format(record) if formatter else super().format(record)

    # re-initializing: detach the previous handlers from the existing loggers
    for logger in logging.Logger.manager.loggerDict.values():
        if isinstance(logger, logging.Logger):
            for handler in LogObjects.handlers:
                logger.removeHandler(handler)
    LogObjects.handlers.clear()
    if filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(logging.Formatter(fmt=r"%(asctime)s [%(levelname)s] %(name)s :: %(message)s :: %(filename)s:%(lineno)d"))
        LogObjects.handlers.append(file_handler)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(ScreenLogFormatter())
    LogObjects.handlers.append(stream_handler)


def get_logger(name: str = "aliaskit", level: int | None = None) -> logging.Logger:
    """Return a named logger.

    Args:
        name (str): logger's name
        level (int): logger's level (auto if not set)

    Returns:
        The logger instance
    """
    logger = logging.getLogger(name)
    if level is None:
        logger.setLevel(logging.DEBUG if is_debug() else logging.WARNING)
    else:
        logger.setLevel(level)
    logger.propagate = False
    for handler in LogObjects.handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    return logger

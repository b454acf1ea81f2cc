"""Centralized logging configuration for Duplicatable.

This module provides a consistent logging setup for all Duplicatable
components. It configures the 'duplicatable' logger namespace and provides
utilities for adjusting log levels, including the SQLAlchemy loggers used by
the SQL repository.

The module provides:
    - get_logger(): Get the standard Duplicatable logger
    - configure_logging(): Set up logging with specified levels
    - LoggerMixin: Mixin class providing _logger attribute

Example:
    >>> from duplicatable.core.logging_config import configure_logging, get_logger
    >>> import logging
    >>>
    >>> configure_logging(level=logging.DEBUG)
    >>> logger = get_logger()
    >>> logger.info("Duplicating order 42")
"""

import logging

# The standard logger name used throughout Duplicatable
LOGGER_NAME = "duplicatable"

# Default logging format
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Related library loggers that should be configured together
RELATED_LOGGERS = [
    "sqlalchemy.engine",
    "sqlalchemy.orm",
]


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a Duplicatable logger.

    Args:
        name: Optional sub-logger name. If provided, returns a child logger
              under the duplicatable namespace (e.g., 'duplicatable.engine').
              If None, returns the main duplicatable logger.

    Returns:
        The configured logger instance.
    """
    if name is None:
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def configure_logging(
    level: int = logging.WARNING,
    sqlalchemy_level: int | None = None,
    format_string: str = DEFAULT_FORMAT,
    handler: logging.Handler | None = None,
) -> logging.Logger:
    """Configure logging for Duplicatable and SQLAlchemy.

    Should be called once during application initialization.

    Args:
        level: Log level for the duplicatable logger. Defaults to WARNING.
        sqlalchemy_level: Log level for the SQLAlchemy engine and ORM loggers.
                     If None, uses the same level as 'level'.
        format_string: Format string for log messages.
        handler: Optional handler to add to the logger. If None, uses
                StreamHandler with the specified format.

    Returns:
        The configured duplicatable logger.

    Example:
        >>> configure_logging(
        ...     level=logging.INFO,
        ...     sqlalchemy_level=logging.WARNING,  # Keep SQL echo quiet
        ... )
    """
    if sqlalchemy_level is None:
        sqlalchemy_level = level

    logger = get_logger()
    logger.setLevel(level)

    # Add handler if not already present
    if not logger.handlers:
        if handler is None:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(format_string))
        logger.addHandler(handler)

    for logger_name in RELATED_LOGGERS:
        logging.getLogger(logger_name).setLevel(sqlalchemy_level)

    return logger


class LoggerMixin:
    """Mixin class that provides a _logger attribute.

    Classes that inherit from this mixin get a _logger property that
    returns a child logger under the duplicatable namespace, named after
    the class.
    """

    @property
    def _logger(self) -> logging.Logger:
        """Get the logger for this class."""
        return get_logger(self.__class__.__name__)


__all__ = [
    "LOGGER_NAME",
    "get_logger",
    "configure_logging",
    "LoggerMixin",
]

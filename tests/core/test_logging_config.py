"""
Tests for the logging configuration module.
"""

import logging

from duplicatable.core.logging_config import (
    LOGGER_NAME,
    LoggerMixin,
    configure_logging,
    get_logger,
)
from duplicatable.duplication.engine import TransformEngine


def test_get_logger_names():
    assert get_logger().name == LOGGER_NAME
    assert get_logger("engine").name == "duplicatable.engine"


def test_configure_logging_sets_levels():
    handler = logging.NullHandler()
    logger = get_logger()
    logger.handlers.clear()
    try:
        configured = configure_logging(level=logging.DEBUG, sqlalchemy_level=logging.ERROR, handler=handler)
        assert configured is logger
        assert logger.level == logging.DEBUG
        assert handler in logger.handlers
        assert logging.getLogger("sqlalchemy.engine").level == logging.ERROR
    finally:
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logging.getLogger("sqlalchemy.engine").setLevel(logging.NOTSET)
        logging.getLogger("sqlalchemy.orm").setLevel(logging.NOTSET)


def test_logger_mixin_uses_class_name():
    class Worker(LoggerMixin):
        pass

    assert Worker()._logger.name == "duplicatable.Worker"
    assert issubclass(TransformEngine, LoggerMixin)

"""Tests for logging configuration."""

import logging

from fitpro.app_logging import LOG_FORMAT, configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("fitpro")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging(logging.DEBUG)
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logger.level == logging.DEBUG
    assert logger.handlers[0].formatter._fmt == LOG_FORMAT
    assert logger.propagate is False

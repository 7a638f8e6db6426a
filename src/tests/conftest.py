"""Shared test fixtures."""

import logging

import pytest
import structlog

from rdns_server.dns_logging import logger as logger_module


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo global logging changes made by a test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    logger_module._logger_instance = None
    structlog.reset_defaults()

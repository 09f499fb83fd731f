"""
Shared fixtures for the helperkit test suite.
"""

import logging
import os

import pytest


@pytest.fixture(autouse=True)
def reset_helperkit_logger():
    """Restore the package logger after tests that configure it."""
    logger = logging.getLogger("helperkit")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for handler in logger.handlers[:]:
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.setLevel(level)


@pytest.fixture(autouse=True)
def clean_helperkit_environment(monkeypatch):
    """Keep HELPERKIT_* variables of the host from leaking into tests."""
    for name in list(os.environ):
        if name.startswith("HELPERKIT_"):
            monkeypatch.delenv(name)

"""Root conftest.py for Herald tests.

This file MUST be at the repository root for fixtures to be discovered
when running tests from any subdirectory.

Provides shared fixtures used across all test modules:
- herald_aggregator/tests
- herald_shared/tests
"""

import pytest
from unittest.mock import MagicMock

from herald_aggregator.settings import reset_settings


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing.

    ``bind`` returns the same mock so calls made by components that bind
    their own context are still visible on this object.
    """
    logger = MagicMock()
    logger.info = MagicMock()
    logger.debug = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    logger.bind = MagicMock(return_value=logger)
    return logger


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Keep HERALD_* environment and the global settings out of each test."""
    import os

    for key in list(os.environ):
        if key.upper().startswith("HERALD_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()

"""
Unit test fixtures and configuration.

Fixtures specific to unit tests (fast, isolated tests).
"""

import logging
from unittest.mock import MagicMock

import pytest


@pytest.fixture
def mock_logger():
    """Create a mock logger for unit tests."""
    return MagicMock(spec=logging.Logger)

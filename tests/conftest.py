"""
Pytest configuration and shared fixtures.

This module provides central pytest configuration, custom markers,
and shared fixtures for the bodylog test suite.
"""

import logging
from collections.abc import Generator

import pytest

from bodylog.redact import reset_scanner

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, isolated, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (ASGI app round-trips)"
    )
    config.addinivalue_line("markers", "property: Property-based tests (hypothesis)")
    config.addinivalue_line(
        "markers", "security: Security-focused tests (leak checks on log output)"
    )


def pytest_collection_modifyitems(config, items):
    """Add 'unit' marker to tests without other markers."""
    for item in items:
        if not any(
            mark.name in ["integration", "property", "security"]
            for mark in item.iter_markers()
        ):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Shared Fixtures
# =============================================================================


class ListHandler(logging.Handler):
    """Handler that keeps emitted records in memory."""

    def __init__(self) -> None:
        super().__init__(logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture(autouse=True)
def reset_global_scanner() -> Generator[None, None, None]:
    """Reset the global scanner before and after each test."""
    reset_scanner()
    yield
    reset_scanner()


@pytest.fixture
def log_records() -> Generator[list[logging.LogRecord], None, None]:
    """
    Capture records written to the "bodylog" logger hierarchy.

    Yields:
        list: LogRecords in emission order
    """
    logger = logging.getLogger("bodylog")
    handler = ListHandler()
    original_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield handler.records

    logger.removeHandler(handler)
    logger.setLevel(original_level)
    handler.close()


@pytest.fixture
def login_body() -> str:
    """Provide a typical login request body."""
    return '{"username":"alice","password":"secret123"}'

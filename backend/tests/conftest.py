"""Shared test configuration, markers and fixtures."""

import pytest

from services import feedback_store


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "property: invariant checks over the sample document corpus"
    )


@pytest.fixture(autouse=True)
def _reset_store():
    """Start every test with a fresh configured feedback store."""
    feedback_store.clear()
    yield
    feedback_store.clear()

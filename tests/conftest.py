"""Pytest configuration and shared fixtures."""

import pytest

from tests.factories import TEST_TOKEN, TEST_URL
from vpn_ip_tracker.config import Config


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Reset logging state before each test."""
    from vpn_ip_tracker.logging import reset_logging

    reset_logging()
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep host credentials out of config loading."""
    monkeypatch.delenv("IPREPORT_APP_TOKEN", raising=False)
    monkeypatch.delenv("IPREPORT_ADDR", raising=False)
    monkeypatch.delenv("VPN_IP_TRACKER_REPORT_URL", raising=False)


@pytest.fixture
def config() -> Config:
    """Valid tracker config."""
    return Config(token=TEST_TOKEN, report_url=TEST_URL)

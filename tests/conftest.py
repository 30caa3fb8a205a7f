"""Root pytest configuration for all tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def quiet_google_auth_logs():
    """Keep google-auth transport debug output out of captured logs."""
    logging.getLogger("google.auth").setLevel(logging.WARNING)
    yield

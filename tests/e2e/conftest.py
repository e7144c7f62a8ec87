"""
E2E test configuration.

These tests use REAL Salesforce connections - no mocking.
"""

import os

import pytest
from dotenv import load_dotenv


@pytest.fixture(autouse=True)
def clean_env():
    """
    Override the global clean_env fixture from tests/conftest.py.

    E2E tests need the real SALESFORCE_* settings from the environment / .env.
    """
    load_dotenv()


@pytest.fixture(scope="session")
def check_credentials():
    """Verify Salesforce credentials are available."""
    load_dotenv()

    required_vars = [
        "SALESFORCE_URL_1",
        "SALESFORCE_CONSUMER_KEY_1",
        "SALESFORCE_CONSUMER_SECRET_1",
    ]

    missing = [v for v in required_vars if not os.environ.get(v)]
    if missing:
        pytest.skip(f"Missing credentials: {', '.join(missing)}")

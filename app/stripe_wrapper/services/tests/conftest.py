"""
Pytest fixtures for Stripe service tests.

Every test gets a configured test key; SDK resource methods are patched
per test, so no request leaves the process.
"""

import pytest


@pytest.fixture(autouse=True)
def configured_stripe(stripe_settings):
    """Services call configure_stripe(), which needs a secret key."""
    return stripe_settings

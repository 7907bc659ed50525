"""
Fixtures for E2E tests.

These require a running pdfpress deployment with Ghostscript installed.
"""

import os

import pytest

E2E_BASE_URL = os.getenv("E2E_BASE_URL")
E2E_WEBHOOK_URL = os.getenv("E2E_WEBHOOK_URL", "https://webhook.site/pdfpress-e2e")


@pytest.fixture
def base_url() -> str:
    """Return the base URL for E2E tests."""
    if not E2E_BASE_URL:
        pytest.skip("E2E_BASE_URL not set")
    return E2E_BASE_URL


@pytest.fixture
def webhook_url() -> str:
    return E2E_WEBHOOK_URL

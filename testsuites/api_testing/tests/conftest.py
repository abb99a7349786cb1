"""
================================================================================
API Testing Pytest Configuration
================================================================================

Shared fixtures for API automation tests.

Fixtures:
    - api_base_url: Public API used by the example suite
    - api_client: ApiClient bound to that URL

The example suite calls a public service, so its tests are collected with
the `live` marker and only run with --live.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from typing import Generator

import allure
import pytest

from testsuites.api_testing.framework import ApiClient


JSONPLACEHOLDER_URL = "https://jsonplaceholder.typicode.com"


# =============================================================================
# Session-Scoped Fixtures (Shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def api_base_url() -> str:
    """Public test API; override with EXAMPLE_API_URL."""
    return os.getenv("EXAMPLE_API_URL", JSONPLACEHOLDER_URL)


# =============================================================================
# Function-Scoped Fixtures (Fresh for each test)
# =============================================================================

@pytest.fixture
def api_client(api_base_url: str) -> Generator[ApiClient, None, None]:
    """
    Provide an ApiClient for the example API.

    Usage:
        def test_example(api_client):
            response = api_client.get("/posts/1")
            assert response.status == 200
    """
    with ApiClient(api_base_url) as client:
        yield client


# =============================================================================
# Allure Reporting Hooks
# =============================================================================

def pytest_exception_interact(node, call, report):
    """Attach additional info on test failure."""
    if report.failed:
        allure.attach(
            str(call.excinfo.value),
            name="Error Details",
            attachment_type=allure.attachment_type.TEXT
        )

"""
================================================================================
Test Suites Pytest Configuration
================================================================================

Registers project-wide markers and tags tests by the directory they live in.

================================================================================
"""

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "live: Needs a real browser or network access (run with --live)"
    )
    config.addinivalue_line(
        "markers", "login: Authentication flows"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "api: API-specific tests"
    )
    config.addinivalue_line(
        "markers", "ui: UI-specific tests"
    )
    config.addinivalue_line(
        "markers", "unit: Framework unit tests"
    )


def pytest_collection_modifyitems(config, items):
    """
    Tag tests by directory and skip live tests unless --live is given.
    """
    run_live = config.getoption("--live")
    skip_live = pytest.mark.skip(reason="needs --live (real browser / network)")

    for item in items:
        parts = item.path.parts
        if "api_testing" in parts:
            item.add_marker(pytest.mark.api)
        if "ui_testing" in parts:
            item.add_marker(pytest.mark.ui)
        if "unit" in parts:
            item.add_marker(pytest.mark.unit)

        if "live" in item.keywords and not run_live:
            item.add_marker(skip_live)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "Sauce E2E Test Framework",
        "=" * 60,
        "",
    ]

"""
================================================================================
E2E Tools
================================================================================

Tooling behind the Sauce E2E test framework.

Modules:
    - common: Settings resolution and logging
    - data_loader: JSON/YAML test data for data-driven tests
    - report_tools: Report parsing, JSON report plugin, e-mail reporting
    - squash_integration: Squash TM result uploader

Example:
    from e2e_tools.data_loader import load_test_data_array
    from e2e_tools.report_tools import load_report, parse_report

    users = load_test_data_array("users", "validUsers")
    data = parse_report(load_report("reports/test-results.json"), environment="qa")

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "data_loader",
    "report_tools",
    "squash_integration",
]

"""
Repository-level pytest configuration.

  - Initializes loguru sinks (console + reports/test-execution.log)
  - Registers the JSON report plugin feeding the e-mail / Squash TM publisher
  - Adds --live: UI and example API tests reach real services and are
    skipped unless it is given
"""

from __future__ import annotations

from pathlib import Path

import pytest

from e2e_tools.common import get_settings, init_logger
from e2e_tools.common.settings import PROJECT_ROOT
from e2e_tools.report_tools import JsonReportPlugin


DEFAULT_JSON_REPORT = PROJECT_ROOT / "reports" / "test-results.json"


def pytest_addoption(parser):
    group = parser.getgroup("e2e")
    group.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run tests marked 'live' (real browser / network).",
    )
    group.addoption(
        "--json-report-file",
        default=str(DEFAULT_JSON_REPORT),
        help="Where to write the JSON test report (default: reports/test-results.json).",
    )
    group.addoption(
        "--no-json-report",
        action="store_true",
        default=False,
        help="Do not write the JSON test report.",
    )


def pytest_configure(config):
    init_logger()

    # xdist workers report to the controller, which writes the file
    if config.getoption("--no-json-report") or hasattr(config, "workerinput"):
        return
    plugin = JsonReportPlugin(
        config.getoption("--json-report-file"),
        project_name=get_settings().browser.name,
    )
    config.pluginmanager.register(plugin, "e2e-json-report")


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return PROJECT_ROOT

"""
================================================================================
Report Tools Module
================================================================================

Exports:
    - JsonReportPlugin: Pytest plugin writing reports/test-results.json
    - parse_report / load_report: Flatten a JSON report into ReportData
    - EmailReporter: HTML e-mail report over SMTP

Publishing entry point: python -m e2e_tools.report_tools.publish_report

================================================================================
"""

from .email_reporter import EmailReporter, pass_rate, render_template
from .json_report import JsonReportPlugin
from .result_parser import (
    ReportData,
    ReportError,
    ReportNotFoundError,
    ReportParseError,
    ResultSummary,
    TestResult,
    TestStatus,
    flatten_report,
    load_report,
    parse_report,
    summarize,
)

__all__ = [
    "EmailReporter",
    "JsonReportPlugin",
    "ReportData",
    "ReportError",
    "ReportNotFoundError",
    "ReportParseError",
    "ResultSummary",
    "TestResult",
    "TestStatus",
    "flatten_report",
    "load_report",
    "parse_report",
    "pass_rate",
    "render_template",
    "summarize",
]

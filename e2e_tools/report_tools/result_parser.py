"""
================================================================================
Test Report Parser
================================================================================

Flattens a serialized test report into one record per test and computes the
run summary used by the e-mail reporter and the Squash TM uploader.

Input shape:
    {
      "config": {"projects": [{"name": "chromium"}]},
      "stats": {"startTime": "...", "duration": 1234.5},
      "suites": [
        {"title": "...", "specs": [
            {"title": "...", "tests": [
                {"results": [{"status": "failed", "duration": 10, "error": {...}},
                             {"status": "passed", "duration": 12}]}
            ]}
        ], "suites": [...]}
      ]
    }

The last attempt in `results` is authoritative; earlier ones count as
retries. Specs with no recorded attempt are left out.

================================================================================
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from loguru import logger


MAX_ERROR_LENGTH = 200

DEFAULT_PROJECT_NAME = "Playwright E2E Tests"
DEFAULT_BROWSER = "chromium"


class ReportError(Exception):
    """Base exception for report loading errors."""
    pass


class ReportNotFoundError(ReportError):
    """Raised when the report file does not exist."""
    pass


class ReportParseError(ReportError):
    """Raised when the report file is not valid JSON."""
    pass


# ================================================================================
# Data Models
# ================================================================================

class TestStatus(str, Enum):
    """Final status of a test."""
    __test__ = False

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"

    @classmethod
    def from_engine(cls, status: Optional[str]) -> "TestStatus":
        """Normalize a runner status (timedOut, interrupted, ...) to three values."""
        if status == "passed":
            return cls.PASSED
        if status == "skipped":
            return cls.SKIPPED
        return cls.FAILED


@dataclass
class TestResult:
    """Outcome of one test after flattening."""
    __test__ = False

    name: str
    status: TestStatus
    duration_ms: int = 0
    error: Optional[str] = None
    retry_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "duration_ms": self.duration_ms,
            "error": self.error,
            "retry_count": self.retry_count,
        }


@dataclass
class ResultSummary:
    """Aggregate counts and time window of a run."""
    total: int
    passed: int
    failed: int
    skipped: int
    duration_ms: int
    start_time: datetime
    end_time: datetime
    environment: str
    browser_name: str = DEFAULT_BROWSER


@dataclass
class ReportData:
    """Everything the reporters need about one run."""
    summary: ResultSummary
    tests: List[TestResult] = field(default_factory=list)
    project_name: str = DEFAULT_PROJECT_NAME
    build_url: str = "#"


# ================================================================================
# Flattening
# ================================================================================

def _error_text(error: Any) -> Optional[str]:
    if not error:
        return None
    if isinstance(error, dict):
        text = error.get("message") or json.dumps(error, default=str)
    else:
        text = str(error)
    return text[:MAX_ERROR_LENGTH]


def _results_of(suite: Dict[str, Any]) -> List[TestResult]:
    results = []
    for spec in suite.get("specs") or []:
        for test in spec.get("tests") or []:
            attempts = test.get("results") or []
            if not attempts:
                continue

            last = attempts[-1]
            results.append(TestResult(
                name=spec.get("title") or "",
                status=TestStatus.from_engine(last.get("status")),
                duration_ms=int(last.get("duration") or 0),
                error=_error_text(last.get("error")),
                retry_count=len(attempts) - 1,
            ))
    return results


def flatten_report(report: Dict[str, Any]) -> List[TestResult]:
    """
    Flatten nested suites into a list of test results (depth-first order).

    A suite's own specs come before those of its child suites. Nesting depth
    is not limited by the interpreter's recursion limit.

    Args:
        report: Parsed report with a top-level `suites` list

    Returns:
        One TestResult per test that has at least one attempt
    """
    results: List[TestResult] = []
    stack = list(reversed(report.get("suites") or []))
    while stack:
        suite = stack.pop()
        results.extend(_results_of(suite))
        stack.extend(reversed(suite.get("suites") or []))
    return results


# ================================================================================
# Summary
# ================================================================================

def _parse_time(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unrecognized timestamp in report: {value}")
        return None


def summarize(
    results: Iterable[TestResult],
    environment: str,
    stats: Optional[Dict[str, Any]] = None,
    browser_name: Optional[str] = None,
) -> ResultSummary:
    """
    Count results by status and resolve the run's time window.

    Missing start/end times default to "now"; a missing end time with a known
    start and duration is derived from both.
    """
    counts = {status: 0 for status in TestStatus}
    for result in results:
        counts[result.status] += 1

    stats = stats or {}
    duration_ms = int(stats.get("duration") or 0)
    now = datetime.now(timezone.utc)
    start_time = _parse_time(stats.get("startTime"))
    end_time = _parse_time(stats.get("endTime"))
    if end_time is None and start_time is not None and duration_ms:
        end_time = start_time + timedelta(milliseconds=duration_ms)

    return ResultSummary(
        total=sum(counts.values()),
        passed=counts[TestStatus.PASSED],
        failed=counts[TestStatus.FAILED],
        skipped=counts[TestStatus.SKIPPED],
        duration_ms=duration_ms,
        start_time=start_time or now,
        end_time=end_time or now,
        environment=environment,
        browser_name=browser_name or DEFAULT_BROWSER,
    )


def parse_report(
    report: Dict[str, Any],
    environment: str,
    project_name: str = DEFAULT_PROJECT_NAME,
    build_url: str = "#",
) -> ReportData:
    """Build reporter input from a parsed report."""
    tests = flatten_report(report)

    projects = (report.get("config") or {}).get("projects") or []
    browser_name = projects[0].get("name") if projects else None

    summary = summarize(
        tests,
        environment=environment,
        stats=report.get("stats"),
        browser_name=browser_name,
    )
    return ReportData(
        summary=summary,
        tests=tests,
        project_name=project_name,
        build_url=build_url,
    )


def load_report(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a JSON report from disk.

    Raises:
        ReportNotFoundError: If the file does not exist
        ReportParseError: If the file is not valid JSON
    """
    path = Path(path)
    if not path.exists():
        raise ReportNotFoundError(f"Report file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            report = json.load(f)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ReportParseError(f"Failed to parse report {path}: {e}") from e

    if not isinstance(report, dict):
        raise ReportParseError(f"Report {path} must contain a JSON object")

    logger.debug(f"Loaded report from {path}")
    return report


__all__ = [
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
    "summarize",
]

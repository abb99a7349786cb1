"""
================================================================================
JSON Report Plugin
================================================================================

Pytest plugin writing the run outcome as a nested JSON report:

    suites[] (one per test file)
      suites[] (one per test class)
        specs[] (one per test item)
          tests[] (one per browser project)
            results[] (one per attempt: status, duration, error)

This is the input of `result_parser`, so the e-mail and Squash TM reporters
work on runs made by this repository's pytest suites. Reruns of the same test
(e.g. pytest-rerunfailures) append attempts to the same spec.

Registered by the root conftest; disable with --no-json-report.

================================================================================
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger


MAX_ERROR_CHARS = 4000


def _now() -> datetime:
    return datetime.now(timezone.utc)


class JsonReportPlugin:
    """Collects test reports and writes them at session end."""

    def __init__(self, output_path: Union[str, Path], project_name: str = "chromium"):
        self.output_path = Path(output_path)
        self.project_name = project_name
        self._suites: List[Dict[str, Any]] = []
        self._suite_index: Dict[tuple, Dict[str, Any]] = {}
        self._tests: Dict[str, Dict[str, Any]] = {}
        self._start_time: Optional[datetime] = None

    # =========================================================================
    # Report tree
    # =========================================================================

    def _suite_for(self, path: tuple) -> Dict[str, Any]:
        """Get or create the suite for a (file, class, ...) path."""
        suite = self._suite_index.get(path)
        if suite is not None:
            return suite

        suite = {"title": path[-1], "specs": [], "suites": []}
        if len(path) == 1:
            suite["file"] = path[0]
            self._suites.append(suite)
        else:
            self._suite_for(path[:-1])["suites"].append(suite)
        self._suite_index[path] = suite
        return suite

    def _test_for(self, nodeid: str) -> Dict[str, Any]:
        test = self._tests.get(nodeid)
        if test is not None:
            return test

        parts = nodeid.split("::")
        suite = self._suite_for(tuple(parts[:-1]) or (parts[0],))
        test = {"projectName": self.project_name, "results": []}
        suite["specs"].append({"title": parts[-1], "id": nodeid, "tests": [test]})
        self._tests[nodeid] = test
        return test

    @staticmethod
    def _status(report: Any) -> str:
        if hasattr(report, "wasxfail"):
            # xfail counts as skipped, a non-strict xpass as passed
            return "passed" if report.outcome == "passed" else "skipped"
        if report.outcome == "rerun":
            return "failed"
        return report.outcome

    @staticmethod
    def _error(report: Any) -> Optional[Dict[str, str]]:
        if report.outcome not in ("failed", "rerun"):
            return None
        crash = getattr(getattr(report, "longrepr", None), "reprcrash", None)
        message = getattr(crash, "message", None) or getattr(report, "longreprtext", "")
        return {"message": str(message)[:MAX_ERROR_CHARS]}

    # =========================================================================
    # Pytest hooks
    # =========================================================================

    def pytest_sessionstart(self, session) -> None:
        self._start_time = _now()

    def pytest_runtest_logreport(self, report) -> None:
        if report.when == "call" or (report.when == "setup" and report.outcome != "passed"):
            attempt = {
                "status": self._status(report),
                "duration": int(round(report.duration * 1000)),
            }
            error = self._error(report)
            if error:
                attempt["error"] = error
            self._test_for(report.nodeid)["results"].append(attempt)

        elif report.when == "teardown" and report.outcome == "failed":
            # A teardown error fails an otherwise passing attempt
            results = self._test_for(report.nodeid)["results"]
            if results:
                results[-1]["status"] = "failed"
                results[-1]["error"] = self._error(report)

    def pytest_sessionfinish(self, session, exitstatus) -> None:
        self.write()

    # =========================================================================
    # Output
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        start = self._start_time or _now()
        end = _now()
        return {
            "config": {"projects": [{"name": self.project_name}]},
            "suites": self._suites,
            "stats": {
                "startTime": start.isoformat(),
                "endTime": end.isoformat(),
                "duration": (end - start).total_seconds() * 1000,
            },
        }

    def write(self) -> Path:
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.output_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"JSON report written to: {self.output_path}")
        return self.output_path


__all__ = [
    "JsonReportPlugin",
]

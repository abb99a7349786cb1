"""
================================================================================
Squash TM Integration
================================================================================

Pushes test execution results to the Squash TM test management platform.

Supports:
    - Reporting execution status per linked test case
    - Uploading a screenshot for failed tests
    - Data-driven tests, one iteration per result

Tests link to Squash TM through their title:
    "Standard user can login @squashTM:CAMP-4-TC-101"

Reporting is best effort. When the integration is disabled, the test title
carries no usable id, or the server call fails, methods log and return False.
Nothing here raises into the test run.

Usage:
    async with SquashTMClient(get_settings()) as client:
        await client.report_result(SquashExecutionResult(
            squash_id="CAMP-4-TC-101",
            status=SquashTestStatus.PASSED,
            duration_ms=812,
        ))

================================================================================
"""

from __future__ import annotations

import base64
import re
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

import httpx
from loguru import logger

from e2e_tools.common.settings import Settings
from e2e_tools.report_tools.result_parser import TestResult


API_PATH = "/api/rest/latest"
REQUEST_TIMEOUT = 30.0

SQUASH_ID_PATTERN = re.compile(r"@squashTM:([A-Z0-9-]+)", re.IGNORECASE)
TEST_CASE_ID_PATTERN = re.compile(r"TC-(\d+)", re.IGNORECASE)


# ============================================================
# Data Models
# ============================================================

class SquashTestStatus(str, Enum):
    """Execution statuses understood by Squash TM."""
    PASSED = "PASSED"
    FAILED = "FAILED"
    BLOCKED = "BLOCKED"
    NOT_RUN = "NOT_RUN"
    UNTESTABLE = "UNTESTABLE"
    SETTLED = "SETTLED"


@dataclass
class SquashExecutionResult:
    """One execution to record against a Squash TM test case."""
    squash_id: str
    status: SquashTestStatus
    comment: str = ""
    screenshot_path: Optional[str] = None
    duration_ms: Optional[int] = None
    iteration_index: Optional[int] = None
    iteration_data: Optional[str] = None


# ============================================================
# Helpers
# ============================================================

def squash_tm(test_case_id: str) -> str:
    """
    Build the title tag linking a test to Squash TM.

    Example:
        @pytest.mark.parametrize("user", users, ids=lambda u: f"{u['name']} {squash_tm(u['squashId'])}")
    """
    return f"@squashTM:{test_case_id}"


def parse_squash_id(test_title: str) -> Optional[str]:
    """Extract "CAMP-4-TC-101" from "... @squashTM:CAMP-4-TC-101"."""
    match = SQUASH_ID_PATTERN.search(test_title or "")
    return match.group(1) if match else None


def extract_test_case_id(squash_id: str) -> Optional[str]:
    """Extract the numeric test case id: "CAMP-4-TC-101" -> "101"."""
    match = TEST_CASE_ID_PATTERN.search(squash_id or "")
    return match.group(1) if match else None


def to_squash_status(status: str) -> SquashTestStatus:
    """Map a runner status to a Squash TM status."""
    status = (status or "").lower()
    if status == "passed":
        return SquashTestStatus.PASSED
    if status in ("failed", "timedout"):
        return SquashTestStatus.FAILED
    return SquashTestStatus.NOT_RUN


def build_comment(result: SquashExecutionResult) -> str:
    comment = result.comment or ""
    if result.iteration_index is not None:
        comment = f"[DDT Iteration {result.iteration_index + 1}] {comment}"
        if result.iteration_data:
            comment += f"\nTest Data: {result.iteration_data}"
    if result.duration_ms:
        comment += f"\nDuration: {result.duration_ms}ms"
    return comment


def results_from_report(results: Iterable[TestResult]) -> List[SquashExecutionResult]:
    """
    Convert flattened report results into Squash TM executions.

    Results whose name carries no @squashTM marker are not linked to a test
    case and are skipped.
    """
    executions = []
    for result in results:
        squash_id = parse_squash_id(result.name)
        if not squash_id:
            continue
        executions.append(SquashExecutionResult(
            squash_id=squash_id,
            status=to_squash_status(result.status.value),
            comment=result.error or "",
            duration_ms=result.duration_ms,
        ))
    return executions


# ============================================================
# Squash TM API Client
# ============================================================

class SquashTMClient:
    """
    Squash TM REST client.

    The HTTP client can be injected (tests, shared connection pools); if it is
    not, one is created here and closed by `aclose()` / the async context
    manager.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            settings: Resolved settings (Squash TM URL, token, campaign, enable flag)
            http_client: Optional pre-configured AsyncClient
        """
        self.enabled = settings.report_to_squash
        self.campaign_id = settings.squash_tm.campaign_id

        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(
            base_url=f"{settings.squash_tm.url}{API_PATH}",
            headers={
                "Authorization": f"Bearer {settings.squash_tm.api_token}",
                "Content-Type": "application/json",
            },
            timeout=REQUEST_TIMEOUT,
        )

        if self.enabled:
            logger.info(f"Squash TM integration enabled for campaign: {self.campaign_id}")

    async def __aenter__(self) -> "SquashTMClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def is_enabled(self) -> bool:
        return self.enabled

    async def report_result(self, result: SquashExecutionResult) -> bool:
        """
        Record one execution in Squash TM.

        Returns:
            True if the execution status was accepted, False when disabled,
            unlinked, or the call failed
        """
        if not self.enabled:
            logger.debug("Squash TM reporting is disabled")
            return False

        test_case_id = extract_test_case_id(result.squash_id)
        if not test_case_id:
            logger.warning(f"Could not extract test case ID from: {result.squash_id}")
            return False

        logger.info(f"Reporting result to Squash TM: {result.squash_id} - {result.status.value}")

        payload = {
            "executionStatus": result.status.value,
            "comment": build_comment(result),
            "lastExecutedOn": datetime.now(timezone.utc).isoformat(),
        }

        try:
            response = await self.client.patch(
                f"/iterations/{test_case_id}/test-plan",
                json=payload,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to report to Squash TM: {e}")
            return False

        if result.screenshot_path and result.status == SquashTestStatus.FAILED:
            await self.upload_screenshot(test_case_id, result.screenshot_path)

        logger.info(f"Successfully reported result for: {result.squash_id}")
        return True

    async def upload_screenshot(
        self,
        test_case_id: str,
        screenshot_path: Union[str, Path],
    ) -> bool:
        """Attach a PNG screenshot to a test case. Failures are logged only."""
        path = Path(screenshot_path)
        if not path.is_file():
            logger.warning(f"Screenshot file not found: {path}")
            return False

        try:
            content = base64.b64encode(path.read_bytes()).decode("ascii")
            response = await self.client.post(
                f"/iterations/{test_case_id}/attachments",
                json={
                    "name": f"failure-screenshot-{int(time.time() * 1000)}.png",
                    "content": content,
                    "contentType": "image/png",
                },
            )
            response.raise_for_status()
        except (httpx.HTTPError, OSError) as e:
            logger.error(f"Failed to upload screenshot: {e}")
            return False

        logger.info(f"Screenshot uploaded for test case: {test_case_id}")
        return True

    async def report_ddt_results(self, results: Iterable[SquashExecutionResult]) -> List[bool]:
        """
        Report data-driven iterations one after another.

        Each result gets its position as iteration index. There is no
        rollback: earlier iterations stay reported if a later one fails.
        """
        if not self.enabled:
            return []

        results = list(results)
        logger.info(f"Reporting {len(results)} DDT iteration results")

        outcomes = []
        for index, result in enumerate(results):
            outcomes.append(await self.report_result(replace(result, iteration_index=index)))
        return outcomes

    async def report_results(self, results: Iterable[SquashExecutionResult]) -> int:
        """Report independent results sequentially; returns how many succeeded."""
        if not self.enabled:
            return 0
        reported = 0
        for result in results:
            if await self.report_result(result):
                reported += 1
        return reported

    async def get_campaign_status(self) -> Optional[Any]:
        try:
            response = await self.client.get(f"/campaigns/{self.campaign_id}")
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to get campaign status: {e}")
            return None


__all__ = [
    "SquashExecutionResult",
    "SquashTMClient",
    "SquashTestStatus",
    "build_comment",
    "extract_test_case_id",
    "parse_squash_id",
    "results_from_report",
    "squash_tm",
    "to_squash_status",
]

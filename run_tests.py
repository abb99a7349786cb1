#!/usr/bin/env python3
# ================================================================================
# Test Runner Script
# ================================================================================
#
# This is the main entry point for executing test suites.
#
# Features:
#   - Run UI, API or unit tests (or all of them)
#   - Live tests against the real sites with --live
#   - Browser selection through BROWSER / HEADLESS
#   - Allure report generation
#   - Publishing the JSON report by e-mail and to Squash TM
#
# Usage:
#   python run_tests.py --suite unit
#   python run_tests.py --suite ui --live --browser firefox --no-headless
#   python run_tests.py --suite all --live --tags smoke --parallel 4 --publish
#
# ================================================================================

import argparse
import os
import shutil
import subprocess
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger


# Configure logging
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    level="INFO"
)


SUITE_PATHS = {
    "ui": "testsuites/ui_testing/tests",
    "api": "testsuites/api_testing/tests",
    "unit": "testsuites/unit",
    "all": "testsuites/",
}


class TestRunner:
    """
    Orchestrates one test run: pytest, Allure report, publishing.
    """

    def __init__(
        self,
        suite: str = "all",
        tags: Optional[List[str]] = None,
        parallel: int = 1,
        browser: str = "chromium",
        headless: bool = True,
        live: bool = False,
        allure_report: bool = True,
        publish: bool = False,
        verbose: bool = False
    ):
        """
        Args:
            suite: Test suite to run - "ui", "api", "unit", "all"
            tags: Pytest markers to filter tests
            parallel: Number of parallel workers (pytest-xdist)
            browser: Browser for UI tests - "chromium", "firefox", "webkit"
            headless: Run browser in headless mode
            live: Run tests that need the real application
            allure_report: Generate Allure report
            publish: Send the e-mail report and push results to Squash TM
            verbose: Enable verbose output
        """
        self.suite = suite
        self.tags = tags or []
        self.parallel = parallel
        self.browser = browser
        self.headless = headless
        self.live = live
        self.allure_report = allure_report
        self.publish = publish
        self.verbose = verbose

        # Paths
        self.root_dir = Path(__file__).parent
        self.reports_dir = self.root_dir / "reports"
        self.json_report = self.reports_dir / "test-results.json"
        self.allure_results = self.reports_dir / "allure-results"
        self.allure_report_dir = self.reports_dir / "allure-report"

    def run(self) -> int:
        """
        Execute the test run.

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        logger.info("=" * 60)
        logger.info("Starting Test Execution")
        logger.info("=" * 60)
        logger.info(f"Suite: {self.suite}")
        logger.info(f"Tags: {self.tags or 'All'}")
        logger.info(f"Live: {self.live}")
        logger.info(f"Parallel Workers: {self.parallel}")
        if self.suite in ["ui", "all"]:
            logger.info(f"Browser: {self.browser}")
            logger.info(f"Headless: {self.headless}")
        logger.info("=" * 60)

        self._prepare_environment()

        cmd = self._build_pytest_command()
        logger.info(f"Executing: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, cwd=str(self.root_dir), env=self._build_env())
            exit_code = result.returncode
        except OSError as e:
            logger.error(f"Test execution failed: {e}")
            exit_code = 1

        if self.allure_report:
            self._generate_allure_report()

        if self.publish:
            publish_code = self._publish_report()
            exit_code = exit_code or publish_code

        self._print_summary(exit_code)

        return exit_code

    def _prepare_environment(self) -> None:
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        self.allure_results.mkdir(parents=True, exist_ok=True)
        logger.debug("Environment prepared")

    def _build_env(self) -> Dict[str, str]:
        """Browser options reach the test process through settings env vars."""
        env = dict(os.environ)
        env["BROWSER"] = self.browser
        env["HEADLESS"] = "true" if self.headless else "false"
        return env

    def _build_pytest_command(self) -> List[str]:
        """Build the pytest command with all options."""
        cmd = [sys.executable, "-m", "pytest", SUITE_PATHS[self.suite]]

        if self.tags:
            cmd.extend(["-m", " or ".join(self.tags)])

        if self.live:
            cmd.append("--live")

        if self.parallel > 1:
            cmd.extend(["-n", str(self.parallel)])

        cmd.extend(["--json-report-file", str(self.json_report)])

        if self.allure_report:
            cmd.extend(["--alluredir", str(self.allure_results)])

        cmd.append("-v" if self.verbose else "-q")
        return cmd

    def _generate_allure_report(self) -> None:
        """Generate Allure HTML report."""
        logger.info("Generating Allure report...")

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        report_path = self.reports_dir / f"allure-report-{timestamp}"

        try:
            subprocess.run([
                "allure", "generate",
                str(self.allure_results),
                "-o", str(report_path),
                "--clean"
            ], check=True)
        except FileNotFoundError:
            logger.warning("Allure CLI not found. Please install Allure to generate reports.")
            return
        except subprocess.CalledProcessError as e:
            logger.error(f"Failed to generate Allure report: {e}")
            return

        # Create/update latest symlink
        latest_link = self.allure_report_dir
        if latest_link.is_symlink():
            latest_link.unlink()
        elif latest_link.exists():
            shutil.rmtree(latest_link)
        latest_link.symlink_to(report_path.name)

        logger.info(f"Report generated: {report_path}")
        logger.info(f"Latest report: {self.allure_report_dir}")

    def _publish_report(self) -> int:
        logger.info("Publishing test report...")
        cmd = [
            sys.executable, "-m", "e2e_tools.report_tools.publish_report",
            "--report", str(self.json_report),
            "--attach", str(self.json_report), str(self.reports_dir / "test-execution.log"),
        ]
        return subprocess.run(cmd, cwd=str(self.root_dir)).returncode

    def _print_summary(self, exit_code: int) -> None:
        logger.info("=" * 60)
        if exit_code == 0:
            logger.info("✅ TEST EXECUTION COMPLETED SUCCESSFULLY")
        else:
            logger.error(f"❌ TEST EXECUTION FAILED (exit code: {exit_code})")

        logger.info(f"📄 JSON report: {self.json_report}")
        if self.allure_report:
            logger.info(f"📊 Report available at: {self.allure_report_dir}")

        logger.info("=" * 60)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Sauce E2E Test Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Offline unit tests
  python run_tests.py --suite unit

  # Smoke tests against the real sites, in parallel
  python run_tests.py --suite all --live --tags smoke --parallel 4

  # UI tests with visible browser
  python run_tests.py --suite ui --live --no-headless --browser firefox

  # Full run, then e-mail the report and push results to Squash TM
  python run_tests.py --suite all --live --publish
        """
    )

    parser.add_argument(
        "--suite",
        choices=list(SUITE_PATHS),
        default="all",
        help="Test suite to run (default: all)"
    )

    parser.add_argument(
        "--tags",
        nargs="+",
        default=[],
        help="Pytest markers to filter tests (e.g., P0 smoke regression)"
    )

    parser.add_argument(
        "--parallel", "-n",
        type=int,
        default=1,
        help="Number of parallel workers (default: 1)"
    )

    parser.add_argument(
        "--browser",
        choices=["chromium", "firefox", "webkit"],
        default=os.getenv("BROWSER", "chromium"),
        help="Browser for UI tests (default: chromium)"
    )

    parser.add_argument(
        "--no-headless",
        action="store_true",
        help="Run browser in headed mode (visible)"
    )

    parser.add_argument(
        "--live",
        action="store_true",
        help="Run tests against the real application and API"
    )

    parser.add_argument(
        "--no-allure",
        action="store_true",
        help="Disable Allure report generation"
    )

    parser.add_argument(
        "--publish",
        action="store_true",
        help="E-mail the report and push results to Squash TM after the run"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    args = parser.parse_args()

    runner = TestRunner(
        suite=args.suite,
        tags=args.tags,
        parallel=args.parallel,
        browser=args.browser,
        headless=not args.no_headless,
        live=args.live,
        allure_report=not args.no_allure,
        publish=args.publish,
        verbose=args.verbose
    )

    exit_code = runner.run()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

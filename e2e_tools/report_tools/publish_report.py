#!/usr/bin/env python3
# ================================================================================
# Report Publisher
# ================================================================================
#
# Publishes a finished test run from its JSON report:
#   - E-mail: HTML summary to the configured recipients
#   - Squash TM: status of every test linked with @squashTM:<ID>
#
# Usage:
#   python -m e2e_tools.report_tools.publish_report
#   python -m e2e_tools.report_tools.publish_report --report reports/test-results.json --attach reports/test-execution.log
#   python -m e2e_tools.report_tools.publish_report --no-email
#
# Exit code is 1 when the report cannot be read or the e-mail cannot be sent.
# Squash TM problems are logged but never change the exit code.
#
# ================================================================================

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from e2e_tools.common import init_logger
from e2e_tools.common.settings import PROJECT_ROOT, Settings, get_settings
from e2e_tools.squash_integration import SquashTMClient, results_from_report

from .email_reporter import EmailReporter
from .result_parser import DEFAULT_PROJECT_NAME, ReportData, ReportError, load_report, parse_report


DEFAULT_REPORT_PATH = PROJECT_ROOT / "reports" / "test-results.json"


async def send_email(
    data: ReportData,
    settings: Settings,
    attachments: Optional[List[str]] = None,
    template_path: Optional[Path] = None,
) -> bool:
    reporter = EmailReporter(settings.email, template_path=template_path)

    if not await reporter.verify_connection():
        logger.error("Could not connect to SMTP server")
        return False

    return await reporter.send_report(data, attachments)


async def push_to_squash(data: ReportData, settings: Settings) -> int:
    """Report linked results to Squash TM; returns the number accepted."""
    if not settings.report_to_squash:
        logger.info("Squash TM reporting is disabled (REPORT_TO_SQUASH=false)")
        return 0

    executions = results_from_report(data.tests)
    logger.info(f"Found {len(executions)} tests linked to Squash TM")

    async with SquashTMClient(settings) as client:
        reported = await client.report_results(executions)

    logger.info(f"Squash TM: {reported}/{len(executions)} results reported")
    return reported


async def publish(
    report_path: Path,
    settings: Settings,
    email: bool = True,
    squash: bool = True,
    attachments: Optional[List[str]] = None,
    template_path: Optional[Path] = None,
    project_name: str = DEFAULT_PROJECT_NAME,
) -> int:
    """
    Publish one report.

    Returns:
        Process exit code
    """
    logger.info(f"Parsing report from: {report_path}")
    try:
        report = load_report(report_path)
    except ReportError as e:
        logger.error(f"Failed to send report: {e}")
        return 1

    data = parse_report(
        report,
        environment=settings.test_env,
        project_name=project_name,
        build_url=settings.build_url,
    )
    summary = data.summary
    logger.info(f"Found {summary.total} tests")
    logger.info(
        f"Results: {summary.passed} passed, {summary.failed} failed, {summary.skipped} skipped"
    )

    exit_code = 0

    if email:
        if await send_email(data, settings, attachments, template_path):
            logger.info("✅ Email report sent successfully!")
        else:
            logger.error("Failed to send email report")
            exit_code = 1

    if squash:
        await push_to_squash(data, settings)

    return exit_code


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Publish a test run to e-mail and Squash TM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # E-mail the default report and push linked results to Squash TM
  python -m e2e_tools.report_tools.publish_report

  # Only Squash TM
  python -m e2e_tools.report_tools.publish_report --no-email
        """
    )

    parser.add_argument(
        "--report",
        type=Path,
        default=DEFAULT_REPORT_PATH,
        help=f"JSON report to publish (default: {DEFAULT_REPORT_PATH})"
    )

    parser.add_argument(
        "--attach",
        nargs="+",
        default=[],
        help="Files to attach to the e-mail (missing files are skipped)"
    )

    parser.add_argument(
        "--template",
        type=Path,
        default=None,
        help="HTML e-mail template (default: templates/email-report.html)"
    )

    parser.add_argument(
        "--project-name",
        default=DEFAULT_PROJECT_NAME,
        help="Project name shown in the e-mail"
    )

    parser.add_argument(
        "--no-email",
        action="store_true",
        help="Do not send the e-mail report"
    )

    parser.add_argument(
        "--no-squash",
        action="store_true",
        help="Do not report to Squash TM"
    )

    args = parser.parse_args(argv)

    init_logger()
    logger.info("Starting report publishing...")

    exit_code = asyncio.run(publish(
        args.report,
        get_settings(),
        email=not args.no_email,
        squash=not args.no_squash,
        attachments=args.attach,
        template_path=args.template,
        project_name=args.project_name,
    ))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

"""
================================================================================
E-mail Reporter
================================================================================

Sends the test execution report as an HTML e-mail over SMTP.

Features:
    - HTML template with {{PLACEHOLDER}} substitution
      (templates/email-report.html, built-in default when absent)
    - Summary subject line with pass rate and status glyph
    - Multiple recipients and file attachments
    - SMTP connection check before sending

Reporting must never break a test run: transport errors are logged and
reported as False.

================================================================================
"""

from __future__ import annotations

import html
import math
import re
from datetime import datetime, timezone
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import aiosmtplib
from loguru import logger

from e2e_tools.common.settings import PROJECT_ROOT, EmailSettings

from .result_parser import ReportData, ResultSummary, TestResult, TestStatus


DEFAULT_TEMPLATE_PATH = PROJECT_ROOT / "templates" / "email-report.html"

SMTP_TIMEOUT = 30

PLACEHOLDER_PATTERN = re.compile(r"\{\{([A-Z_]+)\}\}")

STATUS_COLORS: Dict[str, str] = {
    TestStatus.PASSED.value: "#28a745",
    TestStatus.FAILED.value: "#dc3545",
    TestStatus.SKIPPED.value: "#856404",
}

STATUS_EMOJIS: Dict[str, str] = {
    TestStatus.PASSED.value: "✅",
    TestStatus.FAILED.value: "❌",
    TestStatus.SKIPPED.value: "⏭️",
}

ROW_TEMPLATE = """
      <tr>
        <td style="padding: 8px; border-bottom: 1px solid #ddd;">{name}</td>
        <td style="padding: 8px; border-bottom: 1px solid #ddd; text-align: center;">
          <span style="color: {color}; font-weight: bold;">
            {emoji} {status}
          </span>
        </td>
        <td style="padding: 8px; border-bottom: 1px solid #ddd; text-align: center;">{duration}ms</td>
        <td style="padding: 8px; border-bottom: 1px solid #ddd; color: #dc3545;">{error}</td>
      </tr>
"""

DEFAULT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>Test Report</title>
</head>
<body style="font-family: Arial, sans-serif; margin: 0; padding: 20px; background-color: #f5f5f5;">
  <div style="max-width: 800px; margin: 0 auto; background-color: #fff; border-radius: 8px; overflow: hidden;">
    <div style="background-color: {{STATUS_COLOR}}; color: white; padding: 20px; text-align: center;">
      <h1 style="margin: 0;">{{STATUS_EMOJI}} {{PROJECT_NAME}}</h1>
      <p style="margin: 10px 0 0 0; opacity: 0.9;">Environment: {{ENVIRONMENT}}</p>
    </div>

    <div style="padding: 20px;">
      <h2 style="color: #333; border-bottom: 2px solid #eee; padding-bottom: 10px;">Summary</h2>
      <table style="width: 100%; text-align: center;">
        <tr>
          <td><strong style="font-size: 28px;">{{TOTAL_TESTS}}</strong><br>Total Tests</td>
          <td><strong style="font-size: 28px; color: #28a745;">{{PASSED}}</strong><br>Passed</td>
          <td><strong style="font-size: 28px; color: #dc3545;">{{FAILED}}</strong><br>Failed</td>
          <td><strong style="font-size: 28px; color: #856404;">{{SKIPPED}}</strong><br>Skipped</td>
        </tr>
      </table>
      <div style="margin-top: 20px; padding: 15px; background: #e9ecef; border-radius: 8px;">
        <p style="margin: 5px 0;"><strong>Pass Rate:</strong> {{PASS_RATE}}%</p>
        <p style="margin: 5px 0;"><strong>Duration:</strong> {{DURATION}}</p>
        <p style="margin: 5px 0;"><strong>Started:</strong> {{START_TIME}}</p>
        <p style="margin: 5px 0;"><strong>Ended:</strong> {{END_TIME}}</p>
      </div>
    </div>

    <div style="padding: 20px;">
      <h2 style="color: #333; border-bottom: 2px solid #eee; padding-bottom: 10px;">Test Results</h2>
      <table style="width: 100%; border-collapse: collapse;">
        <thead>
          <tr style="background-color: #f8f9fa;">
            <th style="padding: 12px; text-align: left;">Test Name</th>
            <th style="padding: 12px; text-align: center;">Status</th>
            <th style="padding: 12px; text-align: center;">Duration</th>
            <th style="padding: 12px; text-align: left;">Error</th>
          </tr>
        </thead>
        <tbody>
          {{TEST_RESULTS_ROWS}}
        </tbody>
      </table>
    </div>

    <div style="background-color: #f8f9fa; padding: 15px; text-align: center; color: #666;">
      <p style="margin: 0;">Generated by Sauce E2E Framework</p>
      <p style="margin: 5px 0 0 0;"><a href="{{BUILD_URL}}" style="color: #007bff;">View Full Report</a></p>
    </div>
  </div>
</body>
</html>
"""


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def pass_rate(summary: ResultSummary) -> int:
    """Percentage of passed tests, 0 for an empty run."""
    if summary.total == 0:
        return 0
    return _round_half_up(summary.passed / summary.total * 100)


def duration_minutes(summary: ResultSummary) -> int:
    return _round_half_up(summary.duration_ms / 60000)


def _iso(value: datetime) -> str:
    return (
        value.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def render_template(template: str, values: Dict[str, str]) -> str:
    """
    Replace every {{NAME}} with values[NAME] in one pass.

    Unknown placeholders are left as they are. Substituted text is never
    re-scanned, so the result does not depend on replacement order.
    """
    return PLACEHOLDER_PATTERN.sub(
        lambda match: values.get(match.group(1), match.group(0)),
        template,
    )


class EmailReporter:
    """
    HTML e-mail reporter over SMTP.

    Usage:
        reporter = EmailReporter(get_settings().email)
        if await reporter.verify_connection():
            await reporter.send_report(report_data, ["reports/test-results.json"])
    """

    def __init__(
        self,
        email_settings: EmailSettings,
        template_path: Optional[Union[str, Path]] = None,
    ):
        """
        Args:
            email_settings: SMTP host/credentials, sender and recipients
            template_path: HTML template. Defaults to templates/email-report.html.
        """
        self.settings = email_settings
        self.template_path = Path(template_path) if template_path else DEFAULT_TEMPLATE_PATH

    # =========================================================================
    # Rendering
    # =========================================================================

    def generate_subject(self, summary: ResultSummary) -> str:
        status = "❌ FAILED" if summary.failed > 0 else "✅ PASSED"
        return (
            f"{status} | Test Report | {pass_rate(summary)}% Pass Rate | "
            f"{summary.environment.upper()} | {summary.total} Tests"
        )

    def load_template(self) -> str:
        if self.template_path.exists():
            try:
                return self.template_path.read_text(encoding="utf-8")
            except UnicodeDecodeError as e:
                logger.warning(f"Template {self.template_path} is not valid UTF-8 ({e}), using built-in template")
                return DEFAULT_TEMPLATE
        logger.debug(f"Template not found at {self.template_path}, using built-in template")
        return DEFAULT_TEMPLATE

    def render_rows(self, tests: Iterable[TestResult]) -> str:
        rows = []
        for test in tests:
            status = test.status.value
            rows.append(ROW_TEMPLATE.format(
                name=html.escape(test.name),
                color=STATUS_COLORS.get(status, "#666"),
                emoji=STATUS_EMOJIS.get(status, "❓"),
                status=status.upper(),
                duration=test.duration_ms,
                error=html.escape(test.error) if test.error else "-",
            ))
        return "".join(rows)

    def render_html(self, data: ReportData) -> str:
        """Render the HTML report body."""
        summary = data.summary
        failed = summary.failed > 0

        values = {
            "PROJECT_NAME": data.project_name or "Playwright E2E Tests",
            "ENVIRONMENT": summary.environment.upper(),
            "TOTAL_TESTS": str(summary.total),
            "PASSED": str(summary.passed),
            "FAILED": str(summary.failed),
            "SKIPPED": str(summary.skipped),
            "PASS_RATE": str(pass_rate(summary)),
            "DURATION": f"{duration_minutes(summary)} min",
            "START_TIME": _iso(summary.start_time),
            "END_TIME": _iso(summary.end_time),
            "STATUS_EMOJI": "❌" if failed else "✅",
            "STATUS_COLOR": "#dc3545" if failed else "#28a745",
            "BUILD_URL": data.build_url or "#",
            "TEST_RESULTS_ROWS": self.render_rows(data.tests),
        }
        return render_template(self.load_template(), values)

    def prepare_attachments(self, attachment_paths: Optional[Iterable[Union[str, Path]]]) -> List[Path]:
        """Keep only attachments that exist on disk."""
        existing = []
        for path in attachment_paths or []:
            path = Path(path)
            if path.is_file():
                existing.append(path)
            else:
                logger.debug(f"Skipping missing attachment: {path}")
        return existing

    def build_message(
        self,
        data: ReportData,
        attachment_paths: Optional[Iterable[Union[str, Path]]] = None,
    ) -> MIMEMultipart:
        msg = MIMEMultipart("mixed")
        msg["Subject"] = self.generate_subject(data.summary)
        msg["From"] = self.settings.from_address
        msg["To"] = ", ".join(self.settings.recipients)
        msg.attach(MIMEText(self.render_html(data), "html", "utf-8"))

        for path in self.prepare_attachments(attachment_paths):
            part = MIMEApplication(path.read_bytes(), Name=path.name)
            part["Content-Disposition"] = f'attachment; filename="{path.name}"'
            msg.attach(part)

        return msg

    # =========================================================================
    # Transport
    # =========================================================================

    async def send_report(
        self,
        data: ReportData,
        attachment_paths: Optional[Iterable[Union[str, Path]]] = None,
    ) -> bool:
        """
        Send the report e-mail.

        Returns:
            True when the SMTP server accepted the message, False otherwise
        """
        recipients = ", ".join(self.settings.recipients)
        try:
            logger.info("Preparing email report...")
            msg = self.build_message(data, attachment_paths)

            await aiosmtplib.send(
                msg,
                hostname=self.settings.host,
                port=self.settings.port,
                username=self.settings.user or None,
                password=self.settings.password or None,
                use_tls=self.settings.secure,
                timeout=SMTP_TIMEOUT,
            )

            logger.info(f"Report sent to: {recipients}")
            return True
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email report: {e}")
            return False

    async def verify_connection(self) -> bool:
        """Connect (and log in when credentials are set) without sending."""
        smtp = aiosmtplib.SMTP(
            hostname=self.settings.host,
            port=self.settings.port,
            use_tls=self.settings.secure,
            timeout=SMTP_TIMEOUT,
        )
        try:
            await smtp.connect()
            if self.settings.user:
                await smtp.login(self.settings.user, self.settings.password)
            await smtp.quit()
            logger.info("SMTP connection verified")
            return True
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP connection failed: {e}")
            return False
        finally:
            if smtp.is_connected:
                smtp.close()


__all__ = [
    "DEFAULT_TEMPLATE",
    "EmailReporter",
    "duration_minutes",
    "pass_rate",
    "render_template",
]

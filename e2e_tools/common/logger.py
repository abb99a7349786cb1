"""
================================================================================
Test Execution Logger
================================================================================

Loguru setup plus a context-bound logger for test code.

Console lines carry a severity prefix:
    🔍 DEBUG | ℹ️  INFO | ⚠️  WARN | ❌ ERROR

Test lifecycle helpers:
    🚀 Test Started / ✅ PASS / ❌ FAIL / ⏭️  SKIP

Usage:
    from e2e_tools.common import create_logger

    log = create_logger("LoginTests")
    log.test_start("Standard user can login")
    log.step(1, "Open login page")
    log.test_pass("Standard user can login", duration_ms=812)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from .settings import get_settings


DEFAULT_CONTEXT = "Test"

_LEVEL_PREFIXES: Dict[str, str] = {
    "TRACE": "<dim>🔍 TRACE</dim>",
    "DEBUG": "<dim>🔍 DEBUG</dim>",
    "INFO": "<blue>ℹ️  INFO</blue>",
    "SUCCESS": "<green>✅ OK</green>",
    "WARNING": "<yellow>⚠️  WARN</yellow>",
    "ERROR": "<red>❌ ERROR</red>",
    "CRITICAL": "<red><bold>❌ CRITICAL</bold></red>",
}

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} [{level}] [{extra[context]}] {message}"

_logger_initialized = False


def _console_format(record: Dict[str, Any]) -> str:
    prefix = _LEVEL_PREFIXES.get(record["level"].name, "{level}")
    return (
        "<green>{time:HH:mm:ss}</green> "
        + prefix
        + " <cyan>[{extra[context]}]</cyan> {message}\n{exception}"
    )


def init_logger(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """
    Initializes the loguru logger with console and file sinks.

    Safe to call repeatedly; only the first call configures sinks.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config value.
        log_file: File to write plain-text logs to. Defaults to config value.
    """
    global _logger_initialized

    if _logger_initialized:
        return

    log_settings = get_settings().logging
    level = (level or log_settings.level).upper()
    log_file = log_file or log_settings.file

    logger.remove()
    logger.configure(extra={"context": DEFAULT_CONTEXT})
    logger.add(
        sys.stderr,
        level=level,
        format=_console_format,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=level,
            format=FILE_FORMAT,
            rotation=log_settings.rotation,
            retention=log_settings.retention,
            encoding="utf-8",
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {level}")


def reset_logger() -> None:
    """Forget initialization so the next init_logger() reconfigures sinks."""
    global _logger_initialized
    _logger_initialized = False


class TestLogger:
    """
    Logger bound to a context name (page, suite, integration).

    Every line is emitted through loguru with `extra["context"]` set, so it
    lands in both the console and the execution log file.
    """

    # Not a test class, despite the name
    __test__ = False

    def __init__(self, context: str = DEFAULT_CONTEXT):
        self.context = context
        self._log = logger.bind(context=context)

    def test_start(self, test_name: str) -> None:
        self._log.info(f"🚀 Test Started: {test_name}")

    def test_pass(self, test_name: str, duration_ms: Optional[int] = None) -> None:
        duration = f" ({duration_ms}ms)" if duration_ms else ""
        self._log.info(f"✅ PASS: {test_name}{duration}")

    def test_fail(self, test_name: str, error: Optional[str] = None) -> None:
        detail = f" - {error}" if error else ""
        self._log.error(f"❌ FAIL: {test_name}{detail}")

    def test_skip(self, test_name: str, reason: Optional[str] = None) -> None:
        detail = f" - {reason}" if reason else ""
        self._log.warning(f"⏭️  SKIP: {test_name}{detail}")

    def step(self, step_number: int, description: str) -> None:
        self._log.info(f"Step {step_number}: {description}")

    def action(self, action: str) -> None:
        self._log.debug(f"→ {action}")

    def assertion(self, description: str) -> None:
        self._log.debug(f"✓ {description}")

    def debug(self, message: str) -> None:
        self._log.debug(message)

    def info(self, message: str) -> None:
        self._log.info(message)

    def warning(self, message: str) -> None:
        self._log.warning(message)

    def error(self, message: str, exc: Optional[BaseException] = None) -> None:
        detail = f" | {exc}" if exc else ""
        self._log.error(f"{message}{detail}")


def create_logger(context: Optional[str] = None) -> TestLogger:
    """Create a logger bound to the given context."""
    init_logger()
    return TestLogger(context or DEFAULT_CONTEXT)


__all__ = [
    "TestLogger",
    "create_logger",
    "init_logger",
    "reset_logger",
]
